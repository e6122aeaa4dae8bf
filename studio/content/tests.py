"""
Test suite for the public content module
Tests: public reads vs staff writes, article slugs and publishing, services, categories, partners,
homepage copy, About page
"""
from django.test import TestCase
from rest_framework import status
from studio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from studio.core.models import AuditLog
from studio.content.models import (
    Article, Service, Category, Partner, HomepageContent, AboutPrinciple, AboutProcessStep, AboutTeamMember,
)
from studio.content.serializers import slugify_title


class ContentPermissionTests(TestCase):
    """Public site reads, studio admins write"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.editor = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.project = TestDataFactory.create_project(title='Saigon Loft', featured=True)

    def test_anonymous_can_list_projects(self):
        response = self.client.get('/api/projects')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_anonymous_cannot_create_project(self):
        response = self.client.post('/api/projects', {'title': 'X', 'category': 'residential'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_non_admin_cannot_create_project(self):
        self.client.authenticate_user(self.editor)
        response = self.client.post('/api/projects', {'title': 'X', 'category': 'residential'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_project_with_audit_log(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/projects', {
            'title': 'Villa Thao Dien',
            'category': 'architecture',
            'images': ['https://cdn.example.com/a.jpg'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['images'], ['https://cdn.example.com/a.jpg'])
        log = AuditLog.objects.get(model_name='Project', action='create')
        self.assertEqual(log.user, self.admin)

    def test_invalid_project_category(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/projects', {'title': 'X', 'category': 'boat'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('category', response.data['errors'])

    def test_featured_filter(self):
        TestDataFactory.create_project(title='Plain Office', featured=False)
        response = self.client.get('/api/projects', {'featured': 'true'})
        self.assertEqual([p['title'] for p in response.data], ['Saigon Loft'])

    def test_missing_project_is_404(self):
        response = self.client.get('/api/projects/99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ArticleTests(TestCase):
    """Test article slug generation, publishing and view counting"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_slugify_title(self):
        self.assertEqual(slugify_title('  Modern Living: 5 Tips!  '), 'modern-living-5-tips')
        self.assertEqual(slugify_title('Nhà phố'), 'nh-ph')

    def test_slug_generated_from_title(self):
        response = self.client.post('/api/articles', {
            'title': 'Modern Living Rooms',
            'content': 'Body text',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'modern-living-rooms')
        self.assertIsNone(response.data['published_at'])

    def test_published_at_stamped_once(self):
        response = self.client.post('/api/articles', {
            'title': 'Launch', 'content': 'Body', 'status': 'published',
        }, format='json')
        self.assertIsNotNone(response.data['published_at'])
        first_published = Article.objects.get(pk=response.data['id']).published_at

        self.client.patch(f"/api/articles/{response.data['id']}", {'status': 'draft'}, format='json')
        self.client.patch(f"/api/articles/{response.data['id']}", {'status': 'published'}, format='json')
        self.assertEqual(Article.objects.get(pk=response.data['id']).published_at, first_published)

    def test_duplicate_slug_same_language_is_409(self):
        TestDataFactory.create_article(slug='kitchen-ideas', language='en')
        response = self.client.post('/api/articles', {
            'title': 'Kitchen ideas', 'slug': 'kitchen-ideas', 'content': 'Body', 'language': 'en',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('message', response.data)
        self.assertEqual(Article.objects.filter(slug='kitchen-ideas').count(), 1)

    def test_same_slug_other_language_allowed(self):
        TestDataFactory.create_article(slug='kitchen-ideas', language='en')
        response = self.client.post('/api/articles', {
            'title': 'Y tuong bep', 'slug': 'kitchen-ideas', 'content': 'Noi dung', 'language': 'vi',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_by_slug_counts_views_of_published_articles(self):
        article = TestDataFactory.create_article(slug='open-plan', status='published')
        self.client.logout()
        self.client.get('/api/articles/slug/open-plan')
        response = self.client.get('/api/articles/slug/open-plan')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['view_count'], 2)
        article.refresh_from_db()
        self.assertEqual(article.view_count, 2)

    def test_by_slug_draft_not_counted(self):
        TestDataFactory.create_article(slug='wip', status='draft')
        response = self.client.get('/api/articles/slug/wip')
        self.assertEqual(response.data['view_count'], 0)

    def test_by_slug_unknown(self):
        response = self.client.get('/api/articles/slug/nothing-here')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Article not found')

    def test_tags_filter_matches_any(self):
        TestDataFactory.create_article(title='A', tags=['kitchen', 'wood'])
        TestDataFactory.create_article(title='B', tags=['bathroom'])
        TestDataFactory.create_article(title='C', tags=[])
        response = self.client.get('/api/articles', {'tags': 'wood, bathroom'})
        self.assertEqual(sorted(a['title'] for a in response.data), ['A', 'B'])


class HomepageContentTests(TestCase):
    """Test homepage copy defaults and upsert"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()

    def test_defaults_when_nothing_saved(self):
        response = self.client.get('/api/homepage-content', {'language': 'vi'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['language'], 'vi')
        self.assertEqual(response.data['cta_button_text'], 'Start Your Project')

    def test_unsupported_language(self):
        response = self.client.get('/api/homepage-content', {'language': 'fr'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_put_upserts_per_language(self):
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/homepage-content', {'language': 'en', 'hero_title': 'Moderno'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.put('/api/homepage-content', {'language': 'en', 'cta_title': 'Talk to us'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        content = HomepageContent.objects.get(language='en')
        self.assertEqual(content.hero_title, 'Moderno')
        self.assertEqual(content.cta_title, 'Talk to us')
        self.assertEqual(HomepageContent.objects.count(), 1)

    def test_put_requires_language(self):
        self.client.authenticate_user(self.admin)
        response = self.client.put('/api/homepage-content', {'hero_title': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AboutPageTests(TestCase):
    """Test the About page aggregate"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()

    def test_blocks_returned_in_order(self):
        AboutPrinciple.objects.create(title_en='Third', title_vi='Ba', order=3)
        AboutPrinciple.objects.create(title_en='First', title_vi='Mot', order=1)
        AboutPrinciple.objects.create(title_en='Second', title_vi='Hai', order=2)
        AboutProcessStep.objects.create(title_en='Brief', title_vi='Brief', step_number='01', order=0)

        response = self.client.get('/api/about-page')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['title_en'] for p in response.data['principles']], ['First', 'Second', 'Third'])
        self.assertEqual(len(response.data['process_steps']), 1)
        self.assertEqual(response.data['team_members'], [])

    def test_content_upsert_keeps_single_row(self):
        self.client.authenticate_user(self.admin)
        self.client.put('/api/about-content', {'hero_title_en': 'About us'}, format='json')
        self.client.put('/api/about-content', {'hero_title_vi': 'Ve chung toi'}, format='json')
        response = self.client.get('/api/about-page')
        self.assertEqual(response.data['content']['hero_title_en'], 'About us')
        self.assertEqual(response.data['content']['hero_title_vi'], 'Ve chung toi')

    def test_anonymous_cannot_add_team_member(self):
        response = self.client.post('/api/about-team-members', {
            'name': 'Linh', 'position_en': 'Architect', 'position_vi': 'Kien truc su',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_block_update_and_delete(self):
        principle = AboutPrinciple.objects.create(title_en='Light', title_vi='Anh sang', order=1)
        self.client.authenticate_user(self.admin)

        response = self.client.patch(f'/api/about-principles/{principle.pk}', {'order': 5, 'icon': 'sun'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        principle.refresh_from_db()
        self.assertEqual(principle.order, 5)
        self.assertEqual(principle.title_en, 'Light')

        response = self.client.delete(f'/api/about-principles/{principle.pk}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(AboutPrinciple.objects.exists())

    def test_team_member_update_and_delete(self):
        member = AboutTeamMember.objects.create(name='Linh', position_en='Architect', position_vi='Kien truc su')
        self.client.authenticate_user(self.admin)

        response = self.client.put(f'/api/about-team-members/{member.pk}',
                                   {'achievements_en': ['Best villa 2023']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        member.refresh_from_db()
        self.assertEqual(member.achievements_en, ['Best villa 2023'])

        response = self.client.delete(f'/api/about-team-members/{member.pk}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.get(f'/api/about-team-members/{member.pk}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_anonymous_cannot_delete_block(self):
        step = AboutProcessStep.objects.create(title_en='Brief', title_vi='Brief', step_number='01')
        response = self.client.delete(f'/api/about-process-steps/{step.pk}')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertTrue(AboutProcessStep.objects.filter(pk=step.pk).exists())


class CategoryTests(TestCase):
    """Test portfolio/blog categories"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def create_category(self, slug='kitchens', category_type='project', **extra):
        return self.client.post('/api/categories', {
            'name_en': slug.title(), 'name_vi': slug, 'slug': slug, 'type': category_type, **extra,
        }, format='json')

    def test_crud(self):
        response = self.create_category()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        pk = response.data['id']

        response = self.client.patch(f'/api/categories/{pk}', {'name_en': 'Kitchens & Dining'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Category.objects.get(pk=pk).name_en, 'Kitchens & Dining')

        response = self.client.delete(f'/api/categories/{pk}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Category.objects.exists())

    def test_duplicate_slug_same_type_is_409(self):
        self.create_category()
        response = self.create_category()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('message', response.data)
        self.assertEqual(Category.objects.count(), 1)

    def test_same_slug_other_type_allowed(self):
        self.create_category()
        response = self.create_category(category_type='article')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_rename_onto_existing_slug_is_409(self):
        self.create_category(slug='kitchens')
        other = self.create_category(slug='bathrooms')
        response = self.client.patch(f"/api/categories/{other.data['id']}", {'slug': 'kitchens'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_type_and_active_filters(self):
        self.create_category(slug='kitchens')
        self.create_category(slug='news', category_type='article')
        self.create_category(slug='retired', active=False)
        self.client.logout()

        response = self.client.get('/api/categories', {'type': 'project', 'active': 'true'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['slug'] for c in response.data], ['kitchens'])


class ServiceAndPartnerTests(TestCase):
    """Test services and partner logos"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_service_crud(self):
        response = self.client.post('/api/services', {
            'title': 'Interior design', 'description': 'Full interiors', 'icon': 'sofa',
            'features': ['Concept', 'Sourcing'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['features'], ['Concept', 'Sourcing'])
        pk = response.data['id']

        response = self.client.patch(f'/api/services/{pk}', {'active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Service.objects.get(pk=pk).active)

        response = self.client.delete(f'/api/services/{pk}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Service.objects.exists())

    def test_service_active_filter_and_order(self):
        Service.objects.create(title='Architecture', description='x', icon='a', order=2)
        Service.objects.create(title='Interiors', description='x', icon='b', order=1)
        Service.objects.create(title='Retired', description='x', icon='c', active=False)
        self.client.logout()

        response = self.client.get('/api/services', {'active': 'true'})
        self.assertEqual([s['title'] for s in response.data], ['Interiors', 'Architecture'])
        response = self.client.get('/api/services')
        self.assertEqual(len(response.data), 3)

    def test_partner_crud_and_active_filter(self):
        response = self.client.post('/api/partners', {
            'name': 'Hafele', 'website': 'https://www.hafele.com', 'order': 1,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        pk = response.data['id']
        Partner.objects.create(name='Old supplier', active=False)

        response = self.client.get('/api/partners', {'active': 'true'})
        self.assertEqual([p['name'] for p in response.data], ['Hafele'])

        response = self.client.patch(f'/api/partners/{pk}', {'name': 'Hafele Vietnam'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.delete(f'/api/partners/{pk}')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(Partner.objects.count(), 1)

    def test_invalid_partner_website(self):
        response = self.client.post('/api/partners', {'name': 'X', 'website': 'not a url'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('website', response.data['errors'])
