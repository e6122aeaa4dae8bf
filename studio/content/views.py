import logging

from django.db.models import F
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from studio.core.exceptions import NotFoundError, ValidationError
from studio.core.permissions import IsStaffOrReadOnly
from studio.core.utils import create_audit_log, parse_bool, save_or_conflict
from .filters import ProjectFilter, ArticleFilter, CategoryFilter, PartnerFilter
from .models import (
    Project, Article, Service, Category, Partner, HomepageContent,
    AboutPageContent, AboutPrinciple, AboutShowcaseService, AboutProcessStep, AboutTeamMember,
    LANGUAGE_CHOICES,
)
from .serializers import (
    ProjectSerializer, ArticleSerializer, ServiceSerializer, CategorySerializer, PartnerSerializer,
    HomepageContentSerializer, AboutPageContentSerializer, AboutPrincipleSerializer,
    AboutShowcaseServiceSerializer, AboutProcessStepSerializer, AboutTeamMemberSerializer,
)

logger = logging.getLogger('studio.content')

LANGUAGES = [code for code, _ in LANGUAGE_CHOICES]

DEFAULT_HOMEPAGE_CONTENT = {
    'hero_title': 'Moderno Interiors',
    'hero_studio': 'Design',
    'hero_tagline': 'Transforming spaces into extraordinary experiences with sophisticated interior design',
    'hero_architecture_label': 'ARCHITECTURE',
    'hero_interior_label': 'INTERIOR',
    'hero_consultation_text': 'FREE CONSULTATION',
    'featured_badge': 'Featured Projects',
    'featured_title': 'Transforming Spaces',
    'featured_description': 'Discover our latest projects where innovation meets elegance.',
    'stats_projects_label': 'Projects',
    'stats_clients_label': 'Clients',
    'stats_awards_label': 'Awards',
    'stats_experience_label': 'Years',
    'cta_title': 'Ready to Transform Your Space?',
    'cta_description': "Let's collaborate to bring your vision to life.",
    'cta_button_text': 'Start Your Project',
    'cta_secondary_button_text': 'View Our Portfolio',
}


# Project views
@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def project_list_create(request):
    """List portfolio projects (filter by category, featured) or create one"""
    if request.method == 'GET':
        filterset = ProjectFilter(request.query_params, queryset=Project.objects.all())
        serializer = ProjectSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    serializer = ProjectSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    project = serializer.save()
    create_audit_log(
        request=request,
        action='create',
        model_name='Project',
        object_id=project.id,
        object_name=project.title,
        changes={'category': project.category, 'featured': project.featured},
    )
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def project_detail(request, pk):
    """Retrieve, update or delete a project"""
    project = get_object_or_404(Project, pk=pk)

    if request.method == 'GET':
        return Response(ProjectSerializer(project).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProjectSerializer(project, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='Project',
            object_id=project.id,
            object_name=project.title,
            changes=dict(serializer.validated_data),
        )
        return Response(serializer.data)
    else:  # DELETE
        project_id, project_title = project.id, project.title
        project.delete()
        create_audit_log(request=request, action='delete', model_name='Project',
                         object_id=project_id, object_name=project_title)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Article views
@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def article_list_create(request):
    """
    List articles or create a new one.

    Filters: category, featured, status, language, tags (comma separated,
    matches articles carrying any of the given tags).
    """
    if request.method == 'GET':
        filterset = ArticleFilter(request.query_params, queryset=Article.objects.all())
        serializer = ArticleSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    serializer = ArticleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    article = save_or_conflict(serializer, 'An article with this slug already exists for this language.')
    logger.info(f"Article created: {article.slug} ({article.language}) status={article.status}")
    create_audit_log(
        request=request,
        action='create',
        model_name='Article',
        object_id=article.id,
        object_name=article.title,
        changes={'slug': article.slug, 'language': article.language, 'status': article.status},
    )
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def article_detail(request, pk):
    """Retrieve, update or delete an article"""
    article = get_object_or_404(Article, pk=pk)

    if request.method == 'GET':
        return Response(ArticleSerializer(article).data)
    elif request.method in ('PUT', 'PATCH'):
        previous_status = article.status
        serializer = ArticleSerializer(article, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        save_or_conflict(serializer, 'An article with this slug already exists for this language.')
        if previous_status != article.status:
            create_audit_log(
                request=request,
                action='update',
                model_name='Article',
                object_id=article.id,
                object_name=article.title,
                changes={'status': {'old': previous_status, 'new': article.status}},
            )
        return Response(serializer.data)
    else:  # DELETE
        article.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def article_by_slug(request, slug):
    """
    Fetch an article by slug (optionally ?language=en|vi).

    Reading a published article counts as a view; the counter is bumped
    in the database so concurrent readers never lose an increment.
    """
    queryset = Article.objects.filter(slug=slug)
    language = request.query_params.get('language')
    if language:
        queryset = queryset.filter(language=language)
    article = queryset.order_by('id').first()
    if article is None:
        raise NotFoundError('Article not found')

    if article.status == 'published':
        Article.objects.filter(pk=article.pk).update(view_count=F('view_count') + 1)
        article.refresh_from_db()
    return Response(ArticleSerializer(article).data)


# Service views
@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def service_list_create(request):
    """List services (optionally ?active=true) or create a new one"""
    if request.method == 'GET':
        services = Service.objects.all()
        active = parse_bool(request.query_params.get('active'))
        if active is not None:
            services = services.filter(active=active)
        serializer = ServiceSerializer(services, many=True)
        return Response(serializer.data)
    serializer = ServiceSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def service_detail(request, pk):
    """Retrieve, update or delete a service"""
    service = get_object_or_404(Service, pk=pk)

    if request.method == 'GET':
        return Response(ServiceSerializer(service).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ServiceSerializer(service, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        service.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def category_list_create(request):
    """List all categories (filter by type, active) or create a new category"""
    if request.method == 'GET':
        filterset = CategoryFilter(request.query_params, queryset=Category.objects.all())
        serializer = CategorySerializer(filterset.qs, many=True)
        return Response(serializer.data)
    serializer = CategorySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    save_or_conflict(serializer, 'A category with this slug already exists for this type.')
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        return Response(CategorySerializer(category).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        save_or_conflict(serializer, 'A category with this slug already exists for this type.')
        return Response(serializer.data)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Partner views
@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def partner_list_create(request):
    """List all partners or create a new partner"""
    if request.method == 'GET':
        filterset = PartnerFilter(request.query_params, queryset=Partner.objects.all())
        serializer = PartnerSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    serializer = PartnerSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def partner_detail(request, pk):
    """Retrieve, update or delete a partner"""
    partner = get_object_or_404(Partner, pk=pk)

    if request.method == 'GET':
        return Response(PartnerSerializer(partner).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PartnerSerializer(partner, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        partner.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Homepage content
@api_view(['GET', 'PUT'])
@permission_classes([IsStaffOrReadOnly])
def homepage_content(request):
    """
    GET ?language=en|vi returns the stored homepage copy, or the built-in
    defaults when nothing was saved for that language yet.
    PUT upserts the row for the language given in the body.
    """
    if request.method == 'GET':
        language = request.query_params.get('language', 'en')
        if language not in LANGUAGES:
            raise ValidationError({'language': [f"Unsupported language '{language}'."]})
        content = HomepageContent.objects.filter(language=language).first()
        if content is None:
            return Response({'language': language, **DEFAULT_HOMEPAGE_CONTENT})
        return Response(HomepageContentSerializer(content).data)

    language = request.data.get('language')
    if not language:
        raise ValidationError({'language': ['This field is required.']})
    content = HomepageContent.objects.filter(language=language).first()
    serializer = HomepageContentSerializer(content, data=request.data, partial=content is not None)
    serializer.is_valid(raise_exception=True)
    save_or_conflict(serializer, 'Homepage content for this language was saved concurrently.')
    logger.info(f"Homepage content saved for language={language}")
    return Response(serializer.data)


# About page
@api_view(['GET', 'PUT'])
@permission_classes([IsStaffOrReadOnly])
def about_content(request):
    """Read or upsert the single About page copy row"""
    content = AboutPageContent.load()
    if request.method == 'GET':
        return Response(AboutPageContentSerializer(content or AboutPageContent()).data)
    serializer = AboutPageContentSerializer(content, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


def _block_list_create(request, model, serializer_class):
    if request.method == 'GET':
        serializer = serializer_class(model.objects.all(), many=True)
        return Response(serializer.data)
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data, status=status.HTTP_201_CREATED)


def _block_detail(request, model, serializer_class, pk):
    block = get_object_or_404(model, pk=pk)
    if request.method == 'GET':
        return Response(serializer_class(block).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = serializer_class(block, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        block.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def about_principle_list_create(request):
    return _block_list_create(request, AboutPrinciple, AboutPrincipleSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def about_principle_detail(request, pk):
    return _block_detail(request, AboutPrinciple, AboutPrincipleSerializer, pk)


@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def about_showcase_service_list_create(request):
    return _block_list_create(request, AboutShowcaseService, AboutShowcaseServiceSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def about_showcase_service_detail(request, pk):
    return _block_detail(request, AboutShowcaseService, AboutShowcaseServiceSerializer, pk)


@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def about_process_step_list_create(request):
    return _block_list_create(request, AboutProcessStep, AboutProcessStepSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def about_process_step_detail(request, pk):
    return _block_detail(request, AboutProcessStep, AboutProcessStepSerializer, pk)


@api_view(['GET', 'POST'])
@permission_classes([IsStaffOrReadOnly])
def about_team_member_list_create(request):
    return _block_list_create(request, AboutTeamMember, AboutTeamMemberSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaffOrReadOnly])
def about_team_member_detail(request, pk):
    return _block_detail(request, AboutTeamMember, AboutTeamMemberSerializer, pk)


@api_view(['GET'])
@permission_classes([AllowAny])
def about_page(request):
    """Everything the About page renders, each list in display order"""
    content = AboutPageContent.load()
    return Response({
        'content': AboutPageContentSerializer(content or AboutPageContent()).data,
        'principles': AboutPrincipleSerializer(AboutPrinciple.objects.all(), many=True).data,
        'showcase_services': AboutShowcaseServiceSerializer(AboutShowcaseService.objects.all(), many=True).data,
        'process_steps': AboutProcessStepSerializer(AboutProcessStep.objects.all(), many=True).data,
        'team_members': AboutTeamMemberSerializer(AboutTeamMember.objects.all(), many=True).data,
    })
