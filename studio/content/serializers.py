import re

from django.utils import timezone
from rest_framework import serializers
from .models import (
    Project, Article, Service, Category, Partner, HomepageContent,
    AboutPageContent, AboutPrinciple, AboutShowcaseService, AboutProcessStep, AboutTeamMember,
)


def slugify_title(title):
    """Lowercase the title and collapse every run of non [a-z0-9] characters into a hyphen"""
    return re.sub(r'[^a-z0-9]+', '-', (title or '').lower()).strip('-')


class StringListField(serializers.ListField):
    child = serializers.CharField(allow_blank=False, trim_whitespace=True)


class ProjectSerializer(serializers.ModelSerializer):
    images = StringListField(required=False)

    class Meta:
        model = Project
        fields = ['id', 'title', 'description', 'category', 'status', 'location', 'area', 'duration',
                  'budget', 'style', 'featured', 'images', 'created_at', 'updated_at']


class ArticleSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=255, required=False, allow_blank=True)
    tags = StringListField(required=False)

    class Meta:
        model = Article
        fields = ['id', 'title', 'slug', 'excerpt', 'content', 'featured_image', 'category', 'tags',
                  'status', 'language', 'featured', 'published_at', 'meta_title', 'meta_description',
                  'meta_keywords', 'view_count', 'created_at', 'updated_at']
        read_only_fields = ['view_count', 'created_at', 'updated_at']
        # (slug, language) uniqueness is enforced by the database and reported as 409
        validators = []

    def validate(self, attrs):
        instance = self.instance
        title = attrs.get('title', instance.title if instance else '')
        if not attrs.get('slug') and (instance is None or 'slug' in attrs):
            attrs['slug'] = slugify_title(title)
            if not attrs['slug']:
                raise serializers.ValidationError({'slug': ['Could not derive a slug from the title.']})

        status = attrs.get('status', instance.status if instance else 'draft')
        already_published = instance is not None and instance.published_at is not None
        if status == 'published' and not attrs.get('published_at') and not already_published:
            attrs['published_at'] = timezone.now()
        return attrs


class ServiceSerializer(serializers.ModelSerializer):
    features = StringListField(required=False)

    class Meta:
        model = Service
        fields = ['id', 'title', 'description', 'icon', 'features', 'order', 'active']


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name_en', 'name_vi', 'slug', 'type', 'description', 'order', 'active',
                  'created_at', 'updated_at']
        validators = []


class PartnerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Partner
        fields = ['id', 'name', 'logo', 'website', 'order', 'active', 'created_at', 'updated_at']


class HomepageContentSerializer(serializers.ModelSerializer):
    class Meta:
        model = HomepageContent
        fields = ['id', 'language', 'hero_title', 'hero_studio', 'hero_tagline',
                  'hero_architecture_label', 'hero_interior_label', 'hero_consultation_text',
                  'featured_badge', 'featured_title', 'featured_description',
                  'stats_projects_label', 'stats_clients_label', 'stats_awards_label',
                  'stats_experience_label', 'cta_title', 'cta_description', 'cta_button_text',
                  'cta_secondary_button_text', 'updated_at']
        # Upsert by language; the unique check must not reject the existing row
        extra_kwargs = {'language': {'validators': []}}


class AboutPageContentSerializer(serializers.ModelSerializer):
    class Meta:
        model = AboutPageContent
        fields = '__all__'


class AboutPrincipleSerializer(serializers.ModelSerializer):
    class Meta:
        model = AboutPrinciple
        fields = '__all__'


class AboutShowcaseServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = AboutShowcaseService
        fields = '__all__'


class AboutProcessStepSerializer(serializers.ModelSerializer):
    class Meta:
        model = AboutProcessStep
        fields = '__all__'


class AboutTeamMemberSerializer(serializers.ModelSerializer):
    achievements_en = StringListField(required=False)
    achievements_vi = StringListField(required=False)

    class Meta:
        model = AboutTeamMember
        fields = '__all__'
