import django_filters
from studio.core.utils import parse_bool
from .models import Project, Article, Category, Partner


class BooleanStringFilter(django_filters.CharFilter):
    """Accepts 'true'/'false' and ignores any other value instead of rejecting the request"""

    def filter(self, qs, value):
        parsed = parse_bool(value)
        if parsed is None:
            return qs
        return qs.filter(**{self.field_name: parsed})


class ProjectFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name='category', lookup_expr='exact')
    featured = BooleanStringFilter(field_name='featured')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')

    class Meta:
        model = Project
        fields = ['category', 'featured', 'status']


class ArticleFilter(django_filters.FilterSet):
    """Blog listing filters; tags is a comma-separated list matching any tag"""
    category = django_filters.CharFilter(field_name='category', lookup_expr='exact')
    featured = BooleanStringFilter(field_name='featured')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    language = django_filters.CharFilter(field_name='language', lookup_expr='exact')
    tags = django_filters.CharFilter(method='filter_tags', label='Tags')

    class Meta:
        model = Article
        fields = ['category', 'featured', 'status', 'language', 'tags']

    def filter_tags(self, queryset, name, value):
        wanted = {tag.strip() for tag in value.split(',') if tag.strip()}
        if not wanted:
            return queryset
        # JSON containment lookups are not available on every backend (SQLite)
        matching_ids = [
            article_id
            for article_id, tags in queryset.values_list('id', 'tags')
            if wanted.intersection(tags or [])
        ]
        return queryset.filter(pk__in=matching_ids)


class CategoryFilter(django_filters.FilterSet):
    type = django_filters.CharFilter(field_name='type', lookup_expr='exact')
    active = BooleanStringFilter(field_name='active')

    class Meta:
        model = Category
        fields = ['type', 'active']


class PartnerFilter(django_filters.FilterSet):
    active = BooleanStringFilter(field_name='active')

    class Meta:
        model = Partner
        fields = ['active']
