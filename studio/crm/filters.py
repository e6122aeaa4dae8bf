import django_filters
from django.db.models import Q
from .models import Client


class ClientFilter(django_filters.FilterSet):
    """Client list filters for the CRM dashboard"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(field_name='status', lookup_expr='exact')
    stage = django_filters.CharFilter(field_name='stage', lookup_expr='exact')
    tier = django_filters.CharFilter(field_name='tier', lookup_expr='exact')
    referred_by = django_filters.NumberFilter(field_name='referred_by_id', lookup_expr='exact')
    warranty_status = django_filters.CharFilter(field_name='warranty_status', lookup_expr='exact')

    class Meta:
        model = Client
        fields = ['search', 'status', 'stage', 'tier', 'referred_by', 'warranty_status']

    def filter_search(self, queryset, name, value):
        """Match any word against name, email, phone or company"""
        words = [word for word in value.split() if word]
        for word in words:
            queryset = queryset.filter(
                Q(first_name__icontains=word) | Q(last_name__icontains=word) |
                Q(email__icontains=word) | Q(phone__icontains=word) | Q(company__icontains=word)
            )
        return queryset
