from django.contrib import admin
from .models import (
    Project, Article, Service, Category, Partner, HomepageContent,
    AboutPageContent, AboutPrinciple, AboutShowcaseService, AboutProcessStep, AboutTeamMember,
)


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'status', 'featured', 'location', 'created_at']
    list_filter = ['category', 'status', 'featured']
    search_fields = ['title', 'location', 'style']


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'language', 'status', 'featured', 'published_at', 'view_count']
    list_filter = ['status', 'language', 'featured', 'category']
    search_fields = ['title', 'slug', 'excerpt']
    readonly_fields = ['view_count', 'created_at', 'updated_at']


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['title', 'icon', 'order', 'active']
    list_editable = ['order', 'active']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name_en', 'name_vi', 'slug', 'type', 'order', 'active']
    list_filter = ['type', 'active']
    search_fields = ['name_en', 'name_vi', 'slug']


@admin.register(Partner)
class PartnerAdmin(admin.ModelAdmin):
    list_display = ['name', 'website', 'order', 'active']
    list_filter = ['active']


@admin.register(HomepageContent)
class HomepageContentAdmin(admin.ModelAdmin):
    list_display = ['language', 'hero_title', 'updated_at']


@admin.register(AboutPageContent)
class AboutPageContentAdmin(admin.ModelAdmin):
    list_display = ['hero_title_en', 'hero_title_vi', 'updated_at']


@admin.register(AboutPrinciple, AboutShowcaseService, AboutProcessStep)
class OrderedBlockAdmin(admin.ModelAdmin):
    list_display = ['title_en', 'title_vi', 'order']
    ordering = ['order', 'id']


@admin.register(AboutTeamMember)
class AboutTeamMemberAdmin(admin.ModelAdmin):
    list_display = ['name', 'position_en', 'order']
    ordering = ['order', 'id']
