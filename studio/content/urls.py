from django.urls import path
from . import views

urlpatterns = [
    # Portfolio
    path('projects', views.project_list_create, name='project-list-create'),
    path('projects/<int:pk>', views.project_detail, name='project-detail'),

    # Blog
    path('articles', views.article_list_create, name='article-list-create'),
    path('articles/<int:pk>', views.article_detail, name='article-detail'),
    path('articles/slug/<slug:slug>', views.article_by_slug, name='article-by-slug'),

    path('services', views.service_list_create, name='service-list-create'),
    path('services/<int:pk>', views.service_detail, name='service-detail'),
    path('categories', views.category_list_create, name='category-list-create'),
    path('categories/<int:pk>', views.category_detail, name='category-detail'),
    path('partners', views.partner_list_create, name='partner-list-create'),
    path('partners/<int:pk>', views.partner_detail, name='partner-detail'),

    path('homepage-content', views.homepage_content, name='homepage-content'),

    # About page
    path('about-page', views.about_page, name='about-page'),
    path('about-content', views.about_content, name='about-content'),
    path('about-principles', views.about_principle_list_create, name='about-principle-list-create'),
    path('about-principles/<int:pk>', views.about_principle_detail, name='about-principle-detail'),
    path('about-showcase-services', views.about_showcase_service_list_create, name='about-showcase-service-list-create'),
    path('about-showcase-services/<int:pk>', views.about_showcase_service_detail, name='about-showcase-service-detail'),
    path('about-process-steps', views.about_process_step_list_create, name='about-process-step-list-create'),
    path('about-process-steps/<int:pk>', views.about_process_step_detail, name='about-process-step-detail'),
    path('about-team-members', views.about_team_member_list_create, name='about-team-member-list-create'),
    path('about-team-members/<int:pk>', views.about_team_member_detail, name='about-team-member-detail'),
]
