from django.urls import path
from . import views

urlpatterns = [
    # Registries
    path('crm-pipeline-stages', views.pipeline_stage_list_create, name='pipeline-stage-list-create'),
    path('crm-pipeline-stages/<int:pk>', views.pipeline_stage_detail, name='pipeline-stage-detail'),
    path('crm-customer-tiers', views.customer_tier_list_create, name='customer-tier-list-create'),
    path('crm-customer-tiers/<int:pk>', views.customer_tier_detail, name='customer-tier-detail'),
    path('crm-statuses', views.crm_status_list_create, name='crm-status-list-create'),
    path('crm-statuses/<int:pk>', views.crm_status_detail, name='crm-status-detail'),

    # Clients
    path('clients', views.client_list_create, name='client-list-create'),
    path('clients/<int:pk>', views.client_detail, name='client-detail'),
    path('clients/<int:pk>/referrals', views.client_referrals, name='client-referrals'),
    path('clients/<int:pk>/update-tier', views.client_update_tier, name='client-update-tier'),

    # Inquiries
    path('inquiries', views.inquiry_list_create, name='inquiry-list-create'),
    path('inquiries/<int:pk>', views.inquiry_detail, name='inquiry-detail'),
    path('inquiries/<int:pk>/convert', views.inquiry_convert, name='inquiry-convert'),

    path('interactions', views.interaction_list_create, name='interaction-list-create'),
    path('interactions/<int:pk>', views.interaction_detail, name='interaction-detail'),
    path('deals', views.deal_list_create, name='deal-list-create'),
    path('deals/<int:pk>', views.deal_detail, name='deal-detail'),
    path('deals/<int:pk>/stage', views.deal_stage, name='deal-stage'),
    path('transactions', views.transaction_list_create, name='transaction-list-create'),
    path('transactions/<int:pk>', views.transaction_detail, name='transaction-detail'),

    path('dashboard/stats', views.dashboard_stats, name='dashboard-stats'),
]
