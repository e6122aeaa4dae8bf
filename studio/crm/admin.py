from django.conf import settings
from django.contrib import admin
from . import services
from .models import PipelineStage, CustomerTier, CrmStatus, Client, Inquiry, Interaction, Deal, Transaction


@admin.register(PipelineStage, CustomerTier, CrmStatus)
class RegistryEntryAdmin(admin.ModelAdmin):
    list_display = ['value', 'label_en', 'label_vi', 'order', 'active']
    list_editable = ['order', 'active']
    ordering = ['order', 'id']

    def get_readonly_fields(self, request, obj=None):
        # Renames go through the API so the restrict policy is enforced
        if obj is not None:
            return ['value']
        return []

    def has_delete_permission(self, request, obj=None):
        if settings.CRM_REGISTRY_DELETE_POLICY != 'restrict':
            return super().has_delete_permission(request, obj)
        if obj is None:
            return False
        return not services.references_to(obj) and super().has_delete_permission(request, obj)


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'last_name', 'email', 'stage', 'tier', 'status',
                    'total_spending', 'order_count', 'referral_count', 'created_at']
    list_filter = ['stage', 'tier', 'status', 'warranty_status']
    search_fields = ['first_name', 'last_name', 'email', 'phone', 'company']
    # Rollups follow the transaction ledger and referral moves go through the API;
    # fix drift with `manage.py repair_client_rollups`
    readonly_fields = ['referred_by', 'total_spending', 'refund_amount', 'commission', 'order_count',
                       'referral_count', 'referral_revenue', 'created_at', 'updated_at']

    def has_delete_permission(self, request, obj=None):
        # Deleting a referred client would leave its referrer's counters stale
        return False


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'last_name', 'email', 'project_type', 'budget', 'status', 'created_at']
    list_filter = ['status', 'project_type', 'budget']
    search_fields = ['first_name', 'last_name', 'email', 'message']
    raw_id_fields = ['client']


@admin.register(Interaction)
class InteractionAdmin(admin.ModelAdmin):
    list_display = ['title', 'client', 'type', 'date', 'assigned_to', 'created_by']
    list_filter = ['type', 'date']
    search_fields = ['title', 'client__first_name', 'client__last_name']
    raw_id_fields = ['client']


@admin.register(Deal)
class DealAdmin(admin.ModelAdmin):
    list_display = ['title', 'client', 'value', 'stage', 'probability', 'expected_close_date']
    list_filter = ['stage']
    search_fields = ['title', 'client__first_name', 'client__last_name']
    raw_id_fields = ['client', 'project']


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Read-only: ledger writes must go through the API so rollups stay in sync"""
    list_display = ['client', 'type', 'amount', 'status', 'payment_date', 'title']
    list_filter = ['type', 'status', 'payment_date']
    search_fields = ['title', 'client__first_name', 'client__last_name', 'client__email']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
