from rest_framework import serializers
from studio.core.exceptions import ValidationError
from .models import (
    PipelineStage, CustomerTier, CrmStatus,
    Client, Inquiry, Interaction, Deal, Transaction,
)
from . import services


class FlexibleDateField(serializers.Field):
    """Date field that also takes datetimes and ISO datetime strings"""

    def to_internal_value(self, data):
        try:
            return services.normalize_date(data, self.field_name)
        except ValidationError:
            raise serializers.ValidationError('Enter a valid date (YYYY-MM-DD or ISO date/time).')

    def to_representation(self, value):
        return value.isoformat() if value else None


class FlexibleDateTimeField(serializers.DateTimeField):
    """Date/time field that also takes plain dates"""

    def to_internal_value(self, data):
        try:
            return services.normalize_datetime(data, self.field_name)
        except ValidationError:
            raise serializers.ValidationError('Enter a valid date or ISO date/time.')


class RegistryEntrySerializer(serializers.ModelSerializer):
    class Meta:
        fields = ['id', 'value', 'label_en', 'label_vi', 'order', 'active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        # Duplicates are caught by the database constraint and reported as 409
        extra_kwargs = {'value': {'validators': []}}


class PipelineStageSerializer(RegistryEntrySerializer):
    class Meta(RegistryEntrySerializer.Meta):
        model = PipelineStage


class CustomerTierSerializer(RegistryEntrySerializer):
    class Meta(RegistryEntrySerializer.Meta):
        model = CustomerTier


class CrmStatusSerializer(RegistryEntrySerializer):
    class Meta(RegistryEntrySerializer.Meta):
        model = CrmStatus


REGISTRY_SERIALIZERS = {
    PipelineStage: PipelineStageSerializer,
    CustomerTier: CustomerTierSerializer,
    CrmStatus: CrmStatusSerializer,
}


def registry_serializer_for(model):
    return REGISTRY_SERIALIZERS[model]


class ClientSerializer(serializers.ModelSerializer):
    date_of_birth = FlexibleDateField(required=False, allow_null=True)
    warranty_expiry = FlexibleDateTimeField(required=False, allow_null=True)
    referred_by = serializers.IntegerField(source='referred_by_id', required=False, allow_null=True)
    referred_by_name = serializers.SerializerMethodField()
    tags = serializers.ListField(child=serializers.CharField(), required=False)
    stage = serializers.CharField(max_length=50, required=False)
    tier = serializers.CharField(max_length=50, required=False)
    status = serializers.CharField(max_length=50, required=False)

    class Meta:
        model = Client
        fields = ['id', 'first_name', 'last_name', 'email', 'phone', 'company', 'address', 'date_of_birth',
                  'stage', 'tier', 'status',
                  'total_spending', 'refund_amount', 'commission', 'order_count',
                  'referred_by', 'referred_by_name', 'referral_count', 'referral_revenue',
                  'warranty_status', 'warranty_expiry', 'notes', 'tags', 'created_at', 'updated_at']
        read_only_fields = ['total_spending', 'refund_amount', 'commission', 'order_count',
                            'referral_count', 'referral_revenue', 'created_at', 'updated_at']

    def get_referred_by_name(self, obj):
        return obj.referred_by.full_name if obj.referred_by_id and obj.referred_by else None

    def to_service_data(self):
        """validated_data keyed the way crm.services expects (referred_by as an id)"""
        data = dict(self.validated_data)
        if 'referred_by_id' in data:
            data['referred_by'] = data.pop('referred_by_id')
        return data


class InquirySerializer(serializers.ModelSerializer):
    message = serializers.CharField(min_length=10)
    client_name = serializers.SerializerMethodField()

    class Meta:
        model = Inquiry
        fields = ['id', 'first_name', 'last_name', 'email', 'phone', 'project_type', 'budget', 'message',
                  'status', 'client', 'client_name', 'created_at']
        read_only_fields = ['created_at']

    def get_client_name(self, obj):
        return obj.client.full_name if obj.client_id and obj.client else None


class InquiryCreateSerializer(serializers.ModelSerializer):
    """Public contact form: triage fields (status, client) are not accepted"""
    message = serializers.CharField(min_length=10)

    class Meta:
        model = Inquiry
        fields = ['first_name', 'last_name', 'email', 'phone', 'project_type', 'budget', 'message']


class InteractionSerializer(serializers.ModelSerializer):
    client = serializers.IntegerField(source='client_id')
    date = FlexibleDateTimeField()
    next_action_date = FlexibleDateTimeField(required=False, allow_null=True)
    attachments = serializers.ListField(child=serializers.CharField(), required=False)
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = Interaction
        fields = ['id', 'client', 'type', 'title', 'description', 'date', 'duration', 'location',
                  'assigned_to', 'outcome', 'next_action', 'next_action_date', 'attachments',
                  'created_by', 'created_by_name', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']


class DealSerializer(serializers.ModelSerializer):
    client = serializers.IntegerField(source='client_id')
    client_name = serializers.CharField(source='client.full_name', read_only=True)
    expected_close_date = FlexibleDateTimeField(required=False, allow_null=True)
    actual_close_date = FlexibleDateTimeField(required=False, allow_null=True)

    class Meta:
        model = Deal
        fields = ['id', 'client', 'client_name', 'project', 'title', 'value', 'stage', 'probability',
                  'expected_close_date', 'actual_close_date', 'description', 'terms', 'notes',
                  'lost_reason', 'assigned_to', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_value(self, value):
        if value <= 0:
            raise serializers.ValidationError('Must be greater than zero.')
        return value


class DealStageSerializer(serializers.Serializer):
    stage = serializers.ChoiceField(choices=Deal.STAGE_CHOICES)
    lost_reason = serializers.CharField(required=False, allow_blank=True)
    actual_close_date = FlexibleDateTimeField(required=False, allow_null=True)


class TransactionSerializer(serializers.ModelSerializer):
    client = serializers.IntegerField(source='client_id')
    client_name = serializers.CharField(source='client.full_name', read_only=True)
    payment_date = FlexibleDateTimeField(required=False)

    class Meta:
        model = Transaction
        fields = ['id', 'client', 'client_name', 'title', 'description', 'amount', 'type', 'status',
                  'payment_date', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Must be greater than zero.')
        return value
