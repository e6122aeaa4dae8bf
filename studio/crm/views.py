from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from studio.core.permissions import IsStudioAdmin, IsStudioAdminOrCreateOnly
from studio.core.utils import parse_bool
from . import services
from .filters import ClientFilter
from .models import PipelineStage, CustomerTier, CrmStatus, Inquiry, Interaction, Deal, Transaction
from .serializers import (
    registry_serializer_for, ClientSerializer, InquirySerializer, InquiryCreateSerializer,
    InteractionSerializer, DealSerializer, DealStageSerializer, TransactionSerializer,
)


# Registry views (pipeline stages, customer tiers, statuses)
def _registry_list_create(request, model):
    serializer_class = registry_serializer_for(model)
    if request.method == 'GET':
        active = parse_bool(request.query_params.get('active'))
        return Response(services.list_entries(model, active=active))
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    entry = services.create_entry(model, serializer.validated_data, user=request.user)
    return Response(serializer_class(entry).data, status=status.HTTP_201_CREATED)


def _registry_detail(request, model, pk):
    serializer_class = registry_serializer_for(model)
    restrict = parse_bool(request.query_params.get('restrict'))
    if request.method == 'GET':
        return Response(serializer_class(services.get_entry(model, pk)).data)
    elif request.method in ('PUT', 'PATCH'):
        entry = services.get_entry(model, pk)
        serializer = serializer_class(entry, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        entry = services.update_entry(model, pk, serializer.validated_data, user=request.user, restrict=restrict)
        return Response(serializer_class(entry).data)
    else:  # DELETE
        services.delete_entry(model, pk, restrict=restrict, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsStudioAdmin])
def pipeline_stage_list_create(request):
    """List pipeline stages in display order (?active=true|false) or create one"""
    return _registry_list_create(request, PipelineStage)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStudioAdmin])
def pipeline_stage_detail(request, pk):
    """Retrieve, update or delete a pipeline stage (?restrict=true blocks deleting an in-use value)"""
    return _registry_detail(request, PipelineStage, pk)


@api_view(['GET', 'POST'])
@permission_classes([IsStudioAdmin])
def customer_tier_list_create(request):
    """List customer tiers in display order or create one"""
    return _registry_list_create(request, CustomerTier)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStudioAdmin])
def customer_tier_detail(request, pk):
    return _registry_detail(request, CustomerTier, pk)


@api_view(['GET', 'POST'])
@permission_classes([IsStudioAdmin])
def crm_status_list_create(request):
    """List client statuses in display order or create one"""
    return _registry_list_create(request, CrmStatus)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStudioAdmin])
def crm_status_detail(request, pk):
    return _registry_detail(request, CrmStatus, pk)


# Client views
@api_view(['GET', 'POST'])
@permission_classes([IsStudioAdmin])
def client_list_create(request):
    """
    List clients or create a new client.

    Filters: status, stage, tier, search (name/email/phone/company),
    referred_by.
    """
    if request.method == 'GET':
        queryset = services.list_clients().select_related('referred_by')
        filterset = ClientFilter(request.query_params, queryset=queryset)
        serializer = ClientSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    serializer = ClientSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    client = services.create_client(serializer.to_service_data(), user=request.user)
    return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsStudioAdmin])
def client_detail(request, pk):
    """Retrieve or update a client (clients are never deleted)"""
    client = services.get_client(pk)

    if request.method == 'GET':
        return Response(ClientSerializer(client).data)
    serializer = ClientSerializer(client, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    client = services.update_client(client, serializer.to_service_data(), user=request.user)
    client.refresh_from_db()
    return Response(ClientSerializer(client).data)


@api_view(['GET'])
@permission_classes([IsStudioAdmin])
def client_referrals(request, pk):
    """Clients directly referred by this client"""
    client = services.get_client(pk)
    serializer = ClientSerializer(services.get_referrals(client).select_related('referred_by'), many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsStudioAdmin])
def client_update_tier(request, pk):
    """Recalculate the client's tier from completed spending"""
    client = services.get_client(pk)
    client = services.recalculate_tier(client, user=request.user)
    client.refresh_from_db()
    return Response(ClientSerializer(client).data)


# Inquiry views
@api_view(['GET', 'POST'])
@permission_classes([IsStudioAdminOrCreateOnly])
def inquiry_list_create(request):
    """
    POST is the public contact form; listing (?status=) requires a studio admin.
    """
    if request.method == 'GET':
        inquiries = Inquiry.objects.select_related('client')
        inquiry_status = request.query_params.get('status')
        if inquiry_status:
            inquiries = inquiries.filter(status=inquiry_status)
        return Response(InquirySerializer(inquiries, many=True).data)

    serializer = InquiryCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    inquiry = services.create_inquiry(serializer.validated_data)
    return Response(InquirySerializer(inquiry).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsStudioAdmin])
def inquiry_detail(request, pk):
    """Retrieve or triage an inquiry (any status may be set at any time)"""
    inquiry = get_object_or_404(Inquiry.objects.select_related('client'), pk=pk)

    if request.method == 'GET':
        return Response(InquirySerializer(inquiry).data)
    serializer = InquirySerializer(inquiry, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsStudioAdmin])
def inquiry_convert(request, pk):
    """Mark the inquiry converted and make sure it is linked to a client"""
    inquiry = get_object_or_404(Inquiry, pk=pk)
    inquiry = services.convert_inquiry(inquiry, user=request.user)
    return Response(InquirySerializer(inquiry).data)


# Interaction views
@api_view(['GET', 'POST'])
@permission_classes([IsStudioAdmin])
def interaction_list_create(request):
    """List interactions (?client=<id>) or log a new one"""
    if request.method == 'GET':
        interactions = Interaction.objects.select_related('created_by')
        client_id = request.query_params.get('client')
        if client_id:
            interactions = interactions.filter(client_id=client_id)
        return Response(InteractionSerializer(interactions, many=True).data)
    serializer = InteractionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    interaction = services.append_interaction(data.pop('client_id'), data, user=request.user)
    return Response(InteractionSerializer(interaction).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStudioAdmin])
def interaction_detail(request, pk):
    """Retrieve, edit or delete an interaction"""
    interaction = get_object_or_404(Interaction, pk=pk)

    if request.method == 'GET':
        return Response(InteractionSerializer(interaction).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = InteractionSerializer(interaction, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        interaction = services.update_interaction(interaction, serializer.validated_data)
        return Response(InteractionSerializer(interaction).data)
    else:  # DELETE
        interaction.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Deal views
@api_view(['GET', 'POST'])
@permission_classes([IsStudioAdmin])
def deal_list_create(request):
    """List deals (?client=<id>, ?stage=) or open a new one"""
    if request.method == 'GET':
        deals = Deal.objects.select_related('client')
        client_id = request.query_params.get('client')
        stage = request.query_params.get('stage')
        if client_id:
            deals = deals.filter(client_id=client_id)
        if stage:
            deals = deals.filter(stage=stage)
        return Response(DealSerializer(deals, many=True).data)
    serializer = DealSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    deal = services.create_deal(data.pop('client_id'), data, user=request.user)
    return Response(DealSerializer(deal).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStudioAdmin])
def deal_detail(request, pk):
    """Retrieve, update or delete a deal"""
    deal = get_object_or_404(Deal.objects.select_related('client'), pk=pk)

    if request.method == 'GET':
        return Response(DealSerializer(deal).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = DealSerializer(deal, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        deal = services.update_deal(deal, serializer.validated_data, user=request.user)
        return Response(DealSerializer(deal).data)
    else:  # DELETE
        deal.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsStudioAdmin])
def deal_stage(request, pk):
    """Move a deal to another stage (lost needs lost_reason)"""
    deal = get_object_or_404(Deal.objects.select_related('client'), pk=pk)
    serializer = DealStageSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    deal = services.transition_stage(
        deal,
        serializer.validated_data['stage'],
        lost_reason=serializer.validated_data.get('lost_reason'),
        actual_close_date=serializer.validated_data.get('actual_close_date'),
        user=request.user,
    )
    return Response(DealSerializer(deal).data)


# Transaction views
@api_view(['GET', 'POST'])
@permission_classes([IsStudioAdmin])
def transaction_list_create(request):
    """List ledger rows (?client=<id>, ?type=, ?status=) or record a new one"""
    if request.method == 'GET':
        transactions = Transaction.objects.select_related('client')
        client_id = request.query_params.get('client')
        txn_type = request.query_params.get('type')
        txn_status = request.query_params.get('status')
        if client_id:
            transactions = transactions.filter(client_id=client_id)
        if txn_type:
            transactions = transactions.filter(type=txn_type)
        if txn_status:
            transactions = transactions.filter(status=txn_status)
        return Response(TransactionSerializer(transactions, many=True).data)
    serializer = TransactionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    txn = services.record_transaction(data.pop('client_id'), data, user=request.user)
    return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStudioAdmin])
def transaction_detail(request, pk):
    """Retrieve, update or delete a ledger row; the client's rollups follow"""
    txn = get_object_or_404(Transaction.objects.select_related('client'), pk=pk)

    if request.method == 'GET':
        return Response(TransactionSerializer(txn).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = TransactionSerializer(txn, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        txn = services.update_transaction(txn, serializer.validated_data, user=request.user)
        return Response(TransactionSerializer(txn).data)
    else:  # DELETE
        services.delete_transaction(txn, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsStudioAdmin])
def dashboard_stats(request):
    """Headline numbers for the admin dashboard"""
    return Response(services.dashboard_stats())
