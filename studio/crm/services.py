"""
CRM write paths.

Every operation that touches more than one row lives here so the
cross-entity rules hold no matter which endpoint (or management command)
drives them:

- registry values are unique per registry (database constraint, reported
  as a conflict),
- a client's rollup fields always equal the sums of its completed
  transactions by type, and ``order_count`` the number of completed
  payments,
- a referrer's ``referral_count`` / ``referral_revenue`` always match its
  direct referrals and their completed payments,
- the referral graph never loops back on itself.

Rollup maintenance locks the client row and applies ``F()`` increments
inside the same ``transaction.atomic()`` block as the ledger write.
"""
import logging
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from studio.core.exceptions import ConflictError, NotFoundError, ValidationError
from studio.core.utils import create_audit_log
from studio.content.models import Project
from .cache import get_cached_registry
from .models import (
    CustomerTier, CrmStatus, REGISTRY_MODELS,
    Client, Inquiry, Interaction, Deal, Transaction,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

# Client column fed by each transaction type
ROLLUP_FIELDS = {
    'payment': 'total_spending',
    'refund': 'refund_amount',
    'commission': 'commission',
}

CLIENT_READ_ONLY_FIELDS = (
    'total_spending', 'refund_amount', 'commission', 'order_count',
    'referral_count', 'referral_revenue',
)


# ==================== VALUE NORMALIZATION ====================

def normalize_date(value, field='date'):
    """Accept a date, a datetime or an ISO date/datetime string and return a date"""
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_date(text) or parse_datetime(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, datetime):
            return parsed.date()
        if parsed is not None:
            return parsed
    raise ValidationError({field: [f"'{value}' is not a valid date."]})


def normalize_datetime(value, field='date'):
    """Accept a date, a datetime or an ISO string and return an aware datetime"""
    if value in (None, ''):
        return None
    parsed = value
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_datetime(text) or parse_date(text)
        except ValueError:
            parsed = None
    if isinstance(parsed, datetime):
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        return parsed
    if isinstance(parsed, date):
        return timezone.make_aware(datetime.combine(parsed, time.min))
    raise ValidationError({field: [f"'{value}' is not a valid date/time."]})


def _positive_amount(value, field):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError({field: ['A valid number is required.']})
    if not amount.is_finite() or amount <= 0:
        raise ValidationError({field: ['Must be greater than zero.']})
    return amount


# ==================== REGISTRIES ====================

def list_entries(model, active=None):
    """Registry entries ordered by ``order`` then insertion, optionally filtered by ``active``"""
    entries = get_cached_registry(model)
    if active is not None:
        entries = [entry for entry in entries if entry['active'] == active]
    return entries


def get_entry(model, pk, for_update=False):
    queryset = model.objects.select_for_update() if for_update else model.objects.all()
    entry = queryset.filter(pk=pk).first()
    if entry is None:
        raise NotFoundError(f"{model._meta.verbose_name.capitalize()} not found")
    return entry


def references_to(entry):
    """Number of clients whose stage/tier/status holds this entry's value"""
    return Client.objects.filter(**{entry.client_field: entry.value}).count()


def _duplicate_value(model, value):
    logger.warning(f"Rejected duplicate {model.__name__} value '{value}'")
    return ConflictError(f"A {model._meta.verbose_name} with value '{value}' already exists.")


def create_entry(model, data, user=None):
    value = (data.get('value') or '').strip()
    if not value:
        raise ValidationError({'value': ['This field may not be blank.']})
    data = {**data, 'value': value}
    try:
        with transaction.atomic():
            entry = model.objects.create(**data)
    except IntegrityError:
        raise _duplicate_value(model, value)
    logger.info(f"{model.__name__} created: {entry.value} (order={entry.order})")
    create_audit_log(user=user, action='create', model_name=model.__name__,
                     object_id=entry.pk, object_name=entry.value, changes=data)
    return entry


def update_entry(model, pk, data, user=None, restrict=None):
    """
    Partial update of a registry entry.

    Renaming a value that clients still hold is refused under the restrict
    deletion policy, since it orphans those clients the same way a delete does.
    The entry row stays locked from the reference count to the save.
    """
    if 'value' in data:
        value = (data.get('value') or '').strip()
        if not value:
            raise ValidationError({'value': ['This field may not be blank.']})
        data = {**data, 'value': value}

    changes = {}
    try:
        with transaction.atomic():
            entry = get_entry(model, pk, for_update=True)
            if 'value' in data and data['value'] != entry.value and _restrict_policy(restrict):
                in_use = references_to(entry)
                if in_use:
                    raise ConflictError(
                        f"Cannot rename '{entry.value}': {in_use} client(s) still use it."
                    )
            for field, value in data.items():
                old_value = getattr(entry, field)
                if old_value != value:
                    changes[field] = {'old': old_value, 'new': value}
                setattr(entry, field, value)
            with transaction.atomic():
                entry.save()
    except IntegrityError:
        raise _duplicate_value(model, data.get('value'))
    if changes:
        create_audit_log(user=user, action='update', model_name=model.__name__,
                         object_id=entry.pk, object_name=entry.value, changes=changes)
    return entry


def _restrict_policy(restrict):
    if restrict is None:
        return settings.CRM_REGISTRY_DELETE_POLICY == 'restrict'
    return restrict


def delete_entry(model, pk, restrict=None, user=None):
    """
    Hard-delete a registry entry.

    With the 'allow' policy clients keep the old value as an inert string;
    with 'restrict' an entry still referenced by a client is not deleted.
    Returns the number of clients left holding the deleted value.
    The entry row stays locked from the reference count to the delete.
    """
    with transaction.atomic():
        entry = get_entry(model, pk, for_update=True)
        in_use = references_to(entry)
        if in_use and _restrict_policy(restrict):
            logger.warning(f"Refused to delete {model.__name__} '{entry.value}': {in_use} client(s) reference it")
            raise ConflictError(
                f"Cannot delete '{entry.value}': {in_use} client(s) still use it."
            )
        value = entry.value
        entry.delete()
    logger.info(f"{model.__name__} deleted: {value} ({in_use} client(s) keep the value)")
    create_audit_log(user=user, action='delete', model_name=model.__name__, object_id=pk,
                     object_name=value, changes={'orphaned_clients': in_use})
    return in_use


def check_registry_value(model, value):
    """
    Validate a client's stage/tier/status against the live registry.

    An empty registry accepts any value (statuses fall back to the built-in
    active/inactive/archived set); otherwise the value must match an active
    entry exactly.
    """
    field = model.client_field
    entries = list_entries(model)
    if not entries:
        if model is CrmStatus and value not in Client.DEFAULT_STATUSES:
            raise ValidationError({field: [f"'{value}' is not a valid status."]})
        return
    allowed = {entry['value'] for entry in entries if entry['active']}
    if value not in allowed:
        raise ValidationError({field: [f"'{value}' is not an active {model._meta.verbose_name}."]})


# ==================== CLIENTS ====================

def get_client(pk, for_update=False):
    queryset = Client.objects.select_for_update() if for_update else Client.objects.all()
    client = queryset.filter(pk=pk).first()
    if client is None:
        raise NotFoundError('Client not found')
    return client


def _changed_registry_fields(data, client=None):
    """Registry models whose client column this write sets to a new value"""
    # Unchanged values are not re-checked so clients holding an orphaned value stay editable
    return [
        model for model in REGISTRY_MODELS
        if model.client_field in data and (client is None or data[model.client_field] != getattr(client, model.client_field))
    ]


def _lock_registry_values(models, data):
    """
    Lock the registry rows a client write points at, inside the write's transaction.

    A concurrent registry delete or rename holds the same row lock while it
    counts references, so the two cannot interleave. A row that disappeared
    since validation fails the write.
    """
    for model in models:
        field = model.client_field
        locked = list(model.objects.select_for_update().filter(value=data[field]).values_list('pk', flat=True))
        if not locked and model.objects.exists():
            raise ValidationError({field: [f"'{data[field]}' is not an active {model._meta.verbose_name}."]})


def _prepare_client_data(data, client=None):
    data = {key: value for key, value in data.items() if key not in CLIENT_READ_ONLY_FIELDS}
    for model in _changed_registry_fields(data, client):
        check_registry_value(model, data[model.client_field])
    if 'date_of_birth' in data:
        data['date_of_birth'] = normalize_date(data['date_of_birth'], 'date_of_birth')
    if 'warranty_expiry' in data:
        data['warranty_expiry'] = normalize_datetime(data['warranty_expiry'], 'warranty_expiry')
    return data


def create_client(data, user=None):
    """Create a client; stage/tier/status default to lead/silver/active and rollups to zero"""
    missing = [field for field in ('first_name', 'last_name', 'email') if not data.get(field)]
    if missing:
        raise ValidationError({field: ['This field is required.'] for field in missing})
    data = _prepare_client_data(data)
    referrer = data.pop('referred_by', None)

    with transaction.atomic():
        _lock_registry_values(_changed_registry_fields(data), data)
        client = Client.objects.create(**data)
        if referrer is not None:
            set_referred_by(client, referrer, user=user)

    logger.info(f"Client created: {client.full_name} (ID: {client.pk}, stage={client.stage})")
    create_audit_log(user=user, action='create', model_name='Client', object_id=client.pk,
                     object_name=client.full_name,
                     changes={'email': client.email, 'stage': client.stage, 'tier': client.tier})
    return client


def update_client(client, data, user=None):
    """Partial update; rollup fields are ignored and referral moves go through set_referred_by"""
    data = _prepare_client_data(data, client)
    registry_fields = _changed_registry_fields(data, client)
    move_referral = 'referred_by' in data
    referrer = data.pop('referred_by', None)

    changes = {}
    for field, value in data.items():
        old_value = getattr(client, field)
        if old_value != value:
            changes[field] = {'old': old_value, 'new': value}
        setattr(client, field, value)

    with transaction.atomic():
        _lock_registry_values(registry_fields, data)
        if data:
            # Only the edited columns; rollups may be moving concurrently
            client.save(update_fields=list(data.keys()) + ['updated_at'])
        if move_referral:
            set_referred_by(client, referrer, user=user)

    if changes:
        create_audit_log(user=user, action='update', model_name='Client', object_id=client.pk,
                         object_name=client.full_name, changes=changes)
    return client


def _check_referral_cycle(client, referrer):
    """Walk the referrer's ancestor chain; reaching the client means a cycle"""
    max_depth = settings.CRM_REFERRAL_MAX_DEPTH
    current_id = referrer.pk
    for _ in range(max_depth):
        if current_id is None:
            return
        if current_id == client.pk:
            raise ValidationError({'referred_by': ['This referral would create a referral cycle.']})
        current_id = Client.objects.filter(pk=current_id).values_list('referred_by_id', flat=True).first()
    if current_id is not None:
        raise ValidationError({'referred_by': [f'Referral chain is deeper than {max_depth} levels.']})


def _completed_payments(client_id):
    total = Transaction.objects.filter(
        client_id=client_id, type='payment', status='completed'
    ).aggregate(total=Sum('amount'))['total']
    return total or ZERO


def set_referred_by(client, referrer, user=None):
    """
    Point ``client.referred_by`` at ``referrer`` (a Client, an id or None).

    The old referrer loses one referral and this client's completed
    payments; the new referrer gains them, in the same transaction.
    """
    if referrer is not None and not isinstance(referrer, Client):
        referrer_id = referrer
        referrer = Client.objects.filter(pk=referrer_id).first()
        if referrer is None:
            raise NotFoundError(f"Referrer client {referrer_id} not found")
    new_id = referrer.pk if referrer is not None else None
    if new_id is not None and new_id == client.pk:
        raise ValidationError({'referred_by': ['A client cannot refer themselves.']})

    with transaction.atomic():
        locked = get_client(client.pk, for_update=True)
        old_id = locked.referred_by_id
        if old_id == new_id:
            client.referred_by = referrer
            return client
        if referrer is not None:
            _check_referral_cycle(locked, referrer)

        revenue = _completed_payments(client.pk)
        if old_id is not None:
            Client.objects.filter(pk=old_id).update(
                referral_count=F('referral_count') - 1,
                referral_revenue=F('referral_revenue') - revenue,
            )
        if new_id is not None:
            Client.objects.filter(pk=new_id).update(
                referral_count=F('referral_count') + 1,
                referral_revenue=F('referral_revenue') + revenue,
            )
        Client.objects.filter(pk=client.pk).update(referred_by=referrer, updated_at=timezone.now())
        client.referred_by = referrer

    logger.info(f"Client {client.pk} referral moved: {old_id} -> {new_id}")
    create_audit_log(user=user, action='referral_change', model_name='Client', object_id=client.pk,
                     object_name=client.full_name,
                     changes={'referred_by': {'old': old_id, 'new': new_id}})
    return client


def list_clients(status=None, stage=None, tier=None, search=None):
    clients = Client.objects.all()
    if status:
        clients = clients.filter(status=status)
    if stage:
        clients = clients.filter(stage=stage)
    if tier:
        clients = clients.filter(tier=tier)
    if search:
        clients = clients.filter(
            Q(first_name__icontains=search) | Q(last_name__icontains=search) |
            Q(email__icontains=search) | Q(phone__icontains=search) | Q(company__icontains=search)
        )
    return clients


def list_by_stage(stage):
    return Client.objects.filter(stage=stage)


def list_by_tier(tier):
    return Client.objects.filter(tier=tier)


def get_referrals(client):
    """Clients directly referred by ``client``"""
    return client.referrals.all()


def recalculate_tier(client, user=None):
    """
    Move the client to the highest tier whose spending threshold is met.

    Only tiers present in CRM_TIER_THRESHOLDS (and, when the tier registry
    is configured, active in it) are candidates.
    """
    thresholds = settings.CRM_TIER_THRESHOLDS
    entries = list_entries(CustomerTier)
    if entries:
        candidates = {entry['value'] for entry in entries if entry['active']}
    else:
        candidates = set(thresholds)

    client.refresh_from_db(fields=['total_spending', 'tier'])
    best = None
    for value, minimum in sorted(thresholds.items(), key=lambda item: item[1]):
        if value in candidates and client.total_spending >= minimum:
            best = value

    if best is None or best == client.tier:
        return client
    old_tier = client.tier
    Client.objects.filter(pk=client.pk).update(tier=best, updated_at=timezone.now())
    client.tier = best
    logger.info(f"Client {client.pk} tier {old_tier} -> {best} (spending {client.total_spending})")
    create_audit_log(user=user, action='tier_change', model_name='Client', object_id=client.pk,
                     object_name=client.full_name, changes={'tier': {'old': old_tier, 'new': best}})
    return client


def expected_rollups(client):
    """Rollup and referral values as derived from the ledger and the referral graph"""
    expected = {
        'total_spending': ZERO,
        'refund_amount': ZERO,
        'commission': ZERO,
        'order_count': 0,
    }
    totals = (
        Transaction.objects.filter(client_id=client.pk, status='completed')
        .values('type')
        .annotate(total=Sum('amount'), count=Count('id'))
    )
    for row in totals:
        expected[ROLLUP_FIELDS[row['type']]] = row['total'] or ZERO
        if row['type'] == 'payment':
            expected['order_count'] = row['count']

    expected['referral_count'] = Client.objects.filter(referred_by_id=client.pk).count()
    expected['referral_revenue'] = Transaction.objects.filter(
        client__referred_by_id=client.pk, type='payment', status='completed'
    ).aggregate(total=Sum('amount'))['total'] or ZERO
    return expected


def recompute_rollups(client, apply=True, user=None):
    """
    Compare the stored rollups with the ledger and optionally fix them.

    Returns {field: {'stored': ..., 'expected': ...}} for every field that drifted.
    """
    with transaction.atomic():
        locked = get_client(client.pk, for_update=True)
        expected = expected_rollups(locked)
        drift = {
            field: {'stored': getattr(locked, field), 'expected': value}
            for field, value in expected.items()
            if getattr(locked, field) != value
        }
        if drift and apply:
            Client.objects.filter(pk=locked.pk).update(**expected)
            for field, value in expected.items():
                setattr(client, field, value)

    if drift and apply:
        logger.warning(f"Repaired rollups for client {client.pk}: {sorted(drift)}")
        create_audit_log(user=user, action='rollup_repair', model_name='Client', object_id=client.pk,
                         object_name=client.full_name, changes=drift)
    return drift


# ==================== INTERACTIONS ====================

def append_interaction(client_id, data, user=None):
    """Log an interaction against an existing client"""
    client = get_client(client_id)
    data = dict(data)
    for field in ('date', 'next_action_date'):
        if field in data:
            data[field] = normalize_datetime(data[field], field)
    interaction = Interaction.objects.create(
        client=client,
        created_by=user if user is not None and user.is_authenticated else None,
        **data,
    )
    logger.info(f"Interaction {interaction.type} logged for client {client.pk}")
    return interaction


def update_interaction(interaction, data):
    data = dict(data)
    if 'client_id' in data:
        interaction.client = get_client(data.pop('client_id'))
    for field, value in data.items():
        setattr(interaction, field, value)
    interaction.save()
    return interaction


# ==================== DEALS ====================

def _check_deal_stage(stage, lost_reason, actual_close_date):
    if stage not in dict(Deal.STAGE_CHOICES):
        raise ValidationError({'stage': [f"'{stage}' is not a valid deal stage."]})
    if stage == 'lost' and not (lost_reason or '').strip():
        raise ValidationError({'lost_reason': ['A reason is required when a deal is lost.']})
    if actual_close_date and stage not in Deal.TERMINAL_STAGES:
        raise ValidationError({'actual_close_date': ['Only completed or lost deals have a close date.']})


def _resolve_project(data):
    project_id = data.get('project')
    if project_id is not None and not isinstance(project_id, Project):
        project = Project.objects.filter(pk=project_id).first()
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        data['project'] = project


def create_deal(client_id, data, user=None):
    """Open a deal for a client; stage defaults to proposal and probability to 50"""
    client = get_client(client_id)
    data = dict(data)
    if 'value' not in data:
        raise ValidationError({'value': ['This field is required.']})
    data['value'] = _positive_amount(data['value'], 'value')
    data.setdefault('stage', 'proposal')
    data.setdefault('probability', 50)
    _check_deal_stage(data['stage'], data.get('lost_reason'), data.get('actual_close_date'))
    _resolve_project(data)

    deal = Deal.objects.create(
        client=client,
        created_by=user if user is not None and user.is_authenticated else None,
        **data,
    )
    logger.info(f"Deal created: {deal.title} for client {client.pk} value={deal.value}")
    create_audit_log(user=user, action='create', model_name='Deal', object_id=deal.pk,
                     object_name=deal.title, changes={'value': deal.value, 'stage': deal.stage})
    return deal


def update_deal(deal, data, user=None):
    data = dict(data)
    if 'client_id' in data:
        deal.client = get_client(data.pop('client_id'))
    if 'value' in data:
        data['value'] = _positive_amount(data['value'], 'value')
    _resolve_project(data)
    new_stage = data.pop('stage', deal.stage)
    lost_reason = data.pop('lost_reason', None)
    actual_close_date = data.pop('actual_close_date', None)
    for field, value in data.items():
        setattr(deal, field, value)

    with transaction.atomic():
        deal.save()
        if new_stage != deal.stage or lost_reason is not None or actual_close_date is not None:
            transition_stage(deal, new_stage, lost_reason=lost_reason,
                             actual_close_date=actual_close_date, user=user)
    return deal


def transition_stage(deal, new_stage, lost_reason=None, actual_close_date=None, user=None):
    """
    Move a deal to any stage.

    A lost deal needs a reason; only completed/lost deals may carry an
    actual close date, which is taken as given and never stamped here.
    Leaving a terminal stage clears the close date (and the lost reason
    when leaving 'lost').
    """
    if lost_reason is None and new_stage == 'lost':
        lost_reason = deal.lost_reason
    if actual_close_date is not None:
        actual_close_date = normalize_datetime(actual_close_date, 'actual_close_date')
    _check_deal_stage(new_stage, lost_reason, actual_close_date)

    old_stage = deal.stage
    deal.stage = new_stage
    if new_stage == 'lost':
        deal.lost_reason = lost_reason.strip()
    elif old_stage == 'lost':
        deal.lost_reason = ''
    if new_stage in Deal.TERMINAL_STAGES:
        if actual_close_date is not None:
            deal.actual_close_date = actual_close_date
    else:
        deal.actual_close_date = None
    deal.save(update_fields=['stage', 'lost_reason', 'actual_close_date', 'updated_at'])

    if old_stage != new_stage:
        logger.info(f"Deal {deal.pk} stage {old_stage} -> {new_stage}")
        create_audit_log(user=user, action='stage_change', model_name='Deal', object_id=deal.pk,
                         object_name=deal.title, changes={'stage': {'old': old_stage, 'new': new_stage}})
    return deal


# ==================== TRANSACTIONS ====================

def _apply_effect(client, txn_type, txn_status, amount, sign):
    """
    Add (sign=1) or remove (sign=-1) one ledger row's effect on the rollups.

    ``client`` must already be locked by the caller's transaction.
    """
    if txn_status != 'completed':
        return
    field = ROLLUP_FIELDS[txn_type]
    delta = amount * sign
    updates = {field: F(field) + delta}
    if txn_type == 'payment':
        updates['order_count'] = F('order_count') + sign
    Client.objects.filter(pk=client.pk).update(**updates)
    if txn_type == 'payment' and client.referred_by_id is not None:
        Client.objects.filter(pk=client.referred_by_id).update(
            referral_revenue=F('referral_revenue') + delta
        )


def _check_transaction(data):
    if 'amount' in data:
        data['amount'] = _positive_amount(data['amount'], 'amount')
    if 'type' in data and data['type'] not in ROLLUP_FIELDS:
        raise ValidationError({'type': [f"'{data['type']}' is not one of payment, refund, commission."]})
    if 'status' in data and data['status'] not in dict(Transaction.STATUS_CHOICES):
        raise ValidationError({'status': [f"'{data['status']}' is not a valid status."]})
    if 'payment_date' in data:
        data['payment_date'] = normalize_datetime(data['payment_date'], 'payment_date') or timezone.now()


def record_transaction(client_id, data, user=None):
    """
    Append a ledger row and move the client's rollup in the same transaction.

    Defaults: status 'completed', payment_date now.
    """
    data = dict(data)
    for field in ('amount', 'type'):
        if data.get(field) in (None, ''):
            raise ValidationError({field: ['This field is required.']})
    _check_transaction(data)
    data.setdefault('status', 'completed')
    data.setdefault('payment_date', timezone.now())

    with transaction.atomic():
        client = get_client(client_id, for_update=True)
        txn = Transaction.objects.create(client=client, **data)
        _apply_effect(client, txn.type, txn.status, txn.amount, 1)

    logger.info(f"Transaction recorded: {txn.type} {txn.amount} ({txn.status}) for client {client.pk}")
    create_audit_log(user=user, action='transaction_record', model_name='Transaction', object_id=txn.pk,
                     object_name=txn.title or f"{txn.type} {txn.amount}",
                     changes={'client': client.pk, 'type': txn.type, 'amount': txn.amount, 'status': txn.status})
    return txn


def _lock_clients(*client_ids):
    """Lock client rows in id order so concurrent writers cannot deadlock"""
    ids = sorted({client_id for client_id in client_ids if client_id is not None})
    return {client.pk: client for client in Client.objects.select_for_update().filter(pk__in=ids).order_by('pk')}


def update_transaction(txn, data, user=None):
    """Reverse the row's old effect and apply the new one atomically"""
    data = dict(data)
    _check_transaction(data)
    new_client_id = data.pop('client_id', None)

    with transaction.atomic():
        locked_txn = Transaction.objects.select_for_update().get(pk=txn.pk)
        target_client_id = new_client_id if new_client_id is not None else locked_txn.client_id
        clients = _lock_clients(locked_txn.client_id, target_client_id)
        if target_client_id not in clients:
            raise NotFoundError('Client not found')

        old = {'client': locked_txn.client_id, 'type': locked_txn.type,
               'status': locked_txn.status, 'amount': locked_txn.amount}
        _apply_effect(clients[locked_txn.client_id], locked_txn.type, locked_txn.status, locked_txn.amount, -1)

        locked_txn.client = clients[target_client_id]
        for field, value in data.items():
            setattr(locked_txn, field, value)
        locked_txn.save()
        _apply_effect(clients[target_client_id], locked_txn.type, locked_txn.status, locked_txn.amount, 1)

    new = {'client': locked_txn.client_id, 'type': locked_txn.type,
           'status': locked_txn.status, 'amount': locked_txn.amount}
    logger.info(f"Transaction {txn.pk} updated: {old} -> {new}")
    create_audit_log(user=user, action='transaction_update', model_name='Transaction', object_id=txn.pk,
                     object_name=locked_txn.title or f"{locked_txn.type} {locked_txn.amount}",
                     changes={'old': old, 'new': new})
    return locked_txn


def delete_transaction(txn, user=None):
    with transaction.atomic():
        locked_txn = Transaction.objects.select_for_update().get(pk=txn.pk)
        client = get_client(locked_txn.client_id, for_update=True)
        _apply_effect(client, locked_txn.type, locked_txn.status, locked_txn.amount, -1)
        locked_txn.delete()

    logger.info(f"Transaction {txn.pk} deleted: {txn.type} {txn.amount} for client {client.pk}")
    create_audit_log(user=user, action='transaction_delete', model_name='Transaction', object_id=txn.pk,
                     object_name=txn.title or f"{txn.type} {txn.amount}",
                     changes={'client': client.pk, 'type': txn.type, 'amount': txn.amount, 'status': txn.status})


# ==================== INQUIRIES ====================

def _client_for_contact(first_name, last_name, email, phone=''):
    """Existing client with this email, or a new lead client"""
    client = Client.objects.filter(email__iexact=email).order_by('id').first()
    if client is not None:
        return client, False
    client = create_client({
        'first_name': first_name,
        'last_name': last_name,
        'email': email,
        'phone': phone or '',
    })
    return client, True


def create_inquiry(data):
    """Store a contact form submission linked to the matching (or a new) client"""
    with transaction.atomic():
        client, created = _client_for_contact(
            data['first_name'], data['last_name'], data['email'], data.get('phone')
        )
        inquiry = Inquiry.objects.create(client=client, **data)
    logger.info(
        f"Inquiry {inquiry.pk} received ({inquiry.project_type}); "
        f"{'new' if created else 'existing'} client {client.pk}"
    )
    return inquiry


def convert_inquiry(inquiry, user=None):
    """Mark an inquiry converted, making sure it points at a client"""
    old_status = inquiry.status
    with transaction.atomic():
        if inquiry.client_id is None:
            inquiry.client, _ = _client_for_contact(
                inquiry.first_name, inquiry.last_name, inquiry.email, inquiry.phone
            )
        inquiry.status = 'converted'
        inquiry.save(update_fields=['client', 'status'])
    create_audit_log(user=user, action='inquiry_convert', model_name='Inquiry', object_id=inquiry.pk,
                     object_name=f"{inquiry.first_name} {inquiry.last_name}",
                     changes={'status': {'old': old_status, 'new': 'converted'}, 'client': inquiry.client_id})
    return inquiry


# ==================== DASHBOARD ====================

def dashboard_stats():
    """Headline numbers for the admin dashboard; revenue comes from the completed payment ledger"""
    revenue = Transaction.objects.filter(type='payment', status='completed').aggregate(
        total=Sum('amount'))['total'] or ZERO
    refunds = Transaction.objects.filter(type='refund', status='completed').aggregate(
        total=Sum('amount'))['total'] or ZERO
    open_deals = Deal.objects.exclude(stage__in=Deal.TERMINAL_STAGES).aggregate(
        count=Count('id'), value=Sum('value'))
    return {
        'total_projects': Project.objects.count(),
        'active_clients': Client.objects.filter(status='active').count(),
        'new_inquiries': Inquiry.objects.filter(status='new').count(),
        'revenue': revenue,
        'refunds': refunds,
        'open_deals': open_deals['count'],
        'pipeline_value': open_deals['value'] or ZERO,
    }
