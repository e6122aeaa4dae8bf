"""Utility functions for audit logging and request parsing"""
import logging

from django.db import IntegrityError, transaction

from .exceptions import ConflictError
from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def parse_bool(value):
    """
    Parse a query-string boolean.

    Returns True/False for 'true'/'false' (any case, also 1/0, yes/no) and
    None for anything else, so callers can skip the filter entirely.
    """
    if value is None:
        return None
    value = str(value).strip().lower()
    if value in ('true', '1', 'yes'):
        return True
    if value in ('false', '0', 'no'):
        return False
    return None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, transaction_record, stage_change, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object

    Audit logging never fails the main operation; errors are logged and
    swallowed here.
    """
    audit_user = user
    if audit_user is None and request is not None:
        audit_user = getattr(request, 'user', None)

    if not action or not model_name or object_id is None:
        logger.warning(
            f"Audit log creation skipped: missing required fields "
            f"(action={action}, model_name={model_name}, object_id={object_id})"
        )
        return None

    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                user=audit_user if audit_user is not None and audit_user.is_authenticated else None,
                action=action,
                model_name=model_name,
                object_id=str(object_id),
                object_name=object_name,
                changes=changes or {},
                ip_address=get_client_ip(request) if request else None,
            )
    except Exception as e:
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def save_or_conflict(serializer, message, **kwargs):
    """
    Save a validated serializer, turning a unique constraint violation into a 409.

    The save runs in its own savepoint so the surrounding transaction stays
    usable after the IntegrityError.
    """
    try:
        with transaction.atomic():
            return serializer.save(**kwargs)
    except IntegrityError as e:
        logger.warning(f"Unique constraint rejected write: {str(e)}")
        raise ConflictError(message)
