"""
API error taxonomy and the REST framework exception handler.

Every error response body carries a ``message`` string the admin UI shows
directly; validation failures also carry the per-field ``errors`` dict.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

# Bad or missing input (400)
ValidationError = exceptions.ValidationError


class NotFoundError(exceptions.NotFound):
    """A referenced id does not resolve to an existing row (404)"""
    default_detail = 'Not found.'


class ConflictError(exceptions.APIException):
    """Unique constraint or referential rule violated (409)"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The request conflicts with existing data.'
    default_code = 'conflict'


GENERIC_ERROR_MESSAGE = 'Something went wrong. Please try again.'


def _first_message(detail):
    """Pick a human-readable message out of a DRF error detail structure"""
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _first_message(detail['detail'])
        if 'message' in detail:
            return _first_message(detail['message'])
        for field, value in detail.items():
            message = _first_message(value)
            if message:
                return message if field == 'non_field_errors' else f"{field}: {message}"
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    """Normalize error bodies to {"message": ..., "errors": ...}"""
    if isinstance(exc, Http404):
        exc = NotFoundError()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'API view'}: {str(exc)}",
            exc_info=exc,
        )
        return Response({'message': GENERIC_ERROR_MESSAGE}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, exceptions.ValidationError):
        errors = response.data if isinstance(response.data, dict) else {'non_field_errors': response.data}
        response.data = {
            'message': _first_message(errors) or 'Validation error',
            'errors': errors,
        }
    else:
        response.data = {'message': _first_message(response.data) or GENERIC_ERROR_MESSAGE}
    return response
