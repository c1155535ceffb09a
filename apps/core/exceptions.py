"""
Domain error taxonomy and the DRF exception handler that turns every error
into the ``{success, message, errors?}`` envelope.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for errors raised by service functions."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Internal server error'

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid input'


class CodeExpired(ValidationError):
    default_message = 'Verification code has expired'


class InvalidCode(ValidationError):
    default_message = 'Invalid verification code'


class Unauthorized(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Authentication required'


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You do not have permission to perform this action'


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Resource not found'


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Resource already exists'


class ExternalServiceError(DomainError):
    default_message = 'An external service failed'


def _flatten_errors(detail, prefix=''):
    """Turn DRF's nested error detail into a flat list of {field, message}."""
    if isinstance(detail, dict):
        flattened = []
        for field, value in detail.items():
            name = f'{prefix}.{field}' if prefix else str(field)
            flattened.extend(_flatten_errors(value, name))
        return flattened
    if isinstance(detail, list):
        flattened = []
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                flattened.extend(_flatten_errors(value, f'{prefix}[{index}]' if prefix else str(index)))
            else:
                flattened.append({'field': prefix or None, 'message': str(value)})
        return flattened
    return [{'field': prefix or None, 'message': str(detail)}]


def _envelope(message, status_code, errors=None):
    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    return Response(body, status=status_code)


def api_exception_handler(exc, context):
    """
    DRF ``EXCEPTION_HANDLER`` mapping every failure onto the response envelope.
    """
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown'

    if isinstance(exc, DomainError):
        if exc.status_code >= 500:
            logger.error(f"{view_name}: {exc.message}", exc_info=exc)
        else:
            logger.info(f"{view_name}: {exc.__class__.__name__}: {exc.message}")
        return _envelope(exc.message, exc.status_code, exc.errors)

    if isinstance(exc, drf_exceptions.ValidationError):
        errors = _flatten_errors(exc.detail)
        message = errors[0]['message'] if len(errors) == 1 else 'Validation failed'
        return _envelope(message, status.HTTP_400_BAD_REQUEST, errors)

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        response = _envelope(str(exc.detail), status.HTTP_401_UNAUTHORIZED)
        response['WWW-Authenticate'] = 'Bearer'
        return response

    if isinstance(exc, drf_exceptions.APIException):
        return _envelope(str(exc.detail), exc.status_code)

    if isinstance(exc, Http404):
        return _envelope('Resource not found', status.HTTP_404_NOT_FOUND)

    if isinstance(exc, DjangoValidationError):
        messages = exc.messages
        return _envelope(
            messages[0] if messages else 'Invalid input',
            status.HTTP_400_BAD_REQUEST,
            [{'field': None, 'message': m} for m in messages],
        )

    if isinstance(exc, IntegrityError):
        logger.warning(f"{view_name}: integrity error: {exc}")
        return _envelope('Duplicate value violates a unique constraint', status.HTTP_409_CONFLICT)

    logger.exception(f"Unhandled error in {view_name}", exc_info=exc)
    return _envelope('Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)
