from django.core.exceptions import PermissionDenied
from django.http import Http404

from rest_framework import exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler



class QualityError(Exception):
    """Base class for caller-facing workflow errors"""

    status_code = 400
    error_code = 'error'

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class NotFoundError(QualityError):
    """A referenced entity does not exist"""

    status_code = 404
    error_code = 'not_found'


class ValidationError(QualityError):
    """Malformed input or a violated business rule"""

    status_code = 400
    error_code = 'validation'


class ConflictError(QualityError):
    """Uniqueness or state machine violation"""

    status_code = 409
    error_code = 'conflict'


class DocumentRenderError(QualityError):
    """The certificate document could not be produced"""

    status_code = 502
    error_code = 'render_failed'


def api_exception_handler(exc, context):
    """
    DRF exception handler giving every error the same JSON envelope

    QualityError subclasses carry their own status and code; DRF's own
    exceptions (authentication, permission, parse errors) keep the status
    chosen by the default handler.
    """
    if isinstance(exc, QualityError):
        return Response(
            {'success': False, 'error': exc.error_code, 'message': exc.message},
            status=exc.status_code,
        )

    if isinstance(exc, Http404):
        exc = exceptions.NotFound(*exc.args)
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied(*exc.args)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        error_code = ValidationError.error_code
    else:
        error_code = getattr(exc, 'default_code', 'error')

    detail = response.data.get('detail') if isinstance(response.data, dict) else None
    response.data = {
        'success': False,
        'error': error_code,
        'message': str(detail) if detail is not None else str(exc),
    }
    return response
