import logging

from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler, set_rollback

logger = logging.getLogger(__name__)


class RecordNotFound(exceptions.NotFound):
    default_detail = 'record not found'
    default_code = 'not_found'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'resource already exists'
    default_code = 'conflict'


ERROR_CODES = (
    (exceptions.ValidationError, 'validation_error'),
    (exceptions.NotFound, 'not_found'),
    (exceptions.NotAuthenticated, 'unauthorized'),
    (exceptions.AuthenticationFailed, 'unauthorized'),
    (exceptions.PermissionDenied, 'forbidden'),
    (exceptions.Throttled, 'throttled'),
    (Conflict, 'conflict'),
)


def _error(code, message, status_code, headers=None):
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=status_code, headers=headers)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        set_rollback()
        if isinstance(exc, DatabaseError):
            logger.exception('storage failure in %s', context.get('view'))
            return _error('storage_error', 'storage unavailable', status.HTTP_503_SERVICE_UNAVAILABLE)
        logger.exception('unhandled error in %s', context.get('view'))
        return _error('server_error', str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    # normalize response
    code = 'api_error'
    for exc_class, name in ERROR_CODES:
        if isinstance(exc, exc_class):
            code = name
            break
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    headers = {k: resp[k] for k in ('WWW-Authenticate', 'Retry-After') if resp.has_header(k)}
    return _error(code, detail, resp.status_code, headers=headers)
