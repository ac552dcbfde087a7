import logging

from rest_framework import status
from rest_framework.response import Response

from ..errors import AssignmentError

logger = logging.getLogger(__name__)


def error_response(code: str, message, status_code: int) -> Response:
    return Response({
        'error': {
            'code': code,
            'message': message
        }
    }, status=status_code)


def validation_error_response(errors) -> Response:
    return error_response('VALIDATION_ERROR', errors, status.HTTP_400_BAD_REQUEST)


def domain_error_response(error: AssignmentError) -> Response:
    logger.warning("request rejected code=%s message=%s", error.code, error.message)
    return error_response(error.code, error.message, error.status_code)


def server_error_response() -> Response:
    # детали уже в логе, наружу не отдаем
    return error_response('SERVER_ERROR', 'Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)
