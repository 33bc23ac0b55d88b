import logging

from rest_framework import status
from rest_framework.response import Response

from ..errors import ReviewError

logger = logging.getLogger(__name__)


def error_response(code: str, message: str, status_code: int) -> Response:
    return Response({
        'error': {
            'code': code,
            'message': message
        }
    }, status=status_code)


def review_error_response(exc: ReviewError) -> Response:
    return error_response(exc.code, exc.message, exc.status_code)


def server_error_response() -> Response:
    logger.exception("Unhandled error while processing request")
    return error_response('SERVER_ERROR', 'Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)


def invalid_body_response(request):
    """Возвращает 400, если тело запроса не JSON-объект, иначе None."""
    if isinstance(request.data, dict):
        return None
    return error_response('VALIDATION_ERROR', 'Request body must be a JSON object', status.HTTP_400_BAD_REQUEST)
