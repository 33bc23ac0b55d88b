import logging
import time

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """Одна строка лога на каждый запрос."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        start = time.monotonic()
        response = self.get_response(request)
        latency_ms = (time.monotonic() - start) * 1000

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "method=%s path=%s status=%s latency_ms=%.1f ip=%s",
            request.method,
            request.path,
            response.status_code,
            latency_ms,
            request.META.get('REMOTE_ADDR', ''),
        )
        return response
