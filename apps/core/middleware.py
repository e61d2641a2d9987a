"""
Request middleware
"""

from .logging import bind_correlation_id

CORRELATION_HEADER = 'HTTP_X_CORRELATION_ID'


class CorrelationIdMiddleware:
    """Tag every log record emitted while serving a request with one id."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        with bind_correlation_id(request.META.get(CORRELATION_HEADER)) as correlation_id:
            request.correlation_id = correlation_id
            response = self.get_response(request)
        response['X-Correlation-ID'] = correlation_id
        return response
