"""
HTTP middleware for SuperArticles.

Request IDs:
- Generates UUID-based request ID for each request
- Accepts incoming X-Request-ID header
- Adds request ID to response headers
- Injects request ID into thread-local logging context
- Provides context for Celery task correlation

SecurityHeadersMiddleware adds the CSP and Permissions-Policy headers Django's
settings do not cover. CORS is handled by django-cors-headers.

Usage:
    Add to MIDDLEWARE in settings:

    MIDDLEWARE = [
        ...
        'apps.core.middleware.RequestIDMiddleware',
        'apps.core.middleware.SecurityHeadersMiddleware',
    ]
"""

import logging
import threading
import uuid

from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

# Thread-local storage for request context
_request_context = threading.local()


def get_request_id():
    """
    Get the current request ID from thread-local storage.

    Returns None if called outside of a request context.
    """
    return getattr(_request_context, 'request_id', None)


def get_request_context():
    """Get the full request context from thread-local storage."""
    return {
        'request_id': getattr(_request_context, 'request_id', None),
        'user_id': getattr(_request_context, 'user_id', None),
        'path': getattr(_request_context, 'path', None),
    }


def set_request_context(request_id, user_id=None, path=None):
    """
    Set request context in thread-local storage.

    Useful for setting context in Celery tasks.
    """
    _request_context.request_id = request_id
    _request_context.user_id = user_id
    _request_context.path = path


def clear_request_context():
    """Clear request context from thread-local storage."""
    _request_context.request_id = None
    _request_context.user_id = None
    _request_context.path = None


class RequestIDMiddleware(MiddlewareMixin):
    """
    Middleware to handle request IDs for tracing.

    Flow:
    1. Check for incoming X-Request-ID header
    2. Generate new UUID if not present or malformed
    3. Store in thread-local for access in views/logging
    4. Attach to request object as request.request_id
    5. Add to response headers
    """

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'
    RESPONSE_HEADER = 'X-Request-ID'

    def process_request(self, request):
        request_id = request.META.get(self.REQUEST_ID_HEADER)

        if request_id:
            try:
                uuid.UUID(request_id)
            except (ValueError, TypeError):
                request_id = str(uuid.uuid4())
        else:
            request_id = str(uuid.uuid4())

        _request_context.request_id = request_id
        _request_context.path = request.path

        # Session-authenticated admin users only; JWT auth happens later in DRF
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            _request_context.user_id = str(user.pk)
        else:
            _request_context.user_id = None

        request.request_id = request_id
        return None

    def process_response(self, request, response):
        request_id = getattr(request, 'request_id', None)

        if request_id:
            response[self.RESPONSE_HEADER] = request_id

        clear_request_context()
        return response


class RequestIDFilter(logging.Filter):
    """
    Logging filter that adds request_id to log records.

    Referenced from LOGGING['filters'] as
    ``{'()': 'apps.core.middleware.RequestIDFilter'}``.
    """

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        return True


def celery_request_id_headers():
    """
    Get headers to pass to Celery tasks for correlation.

    Usage:
        task.apply_async(headers=celery_request_id_headers())
    """
    request_id = get_request_id()
    if request_id:
        return {'request_id': request_id}
    return {}


def setup_celery_request_context(headers):
    """Set up request context in a Celery task from its headers."""
    request_id = headers.get('request_id')
    if request_id:
        set_request_context(request_id)
    else:
        set_request_context(str(uuid.uuid4()))


class SecurityHeadersMiddleware(MiddlewareMixin):
    """
    Adds the headers Django's SecurityMiddleware does not cover.

    nosniff, referrer policy and HSTS come from SECURE_* settings and frame
    options from X_FRAME_OPTIONS.
    """

    CONTENT_SECURITY_POLICY = (
        "default-src 'self'; "
        "img-src 'self' https: data:; "
        "style-src 'self' 'unsafe-inline'; "
        "frame-ancestors 'none'"
    )
    PERMISSIONS_POLICY = 'geolocation=(), microphone=(), camera=()'

    def process_response(self, request, response):
        response.setdefault('Content-Security-Policy', self.CONTENT_SECURITY_POLICY)
        response.setdefault('Permissions-Policy', self.PERMISSIONS_POLICY)
        return response
