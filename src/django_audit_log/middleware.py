"""Middleware for capturing request context.

Captures request metadata (IP, user agent, request ID, acting user) and makes
it available to log_event() calls via thread-local storage, so services can
record audit events without threading the request through every call.

Usage in settings.py:

    MIDDLEWARE = [
        ...
        'django.contrib.auth.middleware.AuthenticationMiddleware',
        'django_audit_log.middleware.AuditContextMiddleware',  # After auth
        ...
    ]
"""
import threading
import uuid

_thread_locals = threading.local()

ACTOR_HEADER = 'HTTP_X_USER_ID'


def get_current_request():
    """Get the current request from thread-local storage."""
    return getattr(_thread_locals, 'request', None)


def get_current_actor():
    """Get the acting user id from thread-local storage."""
    return getattr(_thread_locals, 'actor', None)


def get_request_id():
    """Get the current request ID from thread-local storage."""
    return getattr(_thread_locals, 'request_id', None)


def set_request_context(request=None, actor=None, request_id=None):
    """Set request context in thread-local storage."""
    _thread_locals.request = request
    _thread_locals.actor = actor
    _thread_locals.request_id = request_id


def clear_request_context():
    """Clear request context from thread-local storage."""
    _thread_locals.request = None
    _thread_locals.actor = None
    _thread_locals.request_id = None


def get_actor(request, default='system'):
    """Resolve who is acting for a request.

    Order: X-User-Id header, authenticated username, ``default``.
    """
    if request is None:
        return default
    actor = request.META.get(ACTOR_HEADER, '').strip()
    if actor:
        return actor[:200]
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user.get_username()
    return default


class AuditContextMiddleware:
    """Middleware to capture request context for audit logging.

    Captures:
    - The HTTP request object
    - The acting user id (see get_actor)
    - A unique request ID for correlation (X-Request-ID or generated)
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get('HTTP_X_REQUEST_ID')
        if not request_id:
            request_id = str(uuid.uuid4())[:8]

        request.audit_request_id = request_id

        set_request_context(
            request=request,
            actor=get_actor(request, default=None),
            request_id=request_id,
        )

        try:
            response = self.get_response(request)
        finally:
            # Always clear context after request
            clear_request_context()

        response['X-Request-ID'] = request_id
        return response
