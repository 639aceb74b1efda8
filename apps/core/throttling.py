"""
Rate limiting for SuperArticles.

Custom DRF throttle classes for the different endpoint families.

Usage in views:
    from apps.core.throttling import AuthEndpointThrottle

    class LoginView(APIView):
        throttle_classes = [AuthEndpointThrottle]

Usage in settings:
    REST_FRAMEWORK = {
        'DEFAULT_THROTTLE_RATES': {
            'auth': '100/15m',     # register, login, request-codes
            'upload': '50/15m',    # article submission
            'renew': '30/15m',     # renewals
            'view': '100/15m',     # public article reads and interactions
        }
    }

Rates accept an optional multiplier on the period ("100/15m" means 100
requests per 15 minutes). Counters are stored in the cache alias named by
RATE_LIMIT_CACHE_ALIAS, so a multi-instance deployment can share them
through Redis.
"""

import logging

from django.conf import settings
from django.core.cache import caches
from rest_framework.throttling import AnonRateThrottle, SimpleRateThrottle, UserRateThrottle

logger = logging.getLogger(__name__)

PERIOD_SECONDS = {'s': 1, 'm': 60, 'h': 3600, 'd': 86400}


def parse_rate(rate):
    """
    Parse "<requests>/<multiplier?><unit>" into (requests, seconds).

    >>> parse_rate('100/15m')
    (100, 900)
    >>> parse_rate('10/minute')
    (10, 60)
    """
    if rate is None:
        return (None, None)

    num, period = rate.split('/')
    num_requests = int(num)

    digits = ''
    for char in period:
        if not char.isdigit():
            break
        digits += char
    unit = period[len(digits):]
    multiplier = int(digits) if digits else 1

    return num_requests, multiplier * PERIOD_SECONDS[unit[0]]


class CacheBackedThrottleMixin:
    """Keeps throttle history in the dedicated rate-limit cache alias."""

    @property
    def cache(self):
        return caches[getattr(settings, 'RATE_LIMIT_CACHE_ALIAS', 'default')]

    def parse_rate(self, rate):
        return parse_rate(rate)

    def throttle_failure(self):
        logger.warning(
            "Rate limit exceeded for scope %s", self.scope,
            extra={'scope': self.scope, 'throttle_key': self.key},
        )
        return super().throttle_failure()


class AuthEndpointThrottle(CacheBackedThrottleMixin, AnonRateThrottle):
    """
    Throttle for account endpoints, keyed by client IP.

    Applies to:
    - POST /api/auth/register/
    - POST /api/auth/login/
    - POST /api/auth/request-codes/

    Default: 100 requests / 15 minutes
    """
    scope = 'auth'

    def get_cache_key(self, request, view):
        # Applies to signed-in callers too; login is reachable with a cookie
        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request),
        }


class UploadEndpointThrottle(CacheBackedThrottleMixin, UserRateThrottle):
    """
    Throttle for article submission.

    Applies to:
    - POST /api/articles/

    Default: 50 requests / 15 minutes
    """
    scope = 'upload'


class RenewEndpointThrottle(CacheBackedThrottleMixin, UserRateThrottle):
    """
    Throttle for renewals.

    Applies to:
    - POST /api/articles/{id}/renew/
    - POST /api/articles/renew-all/

    Default: 30 requests / 15 minutes
    """
    scope = 'renew'


class ViewEndpointThrottle(CacheBackedThrottleMixin, SimpleRateThrottle):
    """
    Throttle for the public article endpoints.

    Signed-in readers are keyed by member, anonymous readers by IP.

    Default: 100 requests / 15 minutes
    """
    scope = 'view'

    def get_cache_key(self, request, view):
        if request.user and request.user.is_authenticated:
            ident = request.user.pk
        else:
            ident = self.get_ident(request)

        return self.cache_format % {
            'scope': self.scope,
            'ident': ident,
        }
