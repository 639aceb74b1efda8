"""
JWT authentication that also reads the access token from a cookie.

API clients send ``Authorization: Bearer <token>``; the browser front end
relies on the HttpOnly cookie set at login.
"""

import logging

from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

logger = logging.getLogger(__name__)


class CookieJWTAuthentication(JWTAuthentication):
    """
    Header first, then the ``AUTH_COOKIE_NAME`` cookie.

    A bad header token is rejected with 401. A stale or invalid cookie is
    treated as no credentials, since the caller cannot fix it from script
    and public endpoints must keep working.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            return super().authenticate(request)

        raw_token = request.COOKIES.get(settings.AUTH_COOKIE_NAME)
        if not raw_token:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
            user = self.get_user(validated_token)
        except AuthenticationFailed as e:
            logger.debug("Ignoring invalid auth cookie: %s", e)
            return None

        return user, validated_token


def set_auth_cookie(response, access_token):
    """Attach the access token to ``response`` as an HttpOnly cookie."""
    lifetime = settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME']
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        str(access_token),
        max_age=int(lifetime.total_seconds()),
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
        path='/',
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(
        settings.AUTH_COOKIE_NAME,
        path='/',
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return response
