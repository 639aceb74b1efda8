"""
Permission classes for SuperArticles.

Member-facing endpoints use DRF's IsAuthenticated plus ownership checks.
The lifecycle triggers are not tied to a member; they are authorized by a
shared secret in a request header.

Usage:
    from apps.core.permissions import HasCronSecret

    class LifecycleSweepView(APIView):
        authentication_classes = []
        permission_classes = [HasCronSecret]
"""

import logging

from django.conf import settings
from django.utils.crypto import constant_time_compare
from rest_framework.permissions import BasePermission

logger = logging.getLogger(__name__)


class SharedSecretPermission(BasePermission):
    """
    Compares a request header against a secret from settings.

    An unset secret denies every request.
    """

    header = None
    setting_name = None
    message = 'Unauthorized'

    def has_permission(self, request, view):
        expected = getattr(settings, self.setting_name, '') or ''
        provided = request.headers.get(self.header, '') or ''

        if not expected:
            logger.error(
                "%s is not configured; rejecting trigger request", self.setting_name
            )
            return False

        if not provided or not constant_time_compare(provided, expected):
            logger.warning(
                "Rejected trigger request with invalid %s header", self.header,
                extra={'path': request.path},
            )
            return False

        return True


class HasCronSecret(SharedSecretPermission):
    """Scheduler calls carry X-Cron-Secret."""

    header = 'X-Cron-Secret'
    setting_name = 'CRON_SECRET'


class HasAdminToken(SharedSecretPermission):
    """Manual runs carry Admin-Token."""

    header = 'Admin-Token'
    setting_name = 'ADMIN_TOKEN'


class IsArticleOwner(BasePermission):
    """
    Object-level permission: only the owner may act on an article.

    Staff users pass so the admin tooling can inspect any article.
    """

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_staff:
            return True
        return obj.owner_id == user.pk
