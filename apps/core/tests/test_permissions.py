"""
Tests for shared-secret trigger permissions and article ownership.
"""

from unittest.mock import MagicMock

import pytest
from rest_framework.test import APIRequestFactory

from apps.core.permissions import HasAdminToken, HasCronSecret, IsArticleOwner


factory = APIRequestFactory()


class TestSharedSecretPermission:

    def test_matching_cron_secret(self):
        request = factory.post('/', HTTP_X_CRON_SECRET='test-cron-secret')
        assert HasCronSecret().has_permission(request, None) is True

    def test_wrong_cron_secret(self):
        request = factory.post('/', HTTP_X_CRON_SECRET='guess')
        assert HasCronSecret().has_permission(request, None) is False

    def test_missing_header(self):
        request = factory.post('/')
        assert HasCronSecret().has_permission(request, None) is False

    def test_unset_secret_rejects_everything(self, settings):
        settings.CRON_SECRET = ''
        request = factory.post('/', HTTP_X_CRON_SECRET='')
        assert HasCronSecret().has_permission(request, None) is False

    def test_admin_token_header(self):
        good = factory.post('/', HTTP_ADMIN_TOKEN='test-admin-token')
        cron = factory.post('/', HTTP_X_CRON_SECRET='test-admin-token')

        assert HasAdminToken().has_permission(good, None) is True
        assert HasAdminToken().has_permission(cron, None) is False


class TestIsArticleOwner:

    def _request(self, user):
        request = MagicMock()
        request.user = user
        return request

    def test_owner_allowed(self):
        user = MagicMock(is_authenticated=True, is_staff=False, pk='m-1')
        article = MagicMock(owner_id='m-1')
        assert IsArticleOwner().has_object_permission(self._request(user), None, article)

    def test_other_member_denied(self):
        user = MagicMock(is_authenticated=True, is_staff=False, pk='m-2')
        article = MagicMock(owner_id='m-1')
        assert not IsArticleOwner().has_object_permission(self._request(user), None, article)

    def test_staff_allowed(self):
        user = MagicMock(is_authenticated=True, is_staff=True, pk='m-9')
        article = MagicMock(owner_id='m-1')
        assert IsArticleOwner().has_object_permission(self._request(user), None, article)
