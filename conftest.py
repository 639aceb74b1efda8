"""
Shared pytest fixtures for the SuperArticles test suite.
"""

import uuid
from datetime import timedelta

import pytest
from django.core.cache import caches
from django.utils import timezone
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def reset_caches_and_metrics():
    """Throttle counters and in-process metrics must not leak between tests."""
    from apps.core.observability import metrics

    caches['default'].clear()
    caches['ratelimit'].clear()
    metrics.clear()
    yield
    metrics.clear()


@pytest.fixture
def api_client():
    """Create an API client."""
    return APIClient()


@pytest.fixture
def member(db):
    """Create a member with no security codes."""
    from apps.accounts.models import Member
    return Member.objects.create_user(email='reader@example.com', username='reader')


@pytest.fixture
def other_member(db):
    from apps.accounts.models import Member
    return Member.objects.create_user(email='other@example.com')


@pytest.fixture
def auth_client(member):
    """API client authenticated as ``member``."""
    client = APIClient()
    client.force_authenticate(user=member)
    return client


@pytest.fixture
def make_article(db, member):
    """
    Factory for articles in any lifecycle state.

    Fields default to a freshly submitted active article owned by
    ``member``; pass keyword arguments to override.
    """
    from apps.articles.models import Article

    def _make(**fields):
        now = timezone.now()
        next_renewal = fields.pop('next_renewal_date', now + timedelta(days=30))
        page_name = fields.pop('page_name', f"article-{uuid.uuid4().hex[:8]}")
        defaults = {
            'owner': member,
            'title': 'Wolverine: A Complete History',
            'page_name': page_name,
            'encrypted_id': uuid.uuid4().hex[:20],
            'image_url': 'https://images.example.com/logan.png',
            'content': {'text': 'Born James Howlett...', 'formatted': 'Born James Howlett...'},
            'tags': ['marvel', 'x-men'],
            'category': 'comic',
            'status': 'active',
            'last_renewed': next_renewal - timedelta(days=30),
            'next_renewal_date': next_renewal,
            'removal_date': next_renewal + timedelta(days=20),
            'quality_score': 100,
        }
        defaults.update(fields)
        defaults.setdefault('public_url', f"https://articles.test/{defaults['encrypted_id']}")
        return Article.objects.create(**defaults)

    return _make
