"""
Tests for the article API.

Tests cover:
- Upload, listing and detail for the owner
- Renewal endpoints
- Public reader endpoints and interactions
- Cron and admin lifecycle triggers
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.articles.models import Article


UPLOAD = {
    'title': 'Jean Grey',
    'page_name': 'jean-grey',
    'content': 'Founding member of the X-Men.',
    'image_url': 'https://images.example.com/jean.webp',
    'tags': ['marvel', 'x-men', 'phoenix'],
    'category': 'comic',
}


@pytest.fixture
def reader(db):
    from apps.accounts.models import Member
    return Member.objects.create_user(email='fan@example.com', username='fan')


@pytest.fixture
def reader_client(reader):
    client = APIClient()
    client.force_authenticate(user=reader)
    return client


# ============================================================================
# Owner endpoints
# ============================================================================

@pytest.mark.django_db
class TestUpload:

    def test_upload(self, auth_client, member):
        response = auth_client.post('/api/articles/', UPLOAD, format='json')

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['message'] == 'SuperArticle created successfully!'

        article = Article.objects.get(page_name='jean-grey')
        data = body['data']
        assert data['id'] == str(article.pk)
        assert data['encrypted_id'] == article.encrypted_id
        assert data['public_url'] == f'https://articles.test/{article.encrypted_id}'
        assert data['preview_url'] == f'https://articles.test/preview/{article.encrypted_id}'
        assert len(data['recommendations']) == 4
        assert data['renewal_date']
        assert article.owner == member

    def test_missing_fields(self, auth_client):
        response = auth_client.post('/api/articles/', {'title': 'x'}, format='json')

        assert response.status_code == 400
        details = response.json()['error']['details']
        assert {'page_name', 'content', 'image_url'} <= set(details)

    def test_bad_image_url(self, auth_client):
        payload = dict(UPLOAD, image_url='http://images.example.com/jean.webp')

        response = auth_client.post('/api/articles/', payload, format='json')

        assert response.status_code == 400
        assert response.json()['error']['field'] == 'image_url'

    def test_duplicate_page_name(self, auth_client, reader_client):
        auth_client.post('/api/articles/', UPLOAD, format='json')

        response = reader_client.post('/api/articles/', UPLOAD, format='json')

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'DUPLICATE'

    def test_requires_login(self, api_client, db):
        response = api_client.post('/api/articles/', UPLOAD, format='json')
        assert response.status_code == 401


@pytest.mark.django_db
class TestOwnerArticles:

    def test_list_own_articles_in_every_state(self, auth_client, make_article, reader):
        make_article()
        make_article(status='outdated')
        make_article(status='removed')
        make_article(owner=reader)

        response = auth_client.get('/api/articles/')

        assert response.status_code == 200
        body = response.json()
        assert body['count'] == 3
        assert {a['status'] for a in body['results']} == {'active', 'outdated', 'removed'}
        assert all('days_left' in a for a in body['results'])

    def test_detail(self, auth_client, make_article):
        article = make_article()

        response = auth_client.get(f'/api/articles/{article.pk}/')

        assert response.status_code == 200
        assert response.json()['content']['text'] == article.content['text']

    def test_detail_of_other_member_hidden(self, reader_client, make_article):
        article = make_article()
        assert reader_client.get(f'/api/articles/{article.pk}/').status_code == 404


@pytest.mark.django_db
class TestRenewEndpoints:

    def test_renew(self, auth_client, make_article):
        article = make_article(
            status='outdated',
            next_renewal_date=timezone.now() - timedelta(days=2),
            quality_score=80,
        )

        response = auth_client.post(
            f'/api/articles/{article.pk}/renew/',
            {'updated_content': 'Now with Phoenix Saga details.'},
            format='json',
        )

        assert response.status_code == 200
        body = response.json()
        assert body['message'] == 'Article renewed successfully!'
        assert body['data']['status'] == 'active'
        assert body['data']['quality_score'] == 90
        assert 1 <= len(body['data']['suggestions']) <= 5
        article.refresh_from_db()
        assert article.content['text'] == 'Now with Phoenix Saga details.'
        assert article.content['updateCount'] == 1

    def test_renew_removed(self, auth_client, make_article):
        article = make_article(status='removed')

        response = auth_client.post(f'/api/articles/{article.pk}/renew/', {}, format='json')

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_TRANSITION'

    def test_renew_someone_elses(self, reader_client, make_article):
        article = make_article()

        response = reader_client.post(f'/api/articles/{article.pk}/renew/', {}, format='json')

        assert response.status_code == 404
        assert response.json()['error']['message'] == 'Article not found or unauthorized'

    def test_renew_all(self, auth_client, make_article):
        make_article()
        make_article(status='outdated')
        make_article(status='removed')

        response = auth_client.post('/api/articles/renew-all/', {}, format='json')

        assert response.status_code == 200
        assert response.json()['renewed_count'] == 2
        assert response.json()['message'] == 'Successfully renewed 2 articles'


# ============================================================================
# Public endpoints
# ============================================================================

@pytest.mark.django_db
class TestPublicView:

    def test_anonymous_read(self, api_client, make_article, member):
        article = make_article(renewal_recommendations=None)

        response = api_client.get(f'/api/view/{article.encrypted_id}/')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['title'] == article.title
        assert data['author']['username'] == 'reader'
        assert data['author']['avatar'] == 'https://ui-avatars.com/api/?name=reader'
        assert 'email' not in data['author']
        assert data['stats'] == {'views': 1, 'likes': 0, 'bookmarks': 0, 'comments': 0}
        assert data['renewal']['days_left'] == 30
        assert data['metadata']['status'] == 'active'
        assert data['user_interactions'] == {'liked': False, 'bookmarked': False}
        assert data['recommendations'] == []

    def test_member_view_counted_once_per_day(self, reader_client, make_article):
        article = make_article()

        reader_client.get(f'/api/view/{article.encrypted_id}/')
        response = reader_client.get(f'/api/view/{article.encrypted_id}/')

        assert response.json()['data']['stats']['views'] == 1

    @pytest.mark.parametrize('status', ['outdated', 'removed'])
    def test_inactive_articles_hidden(self, api_client, make_article, status):
        article = make_article(status=status)

        response = api_client.get(f'/api/view/{article.encrypted_id}/')

        assert response.status_code == 404
        assert response.json()['error']['message'] == 'Article not found or no longer available'

    def test_stale_cookie_still_reads(self, api_client, make_article):
        article = make_article()
        api_client.cookies['access_token'] = 'expired-token'

        assert api_client.get(f'/api/view/{article.encrypted_id}/').status_code == 200

    def test_comments_newest_first(self, reader_client, make_article):
        article = make_article()
        reader_client.post(f'/api/view/{article.encrypted_id}/comments/', {'content': 'first'}, format='json')
        reader_client.post(f'/api/view/{article.encrypted_id}/comments/', {'content': 'second'}, format='json')

        data = reader_client.get(f'/api/view/{article.encrypted_id}/').json()['data']

        assert [c['content'] for c in data['comments']] == ['second', 'first']
        assert data['stats']['comments'] == 2
        assert data['comments'][0]['author']['username'] == 'fan'


@pytest.mark.django_db
class TestPublicInteractions:

    def test_comment(self, reader_client, make_article):
        article = make_article()

        response = reader_client.post(
            f'/api/view/{article.encrypted_id}/comments/', {'content': 'Love it'}, format='json',
        )

        assert response.status_code == 201
        assert response.json()['comment']['content'] == 'Love it'

    def test_empty_comment(self, reader_client, make_article):
        article = make_article()

        response = reader_client.post(f'/api/view/{article.encrypted_id}/comments/', {}, format='json')

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Comment cannot be empty'

    def test_anonymous_cannot_interact(self, api_client, make_article):
        article = make_article()

        for action in ('comments', 'like', 'bookmark'):
            response = api_client.post(f'/api/view/{article.encrypted_id}/{action}/', {}, format='json')
            assert response.status_code == 401

    def test_like_and_bookmark(self, reader_client, make_article):
        article = make_article()
        base = f'/api/view/{article.encrypted_id}'

        assert reader_client.post(f'{base}/like/').json() == {'success': True, 'liked': True}
        assert reader_client.post(f'{base}/bookmark/').json() == {'success': True, 'bookmarked': True}
        assert reader_client.get(f'{base}/interactions/').json()['interactions'] == {
            'liked': True,
            'bookmarked': True,
        }

        assert reader_client.post(f'{base}/like/').json()['liked'] is False
        article.refresh_from_db()
        assert article.likes_count == 0
        assert article.bookmarks_count == 1

    def test_related(self, api_client, make_article):
        article = make_article(tags=['marvel'])
        related = make_article(tags=['marvel'], description='The Phoenix Force')
        make_article(tags=['dc'])

        response = api_client.get(f'/api/view/{article.encrypted_id}/related/')

        assert response.status_code == 200
        articles = response.json()['articles']
        assert [a['encrypted_id'] for a in articles] == [related.encrypted_id]
        assert articles[0]['excerpt'] == 'The Phoenix Force'


# ============================================================================
# Lifecycle triggers
# ============================================================================

@pytest.mark.django_db
class TestLifecycleTriggers:

    def test_cron_requires_secret(self, api_client):
        assert api_client.post('/api/lifecycle/sweep/').status_code == 403

        response = api_client.post('/api/lifecycle/sweep/', HTTP_X_CRON_SECRET='wrong')
        assert response.status_code == 403
        assert response.json()['error']['code'] == 'PERMISSION_DENIED'

    def test_unset_secret_rejects(self, api_client, settings):
        settings.CRON_SECRET = ''
        response = api_client.post('/api/lifecycle/sweep/', HTTP_X_CRON_SECRET='')
        assert response.status_code == 403

    def test_cron_runs_sweep(self, api_client, make_article):
        article = make_article(next_renewal_date=timezone.now() - timedelta(days=1))

        response = api_client.post('/api/lifecycle/sweep/', HTTP_X_CRON_SECRET='test-cron-secret')

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['message'] == 'Cleanup process completed'
        assert body['stats']['outdated_marked'] == 1
        assert body['next_run'] > body['timestamp']
        article.refresh_from_db()
        assert article.status == 'outdated'

    def test_cron_secret_does_not_open_manual(self, api_client):
        response = api_client.post('/api/lifecycle/sweep/manual/', HTTP_X_CRON_SECRET='test-cron-secret')
        assert response.status_code == 403

    def test_manual_runs_inline(self, api_client, make_article):
        make_article(status='outdated', next_renewal_date=timezone.now() - timedelta(days=30))

        response = api_client.post('/api/lifecycle/sweep/manual/', HTTP_ADMIN_TOKEN='test-admin-token')

        assert response.status_code == 200
        assert response.json()['stats']['removed'] == 1

    def test_manual_async_queues_task(self, api_client):
        with patch('apps.articles.tasks.run_lifecycle_sweep') as task:
            task.apply_async.return_value.id = 'task-123'

            response = api_client.post(
                '/api/lifecycle/sweep/manual/',
                {'async': True},
                format='json',
                HTTP_ADMIN_TOKEN='test-admin-token',
            )

        assert response.status_code == 202
        assert response.json()['task_id'] == 'task-123'
        assert task.apply_async.call_args.kwargs['kwargs'] == {'trigger': 'manual'}
