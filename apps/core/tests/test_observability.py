"""
Tests for observability: structured logging, metrics and health endpoints.

Tests cover:
- Structured log message format
- Metrics counters, gauges and histograms
- Sweep metrics recording
- Health, liveness, readiness, metrics and status endpoints
"""

import json
from unittest.mock import patch

import pytest

from apps.core.observability import (
    HealthCheckResult,
    HealthStatus,
    LogContext,
    StructuredLogger,
    get_logger,
    health_checker,
    metrics,
    record_sweep_metrics,
    timed,
)


# ============================================================================
# Structured Logging
# ============================================================================

class TestStructuredLogger:

    def test_message_is_json_with_context(self):
        logger = get_logger('apps.test', component='lifecycle_sweep')
        ctx = LogContext(component='lifecycle_sweep', operation='advance', article_id='a-1')

        payload = json.loads(logger._format_message("Applied", ctx, transition='active->outdated'))

        assert payload['message'] == 'Applied'
        assert payload['component'] == 'lifecycle_sweep'
        assert payload['operation'] == 'advance'
        assert payload['article_id'] == 'a-1'
        assert payload['transition'] == 'active->outdated'

    def test_context_manager_scopes_fields(self):
        logger = StructuredLogger('apps.test')

        with logger.context(LogContext(component='c', operation='op', user_id='u-1')):
            inside = json.loads(logger._format_message("inside"))
        outside = json.loads(logger._format_message("outside"))

        assert inside['user_id'] == 'u-1'
        assert 'user_id' not in outside

    def test_log_context_drops_empty_fields(self):
        assert LogContext(component='c', operation='o').to_dict() == {
            'component': 'c',
            'operation': 'o',
        }


# ============================================================================
# Metrics
# ============================================================================

class TestMetricsCollector:

    def test_counter_with_tags(self):
        metrics.increment('lifecycle.sweeps', tags={'trigger': 'cron'})
        metrics.increment('lifecycle.sweeps', tags={'trigger': 'cron'})
        metrics.increment('lifecycle.sweeps', tags={'trigger': 'manual'})

        assert metrics.get_counter('lifecycle.sweeps', tags={'trigger': 'cron'}) == 2
        assert metrics.get_counter('lifecycle.sweeps', tags={'trigger': 'manual'}) == 1
        assert metrics.get_counter('lifecycle.sweeps') == 0

    def test_gauge_overwrites(self):
        metrics.gauge('queue.depth', 3)
        metrics.gauge('queue.depth', 5)
        assert metrics.get_gauge('queue.depth') == 5

    def test_histogram_stats(self):
        for value in (10, 20, 30, 40):
            metrics.histogram('sweep.duration', value)

        stats = metrics.get_histogram_stats('sweep.duration')
        assert stats['count'] == 4
        assert stats['min'] == 10
        assert stats['max'] == 40
        assert stats['avg'] == 25

    def test_timed_decorator(self):
        @timed('notify')
        def send():
            return 'sent'

        assert send() == 'sent'
        assert metrics.get_counter('notify_count') == 1
        assert metrics.get_histogram_stats('notify_duration_ms')['count'] == 1

    def test_record_sweep_metrics(self):
        record_sweep_metrics(
            {'outdated_marked': 3, 'removed': 1, 'failures': 0, 'duration_ms': 12.5},
            trigger='cron',
        )

        assert metrics.get_counter('lifecycle.sweeps', tags={'trigger': 'cron'}) == 1
        assert metrics.get_counter('lifecycle.outdated_marked') == 3
        assert metrics.get_counter('lifecycle.removed') == 1
        assert metrics.get_histogram_stats(
            'lifecycle.sweep_duration_ms', tags={'trigger': 'cron'}
        )['max'] == 12.5
        assert metrics.get_gauge('lifecycle.last_sweep_timestamp') is not None


# ============================================================================
# Health endpoints
# ============================================================================

@pytest.mark.django_db
class TestHealthEndpoints:

    def test_default_checks_registered(self):
        assert {'database', 'cache'} <= set(health_checker.list_checks())

    def test_health_all(self, client):
        response = client.get('/health/')

        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'healthy'
        assert body['checks']['database']['status'] == 'healthy'
        assert body['checks']['cache']['status'] == 'healthy'

    def test_health_single_check(self, client):
        response = client.get('/health/database/')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_unknown_check_is_unhealthy(self, client):
        response = client.get('/health/nope/')
        assert response.status_code == 503

    def test_unhealthy_database_fails_readiness(self, client):
        failing = HealthCheckResult(
            name='database', status=HealthStatus.UNHEALTHY, message='Database error: down',
        )
        with patch.dict(health_checker._checks, {'database': lambda: failing}):
            response = client.get('/readyz/')

        assert response.status_code == 503
        assert response.json()['status'] == 'not_ready'

    def test_liveness_and_readiness(self, client):
        assert client.get('/livez/').json() == {'status': 'alive'}
        assert client.get('/readyz/').json() == {'status': 'ready'}

    def test_metrics_endpoint(self, client):
        metrics.increment('lifecycle.sweeps', tags={'trigger': 'cron'})

        body = client.get('/metrics/').json()
        assert body['counters']['lifecycle.sweeps[trigger=cron]'] == 1

    def test_status_counts_articles(self, client, make_article):
        make_article()
        make_article(status='outdated')
        make_article(status='removed')
        make_article(status='removed')

        body = client.get('/status/').json()
        assert body['articles'] == {'active': 1, 'outdated': 1, 'removed': 2}
        assert body['health'] == 'healthy'
