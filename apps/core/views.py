"""
Health check and observability views.
"""

from django.conf import settings
from django.db.models import Count
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.core.observability import HealthStatus, health_checker, metrics


@method_decorator(csrf_exempt, name='dispatch')
class HealthCheckView(View):
    """
    Health check endpoint.

    GET /health/ - Run all health checks
    GET /health/<check_name>/ - Run specific health check
    """

    def get(self, request, check_name=None):
        if check_name:
            result = health_checker.check(check_name)
            status_code = 200 if result.status == HealthStatus.HEALTHY else 503
            return JsonResponse({
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "duration_ms": result.duration_ms,
            }, status=status_code)

        results = health_checker.check_all()
        status_code = 200 if results["status"] == HealthStatus.HEALTHY.value else 503
        return JsonResponse(results, status=status_code)


@method_decorator(csrf_exempt, name='dispatch')
class LivenessView(View):
    """Liveness probe: 200 while the process is serving."""

    def get(self, request):
        return JsonResponse({"status": "alive"})


@method_decorator(csrf_exempt, name='dispatch')
class ReadinessView(View):
    """
    Readiness probe.

    Returns 200 once the database answers.
    """

    def get(self, request):
        db_check = health_checker.check("database")

        if db_check.status == HealthStatus.HEALTHY:
            return JsonResponse({"status": "ready"})
        return JsonResponse({
            "status": "not_ready",
            "reason": db_check.message,
        }, status=503)


@method_decorator(csrf_exempt, name='dispatch')
class MetricsView(View):
    """GET /metrics/ - all in-process counters, gauges and histograms."""

    def get(self, request):
        return JsonResponse(metrics.get_all_metrics())


@method_decorator(csrf_exempt, name='dispatch')
class StatusView(View):
    """
    Application status endpoint.

    GET /status/ - article counts by lifecycle status plus health summary
    """

    def get(self, request):
        from apps.articles.models import Article

        by_status = {
            row['status']: row['total']
            for row in Article.objects.values('status').annotate(total=Count('id'))
        }

        health = health_checker.check_all()

        return JsonResponse({
            "application": "SuperArticles",
            "environment": getattr(settings, 'ENVIRONMENT', 'development'),
            "version": getattr(settings, 'VERSION', ''),
            "health": health["status"],
            "articles": {
                "active": by_status.get('active', 0),
                "outdated": by_status.get('outdated', 0),
                "removed": by_status.get('removed', 0),
            },
            "checks": {
                name: check["status"]
                for name, check in health.get("checks", {}).items()
            },
        })
