"""
URL patterns for core app observability endpoints.
"""

from django.urls import path

from .views import (
    HealthCheckView,
    LivenessView,
    MetricsView,
    ReadinessView,
    StatusView,
)

app_name = 'core'

urlpatterns = [
    # Health checks
    path('health/', HealthCheckView.as_view(), name='health'),
    path('health/<str:check_name>/', HealthCheckView.as_view(), name='health-check'),

    # Probes
    path('livez/', LivenessView.as_view(), name='liveness'),
    path('readyz/', ReadinessView.as_view(), name='readiness'),

    # Metrics
    path('metrics/', MetricsView.as_view(), name='metrics'),

    # Status
    path('status/', StatusView.as_view(), name='status'),
]
