"""
Observability utilities for SuperArticles.

Structured logging, in-process metrics and health checks.
"""

import functools
import json
import logging
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from django.utils import timezone


# =============================================================================
# Structured Logging
# =============================================================================

@dataclass
class LogContext:
    """
    Structured log context for consistent logging.
    """
    component: str
    operation: str
    request_id: Optional[str] = None
    user_id: Optional[str] = None
    article_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result = {
            "component": self.component,
            "operation": self.operation,
        }
        if self.request_id:
            result["request_id"] = self.request_id
        if self.user_id:
            result["user_id"] = self.user_id
        if self.article_id:
            result["article_id"] = self.article_id
        if self.extra:
            result.update(self.extra)
        return result


class StructuredLogger:
    """
    Structured logger that outputs JSON-formatted log messages.

    Supports contextual logging with consistent field names, so sweep
    output can be filtered by article or member.
    """

    def __init__(self, name: str, default_context: Optional[LogContext] = None):
        self._logger = logging.getLogger(name)
        self._default_context = default_context
        self._context_stack: List[LogContext] = []

    def _format_message(
        self,
        message: str,
        context: Optional[LogContext] = None,
        **kwargs
    ) -> str:
        log_data = {
            "message": message,
            "timestamp": timezone.now().isoformat(),
        }

        if self._default_context:
            log_data.update(self._default_context.to_dict())

        # Most recent context wins
        for ctx in self._context_stack:
            log_data.update(ctx.to_dict())

        if context:
            log_data.update(context.to_dict())

        log_data.update(kwargs)

        return json.dumps(log_data, default=str)

    @contextmanager
    def context(self, ctx: LogContext):
        """Context manager for temporary logging context."""
        self._context_stack.append(ctx)
        try:
            yield
        finally:
            self._context_stack.pop()

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._logger.debug(self._format_message(message, context, level="DEBUG", **kwargs))

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._logger.info(self._format_message(message, context, level="INFO", **kwargs))

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._logger.warning(self._format_message(message, context, level="WARNING", **kwargs))

    def error(self, message: str, context: Optional[LogContext] = None, exc_info: bool = False, **kwargs):
        if exc_info:
            kwargs["traceback"] = traceback.format_exc()
        self._logger.error(self._format_message(message, context, level="ERROR", **kwargs))

    def exception(self, message: str, context: Optional[LogContext] = None, **kwargs):
        """Log exception with traceback."""
        self.error(message, context, exc_info=True, **kwargs)


def get_logger(name: str, component: Optional[str] = None) -> StructuredLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name.
        component: Default component name for context.
    """
    default_ctx = None
    if component:
        default_ctx = LogContext(component=component, operation="")
    return StructuredLogger(name, default_ctx)


# =============================================================================
# Metrics Collection
# =============================================================================

class MetricsCollector:
    """
    Collect and aggregate metrics.

    Thread-safe singleton for application-wide metrics. Values live in
    process memory and are exposed through /metrics/.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._counters: Dict[str, float] = {}
                cls._instance._gauges: Dict[str, float] = {}
                cls._instance._histograms: Dict[str, List[float]] = {}
        return cls._instance

    def _make_key(self, name: str, tags: Optional[Dict[str, str]] = None) -> str:
        """Create a unique key for a metric with tags."""
        if not tags:
            return name
        tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{name}[{tag_str}]"

    def increment(self, name: str, value: float = 1.0, tags: Optional[Dict[str, str]] = None) -> None:
        key = self._make_key(name, tags)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + value

    def gauge(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        key = self._make_key(name, tags)
        with self._lock:
            self._gauges[key] = value

    def histogram(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        key = self._make_key(name, tags)
        with self._lock:
            values = self._histograms.setdefault(key, [])
            values.append(value)
            # Keep only recent values
            self._histograms[key] = values[-1000:]

    @contextmanager
    def timer(self, name: str, tags: Optional[Dict[str, str]] = None):
        """
        Context manager to time an operation.

        Records ``<name>_duration_ms`` and ``<name>_count`` on exit.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.histogram(f"{name}_duration_ms", duration_ms, tags)
            self.increment(f"{name}_count", tags=tags)

    def get_counter(self, name: str, tags: Optional[Dict[str, str]] = None) -> float:
        return self._counters.get(self._make_key(name, tags), 0)

    def get_gauge(self, name: str, tags: Optional[Dict[str, str]] = None) -> Optional[float]:
        return self._gauges.get(self._make_key(name, tags))

    def _stats(self, values: List[float]) -> Dict[str, float]:
        if not values:
            return {"count": 0, "min": 0, "max": 0, "avg": 0, "p50": 0, "p95": 0, "p99": 0}

        sorted_values = sorted(values)
        count = len(sorted_values)

        return {
            "count": count,
            "min": sorted_values[0],
            "max": sorted_values[-1],
            "avg": sum(sorted_values) / count,
            "p50": sorted_values[int(count * 0.50)],
            "p95": sorted_values[int(count * 0.95)] if count > 1 else sorted_values[0],
            "p99": sorted_values[int(count * 0.99)] if count > 1 else sorted_values[0],
        }

    def get_histogram_stats(self, name: str, tags: Optional[Dict[str, str]] = None) -> Dict[str, float]:
        return self._stats(self._histograms.get(self._make_key(name, tags), []))

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all current metric values."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "histograms": {
                    key: self._stats(values)
                    for key, values in self._histograms.items()
                },
                "timestamp": timezone.now().isoformat(),
            }

    def clear(self) -> None:
        """Clear all metrics (useful for testing)."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()


# Global metrics instance
metrics = MetricsCollector()


# =============================================================================
# Health Checks
# =============================================================================

class HealthStatus(Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of a health check."""
    name: str
    status: HealthStatus
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0
    timestamp: datetime = field(default_factory=timezone.now)


class HealthChecker:
    """
    Health check registry and executor.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._checks: Dict[str, Callable[[], HealthCheckResult]] = {}
        return cls._instance

    def register(self, name: str, check_fn: Callable[[], HealthCheckResult]) -> None:
        self._checks[name] = check_fn

    def check(self, name: str) -> HealthCheckResult:
        """Run a specific health check."""
        if name not in self._checks:
            return HealthCheckResult(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=f"Unknown check: {name}",
            )

        start = time.perf_counter()
        try:
            result = self._checks[name]()
        except Exception as e:
            return HealthCheckResult(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=str(e),
                duration_ms=(time.perf_counter() - start) * 1000,
            )
        result.duration_ms = (time.perf_counter() - start) * 1000
        return result

    def check_all(self) -> Dict[str, Any]:
        """Run all health checks."""
        results = {}
        overall_status = HealthStatus.HEALTHY

        for name in self._checks:
            result = self.check(name)
            results[name] = {
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "duration_ms": result.duration_ms,
            }

            if result.status == HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.UNHEALTHY
            elif result.status == HealthStatus.DEGRADED and overall_status != HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.DEGRADED

        return {
            "status": overall_status.value,
            "checks": results,
            "timestamp": timezone.now().isoformat(),
        }

    def list_checks(self) -> List[str]:
        return list(self._checks.keys())


# Global health checker instance
health_checker = HealthChecker()


def check_database() -> HealthCheckResult:
    """Check database connectivity."""
    from django.db import connection

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except Exception as e:
        return HealthCheckResult(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message=f"Database error: {e}",
        )
    return HealthCheckResult(
        name="database",
        status=HealthStatus.HEALTHY,
        message="Database connection successful",
    )


def check_cache() -> HealthCheckResult:
    """
    Check the default cache and the rate-limit cache.

    A broken rate-limit cache degrades the service rather than taking it
    down; throttled endpoints still answer.
    """
    from django.conf import settings
    from django.core.cache import caches

    try:
        cache = caches['default']
        cache.set("health_check", "ok", 10)
        if cache.get("health_check") != "ok":
            return HealthCheckResult(
                name="cache",
                status=HealthStatus.DEGRADED,
                message="Cache get/set mismatch",
            )
    except Exception as e:
        return HealthCheckResult(
            name="cache",
            status=HealthStatus.UNHEALTHY,
            message=f"Cache error: {e}",
        )

    alias = getattr(settings, 'RATE_LIMIT_CACHE_ALIAS', 'default')
    try:
        caches[alias].get("health_check")
    except Exception as e:
        return HealthCheckResult(
            name="cache",
            status=HealthStatus.DEGRADED,
            message=f"Rate limit cache error: {e}",
            details={"alias": alias},
        )

    return HealthCheckResult(
        name="cache",
        status=HealthStatus.HEALTHY,
        message="Cache connection successful",
        details={"rate_limit_alias": alias},
    )


def register_default_checks():
    """Register default health checks."""
    health_checker.register("database", check_database)
    health_checker.register("cache", check_cache)


# =============================================================================
# Decorators and recorders
# =============================================================================

def timed(metric_name: Optional[str] = None, tags: Optional[Dict[str, str]] = None):
    """
    Decorator to time function execution.

    Args:
        metric_name: Metric name (default: function name).
        tags: Optional metric tags.
    """
    def decorator(func: Callable) -> Callable:
        name = metric_name or f"{func.__module__}.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with metrics.timer(name, tags):
                return func(*args, **kwargs)

        return wrapper
    return decorator


def record_sweep_metrics(stats: Dict[str, Any], trigger: str) -> None:
    """Record the outcome of one lifecycle sweep."""
    tags = {"trigger": trigger}

    metrics.increment("lifecycle.sweeps", tags=tags)
    for key in (
        "outdated_marked",
        "removed",
        "recommendations_generated",
        "notifications_sent",
        "conflicts",
        "failures",
    ):
        metrics.increment(f"lifecycle.{key}", stats.get(key, 0))
    metrics.histogram("lifecycle.sweep_duration_ms", stats.get("duration_ms", 0), tags=tags)
    metrics.gauge("lifecycle.last_sweep_timestamp", time.time())
