"""Prometheus metrics for CourseHub.

Provides cache metrics (hits, misses, absorbed errors, latency) and the
exposition used by the /metrics endpoint.

Usage:
    from coursehub.observability.metrics import record_cache_hit

    record_cache_hit("course")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import REGISTRY, Counter, Histogram, generate_latest

from coursehub.config import settings

logger = logging.getLogger(__name__)


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    cache_hits_total: Any = None
    cache_misses_total: Any = None
    cache_errors_total: Any = None
    cache_operation_duration_seconds: Any = None

    # Internal state
    _initialized: bool = field(default=False, repr=False)
    _registry: Any = field(default=None, repr=False)

    def initialize(self) -> None:
        """Initialize Prometheus metrics."""
        if self._initialized:
            return

        if not settings.enable_metrics:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = REGISTRY

        self.cache_hits_total = Counter(
            "coursehub_cache_hits_total",
            "Cache hits",
            ["kind"],
        )
        self.cache_misses_total = Counter(
            "coursehub_cache_misses_total",
            "Cache misses (including misses caused by absorbed errors)",
            ["kind"],
        )
        self.cache_errors_total = Counter(
            "coursehub_cache_errors_total",
            "Cache backend or codec errors absorbed by the cache layer",
            ["operation"],
        )
        self.cache_operation_duration_seconds = Histogram(
            "coursehub_cache_operation_duration_seconds",
            "Cache operation latency in seconds",
            ["operation"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if not settings.enable_metrics or self._registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)


# Global metrics registry
metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry


def record_cache_hit(kind: str) -> None:
    metrics = get_metrics()
    if metrics.cache_hits_total:
        metrics.cache_hits_total.labels(kind=kind).inc()


def record_cache_miss(kind: str) -> None:
    metrics = get_metrics()
    if metrics.cache_misses_total:
        metrics.cache_misses_total.labels(kind=kind).inc()


def record_cache_error(operation: str) -> None:
    metrics = get_metrics()
    if metrics.cache_errors_total:
        metrics.cache_errors_total.labels(operation=operation).inc()


def record_cache_operation(operation: str, duration: float) -> None:
    """Record cache operation duration.

    Args:
        operation: Cache operation (get, set, delete)
        duration: Operation duration in seconds
    """
    metrics = get_metrics()
    if metrics.cache_operation_duration_seconds:
        metrics.cache_operation_duration_seconds.labels(operation=operation).observe(duration)
