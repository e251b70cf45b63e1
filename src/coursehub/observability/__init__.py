"""Observability module for CourseHub.

Provides structured logging with request IDs and Prometheus cache metrics.
"""

from coursehub.observability.logging import configure_logging, request_id_var
from coursehub.observability.metrics import get_metrics, metrics_registry

__all__ = [
    # Logging
    "configure_logging",
    "request_id_var",
    # Metrics
    "get_metrics",
    "metrics_registry",
]
