"""
Monitoring and observability components for Crypto Council
"""

from .prometheus_metrics import (
    PrometheusMetricsCollector,
    MetricsTimer,
    create_metrics_collector,
    get_metrics_for_testing,
)

__all__ = [
    "PrometheusMetricsCollector",
    "MetricsTimer",
    "create_metrics_collector",
    "get_metrics_for_testing",
]
