"""
Prometheus metrics for market data acquisition and agent collaboration
"""

from prometheus_client import Counter, Histogram, CollectorRegistry
from typing import Any, Optional
import time


class PrometheusMetricsCollector:
    """Counters and histograms exposed at /metrics"""

    def __init__(self, registry: Optional[CollectorRegistry] = None, settings: Optional[Any] = None):
        self.registry = registry or CollectorRegistry()
        # Optional bucket overrides from settings.monitoring.prometheus_buckets
        buckets = None
        if settings is not None and hasattr(settings, 'monitoring'):
            buckets = getattr(settings.monitoring, 'prometheus_buckets', None)

        # Market data
        self.market_data_requests = Counter(
            'market_data_requests_total',
            'Market data requests by provider and outcome',
            ['provider', 'outcome'],
            registry=self.registry
        )
        self.market_data_fallbacks = Counter(
            'market_data_fallbacks_total',
            'Requests answered (fully or partly) with synthetic data',
            ['provider', 'reason'],
            registry=self.registry
        )
        self.market_data_latency = Histogram(
            'market_data_latency_seconds',
            'Latency of live market data requests',
            ['provider'],
            buckets=(getattr(buckets, 'market_data_latency_seconds', None) if buckets else [
                0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0
            ]),
            registry=self.registry
        )
        self.rate_limit_denials = Counter(
            'rate_limit_denials_total',
            'Acquisitions denied by the local rate limiter',
            ['provider'],
            registry=self.registry
        )

        # Agents
        self.agent_calls = Counter(
            'agent_calls_total',
            'AI agent calls by provider and outcome',
            ['provider', 'outcome'],
            registry=self.registry
        )
        self.agent_call_latency = Histogram(
            'agent_call_latency_seconds',
            'Latency of individual AI agent calls',
            ['provider'],
            buckets=(getattr(buckets, 'agent_call_latency_seconds', None) if buckets else [
                0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0
            ]),
            registry=self.registry
        )
        self.collaboration_runs = Counter(
            'collaboration_runs_total',
            'Collaboration runs by outcome',
            ['outcome'],
            registry=self.registry
        )

    def record_market_data_request(self, provider: str, outcome: str):
        """Record a market data request (outcome: success|partial|fallback)"""
        self.market_data_requests.labels(provider=provider, outcome=outcome).inc()

    def record_market_data_fallback(self, provider: str, reason: str):
        """Record synthetic fallback and why it happened"""
        self.market_data_fallbacks.labels(provider=provider, reason=reason).inc()

    def record_market_data_latency(self, provider: str, duration_seconds: float):
        self.market_data_latency.labels(provider=provider).observe(duration_seconds)

    def record_rate_limit_denial(self, provider: str):
        self.rate_limit_denials.labels(provider=provider).inc()

    def record_agent_call(self, provider: str, success: bool, duration_seconds: float):
        """Record one agent call and its latency"""
        outcome = "success" if success else "failure"
        self.agent_calls.labels(provider=provider, outcome=outcome).inc()
        self.agent_call_latency.labels(provider=provider).observe(duration_seconds)

    def record_collaboration_run(self, outcome: str):
        """Record a run outcome (complete|invalid_task|no_agents)"""
        self.collaboration_runs.labels(outcome=outcome).inc()


class MetricsTimer:
    """Context manager measuring elapsed wall time in seconds"""

    def __init__(self):
        self.start_time = None
        self.duration = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time


def get_metrics_for_testing() -> PrometheusMetricsCollector:
    """Get metrics collector with custom registry for testing"""
    return PrometheusMetricsCollector(registry=CollectorRegistry())


def create_metrics_collector(registry: CollectorRegistry, settings: Any) -> Optional[PrometheusMetricsCollector]:
    """Collector bound to the shared registry, or None when metrics are disabled"""
    if not settings.monitoring.metrics_enabled:
        return None
    return PrometheusMetricsCollector(registry=registry, settings=settings)
