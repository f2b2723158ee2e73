"""
Shared metrics configuration for the Launchpad services.
"""

from typing import Dict, Any, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services.

    Each collector owns its registry so that several service instances (one
    per test, for example) never collide on metric names.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up the metrics every Launchpad service exports."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type"],
            registry=self.registry
        )

        # Cache metrics
        self._metrics["cache_requests_total"] = Counter(
            "cache_requests_total",
            "TTL cache lookups by outcome (hit, miss, join)",
            ["cache", "outcome"],
            registry=self.registry
        )

        self._metrics["cache_fetch_failures_total"] = Counter(
            "cache_fetch_failures_total",
            "Upstream fetch failures observed by the TTL cache",
            ["cache"],
            registry=self.registry
        )

        # Capacity metrics
        self._metrics["rate_limit_denials_total"] = Counter(
            "rate_limit_denials_total",
            "Requests denied by a rate limiter",
            ["limiter"],
            registry=self.registry
        )

        self._metrics["daily_gate_denials_total"] = Counter(
            "daily_gate_denials_total",
            "Requests denied by a daily quota gate",
            ["gate"],
            registry=self.registry
        )

        self._metrics["daily_gate_usage"] = Gauge(
            "daily_gate_usage",
            "Units consumed from a daily quota gate today",
            ["gate"],
            registry=self.registry
        )

        # Fee metrics
        self._metrics["skim_events_total"] = Counter(
            "skim_events_total",
            "Skim events recorded in the fee ledger",
            ["side"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def render(self) -> bytes:
        """Render this collector's registry in the Prometheus text format."""
        return generate_latest(self.registry)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str):
        """Record error metrics."""
        self._metrics["errors_total"].labels(error_type=error_type).inc()

    def record_cache_lookup(self, cache: str, outcome: str):
        self._metrics["cache_requests_total"].labels(cache=cache, outcome=outcome).inc()

    def record_cache_fetch_failure(self, cache: str):
        self._metrics["cache_fetch_failures_total"].labels(cache=cache).inc()

    def record_rate_limit_denial(self, limiter: str):
        self._metrics["rate_limit_denials_total"].labels(limiter=limiter).inc()

    def record_daily_gate(self, gate: str, count: int, allowed: bool):
        """Track gate usage; denials are counted separately."""
        self._metrics["daily_gate_usage"].labels(gate=gate).set(count)
        if not allowed:
            self._metrics["daily_gate_denials_total"].labels(gate=gate).inc()

    def record_skim_event(self, side: str):
        self._metrics["skim_events_total"].labels(side=side).inc()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
