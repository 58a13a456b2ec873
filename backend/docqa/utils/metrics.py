"""Prometheus metrics for provider calls and the QA pipeline."""

from prometheus_client import Counter, Histogram

# Provider call metrics
provider_latency_ms = Histogram(
    "provider_latency_ms",
    "Reasoning provider call latency in milliseconds",
    ["operation", "outcome"],
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000],
)

provider_errors_total = Counter(
    "provider_errors_total",
    "Total reasoning provider errors",
    ["operation", "reason"],
)

provider_retries_total = Counter(
    "provider_retries_total",
    "Total retries after transient provider overload",
    ["operation"],
)

# Pipeline metrics
qa_requests_total = Counter(
    "qa_requests_total",
    "Total question requests by final outcome",
    ["outcome"],
)


class ProviderMetrics:
    """No-op metrics interface for provider calls."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        pass

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment error counter."""
        pass

    def inc_retry(self, operation: str) -> None:
        """Increment retry counter."""
        pass


class PrometheusProviderMetrics(ProviderMetrics):
    """Prometheus-based provider metrics implementation."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        provider_latency_ms.labels(operation=operation, outcome=outcome).observe(latency_ms)

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment error counter."""
        provider_errors_total.labels(operation=operation, reason=reason).inc()

    def inc_retry(self, operation: str) -> None:
        """Increment retry counter."""
        provider_retries_total.labels(operation=operation).inc()
