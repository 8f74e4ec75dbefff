"""Prometheus metrics for external capability calls and the QA pipeline."""

from prometheus_client import Counter, Histogram

# External capability (embedding / generation) metrics
gateway_latency_ms = Histogram(
    "gateway_latency_ms",
    "External capability call latency in milliseconds",
    ["capability", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000, 16000],
)

gateway_errors_total = Counter(
    "gateway_errors_total",
    "Total external capability errors",
    ["capability", "reason"],
)

# Retrieval metrics
ranking_skipped_total = Counter(
    "ranking_skipped_total",
    "Candidates skipped during similarity ranking",
    ["reason"],
)

qa_answers_total = Counter(
    "qa_answers_total",
    "Questions processed by the answerer",
    ["outcome"],
)

ingested_chunks_total = Counter(
    "ingested_chunks_total",
    "Total chunks embedded and stored",
)


class PrometheusGatewayMetrics:
    """Prometheus-based gateway metrics implementation."""

    def record_latency(self, capability: str, outcome: str, latency_ms: float) -> None:
        """Record capability call latency."""
        gateway_latency_ms.labels(capability=capability, outcome=outcome).observe(latency_ms)

    def inc_error(self, capability: str, reason: str) -> None:
        """Increment error counter."""
        gateway_errors_total.labels(capability=capability, reason=reason).inc()
