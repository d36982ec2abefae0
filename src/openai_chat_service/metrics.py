from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

requests_total = Counter(
    "openai_requests_total",
    "Total completion operations handled by the service",
    labelnames=["operation", "status"],
)

request_latency_seconds = Histogram(
    "openai_request_latency_seconds",
    "Completion operation latency (seconds)",
    buckets=[0.1, 0.3, 0.5, 1, 2, 5, 10, 30, 60],
    labelnames=["operation"],
)

tokens_total = Counter(
    "openai_tokens_total",
    "Tokens reported by the upstream deployment",
    labelnames=["operation", "kind"],
)


def maybe_start_metrics(*, enable: bool, bind: str, port: int) -> None:
    if not enable:
        return
    start_http_server(port, addr=bind)
