"""
Prometheus metrics middleware for Prompt Desk Bot API.

Exposes /metrics endpoint with request counters, latency histograms,
and bot turn metrics.
"""

import logging
import time

from fastapi import Request, Response
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, CONTENT_TYPE_LATEST,
)
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Request metrics
REQUEST_COUNT = Counter(
    "promptdesk_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "promptdesk_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
ACTIVE_REQUESTS = Gauge(
    "promptdesk_http_active_requests",
    "Currently active HTTP requests",
)

# Bot metrics
TURN_COUNT = Counter(
    "promptdesk_turns_total",
    "Inbound updates by outcome",
    ["outcome"],  # handled, failed, ignored
)
TURN_LATENCY = Histogram(
    "promptdesk_turn_duration_seconds",
    "Time to route one inbound message",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)
EFFECTS_SENT = Counter(
    "promptdesk_effects_total",
    "Outbound effects by type and result",
    ["effect", "result"],
)


def record_turn(outcome: str, seconds: float = None):
    """Record a processed inbound update."""
    TURN_COUNT.labels(outcome=outcome).inc()
    if seconds is not None:
        TURN_LATENCY.observe(seconds)


def record_effect(effect: str, success: bool):
    """Record one outbound reply or forward."""
    EFFECTS_SENT.labels(effect=effect, result="ok" if success else "error").inc()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware that records HTTP request metrics."""

    async def dispatch(self, request: Request, call_next):
        ACTIVE_REQUESTS.inc()
        start = time.time()

        try:
            response = await call_next(request)
        except Exception:
            ACTIVE_REQUESTS.dec()
            raise

        duration = time.time() - start
        endpoint = request.url.path

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        REQUEST_LATENCY.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)
        ACTIVE_REQUESTS.dec()

        return response


async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
