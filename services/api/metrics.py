"""
Opsboard — Prometheus Metrics

Exposes /metrics. Tracks collection reloads, snapshot sizes, selection
loads and incident status transitions.
"""
import time
from functools import wraps
from typing import Callable
from prometheus_client import (
    Counter, Histogram, Gauge, Info,
    generate_latest, CONTENT_TYPE_LATEST
)
from fastapi import APIRouter, Response


router = APIRouter()

# ═══════════════════════════════════════════════════════════
# COUNTERS
# ═══════════════════════════════════════════════════════════

collection_reloads = Counter(
    "opsboard_collection_reloads_total",
    "Collection reloads by outcome",
    ["kind", "outcome"]
)

metric_loads = Counter(
    "opsboard_sensor_metric_loads_total",
    "Selected-sensor reading loads by outcome (applied, stale, error)",
    ["outcome"]
)

status_transitions = Counter(
    "opsboard_incident_status_transitions_total",
    "Incident status changes",
    ["to_status"]
)

api_requests = Counter(
    "opsboard_api_requests_total",
    "Total API requests",
    ["method", "path", "status"]
)

# ═══════════════════════════════════════════════════════════
# HISTOGRAMS
# ═══════════════════════════════════════════════════════════

reload_latency = Histogram(
    "opsboard_reload_latency_seconds",
    "Time to fetch and normalize one collection",
    ["kind"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

api_request_latency = Histogram(
    "opsboard_api_latency_seconds",
    "API latency",
    ["method", "path"],
    buckets=[.01, .05, .1, .25, .5, 1, 2.5]
)

# ═══════════════════════════════════════════════════════════
# GAUGES
# ═══════════════════════════════════════════════════════════

collection_size = Gauge(
    "opsboard_collection_size",
    "Records in the current snapshot",
    ["kind"]
)

# ═══════════════════════════════════════════════════════════
# INFO
# ═══════════════════════════════════════════════════════════

build_info = Info(
    "opsboard_build",
    "Build information"
)
build_info.info({
    "version": "0.1.0",
    "service": "api",
})


# ═══════════════════════════════════════════════════════════
# METRICS ENDPOINT
# ═══════════════════════════════════════════════════════════

@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# ═══════════════════════════════════════════════════════════
# DECORATORS
# ═══════════════════════════════════════════════════════════

def track_reload(func: Callable):
    """Decorator for `async reload(self, kind)`: latency, outcome, size."""
    @wraps(func)
    async def wrapper(self, kind, *args, **kwargs):
        label = getattr(kind, "value", kind)
        start = time.perf_counter()
        try:
            snapshot = await func(self, kind, *args, **kwargs)
        except Exception:
            collection_reloads.labels(kind=label, outcome="error").inc()
            raise
        finally:
            reload_latency.labels(kind=label).observe(time.perf_counter() - start)
        collection_reloads.labels(kind=label, outcome="ok").inc()
        collection_size.labels(kind=label).set(len(snapshot))
        return snapshot
    return wrapper
