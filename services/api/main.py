"""
Opsboard — FastAPI Backend

One DashboardEngine per process, built in the lifespan and kept on
app.state. Collections are loaded at startup and on explicit reloads only.
"""
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from datasource import create_data_source
from engine import DashboardEngine
from log import get_logger
from store import CollectionStore
import metrics

logger = get_logger()

_start_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup — build the data source and engine, load the three feeds."""
    logger.info("opsboard.starting", env=settings.APP_ENV, source=settings.DATA_SOURCE)

    if settings.DATA_SOURCE == "postgres":
        from db.postgres import init_postgres
        await init_postgres()

    engine = DashboardEngine(
        create_data_source(settings),
        store=CollectionStore(settings.METRIC_HISTORY_CAP),
        readings_limit=settings.SENSOR_READINGS_LIMIT,
    )
    app.state.engine = engine

    if settings.RELOAD_ON_STARTUP:
        results = await engine.reload_all()
        logger.info("opsboard.ready", collections=results)
    yield

    if settings.DATA_SOURCE == "postgres":
        from db.postgres import close_postgres
        await close_postgres()
    logger.info("opsboard.shutdown")


app = FastAPI(
    title="Opsboard — City Operations Dashboard",
    description="Incidents, sensors and CCTV cameras as filterable views and one map layer",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def track_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    dur = time.perf_counter() - start
    if not request.url.path.startswith(("/docs", "/openapi", "/redoc", "/metrics")):
        metrics.api_requests.labels(method=request.method, path=request.url.path,
                                    status=str(response.status_code)).inc()
        metrics.api_request_latency.labels(method=request.method, path=request.url.path).observe(dur)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════

@app.get("/status")
async def status():
    return {
        "service": "opsboard-api",
        "version": "0.1.0",
        "data_source": settings.DATA_SOURCE,
        "uptime_s": round(time.time() - _start_time, 1),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ═══════════════════════════════════════════════════════════
# ROUTERS
# ═══════════════════════════════════════════════════════════

from routers import incidents, sensors, cameras, geo, dashboard, health as health_router

app.include_router(metrics.router, tags=["Metrics"])
app.include_router(health_router.router, tags=["Health"])
app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["Dashboard"])
app.include_router(incidents.router, prefix="/api/v1/incidents", tags=["Incidents"])
app.include_router(sensors.router, prefix="/api/v1/sensors", tags=["Sensors"])
app.include_router(cameras.router, prefix="/api/v1/cameras", tags=["Cameras"])
app.include_router(geo.router, prefix="/api/v1/map", tags=["Map"])
