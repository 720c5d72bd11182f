"""
Opsboard — Dashboard Router
KPIs and the recent incidents table; reload of all feeds
"""
from log import get_logger
from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from config import settings
from deps import get_engine
from engine import DashboardEngine

logger = get_logger()
router = APIRouter()


@router.get("/")
async def dashboard(engine: DashboardEngine = Depends(get_engine)):
    return {
        "kpis": engine.kpis(),
        "recent_incidents": engine.recent_incidents(settings.DASHBOARD_RECENT_INCIDENTS),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/reload")
async def reload_all(engine: DashboardEngine = Depends(get_engine)):
    """Reload incidents, sensors and cameras; each may fail independently."""
    results = await engine.reload_all()
    failed = [k for k, v in results.items() if v != "ok"]
    if failed:
        logger.warning("dashboard.partial_reload", failed=failed)
    return {"results": results, "kpis": engine.kpis()}
