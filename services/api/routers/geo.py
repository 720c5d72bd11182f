"""
Opsboard — Map Router (geo layer)
One marker layer: active incidents, online sensors, online cameras
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from deps import get_engine
from engine import DashboardEngine
from models import EntityKind

router = APIRouter()


@router.get("/markers")
async def map_markers(
    layer: str = Query("all", description="all, incidents, sensors or cameras"),
    engine: DashboardEngine = Depends(get_engine),
):
    try:
        markers = engine.map_markers(layer)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    totals = {kind.value: 0 for kind in EntityKind}
    for m in markers:
        totals[m.kind.value] += 1
    return {"layer": layer, "markers": markers, "totals": totals}
