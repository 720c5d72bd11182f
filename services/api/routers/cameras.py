"""
Opsboard — CCTV Cameras Router
"""
from fastapi import APIRouter, Depends, Query

from deps import get_engine, http_error, view_payload
from engine import DashboardEngine
from errors import OpsboardError
from models import EntityKind

router = APIRouter()


@router.get("/")
async def list_cameras(
    q: str = Query("", description="Matches camera name or address"),
    engine: DashboardEngine = Depends(get_engine),
):
    view = engine.view(EntityKind.CAMERA, text=q)
    return view_payload(view, "cameras")


@router.post("/reload")
async def reload_cameras(engine: DashboardEngine = Depends(get_engine)):
    try:
        snapshot = await engine.reload(EntityKind.CAMERA)
    except OpsboardError as e:
        raise http_error(e)
    return {"kind": "camera", "count": len(snapshot)}
