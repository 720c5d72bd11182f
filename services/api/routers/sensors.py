"""
Opsboard — Sensors Router
Search by type tab, selection and the selected sensor's reading history
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from deps import get_engine, http_error, view_payload
from engine import DashboardEngine
from errors import OpsboardError
from models import EntityKind, Sensor

router = APIRouter()


@router.get("/")
async def list_sensors(
    q: str = Query("", description="Matches name or type"),
    tab: str = Query("all", description="'all' or a sensor type"),
    engine: DashboardEngine = Depends(get_engine),
):
    view = engine.view(EntityKind.SENSOR, text=q, selector=tab)
    payload = view_payload(view, "sensors")
    payload["selected_id"] = engine.store.selected_sensor_id
    return payload


@router.post("/reload")
async def reload_sensors(engine: DashboardEngine = Depends(get_engine)):
    try:
        snapshot = await engine.reload(EntityKind.SENSOR)
    except OpsboardError as e:
        raise http_error(e)
    return {"kind": "sensor", "count": len(snapshot), "selected_id": engine.store.selected_sensor_id}


@router.get("/counts/status")
async def sensor_status_counts(engine: DashboardEngine = Depends(get_engine)):
    """Online/offline/maintenance counts over all loaded sensors."""
    return engine.view(EntityKind.SENSOR).status_counts


@router.get("/selected", response_model=Sensor)
async def get_selected_sensor(engine: DashboardEngine = Depends(get_engine)):
    sensor = engine.selected_sensor
    if sensor is None:
        raise HTTPException(status_code=404, detail="No sensor selected")
    return sensor


@router.post("/{sensor_id}/select", response_model=Sensor)
async def select_sensor(sensor_id: str, engine: DashboardEngine = Depends(get_engine)):
    """Select a sensor and load its most recent readings."""
    try:
        return await engine.select_sensor(sensor_id)
    except OpsboardError as e:
        raise http_error(e)
