"""
Opsboard — Incidents Router
List/search by status tab, detail, create, status changes
"""
from fastapi import APIRouter, Depends, Query

from deps import get_engine, http_error, view_payload
from engine import DashboardEngine
from errors import OpsboardError
from models import EntityKind, Incident, IncidentCreate, IncidentStatusUpdate

router = APIRouter()


@router.get("/")
async def list_incidents(
    q: str = Query("", description="Matches title, description or type"),
    tab: str = Query("all", description="'all' or an incident status"),
    engine: DashboardEngine = Depends(get_engine),
):
    """Filtered incidents plus per-status counts over the full collection."""
    view = engine.view(EntityKind.INCIDENT, text=q, selector=tab)
    return view_payload(view, "incidents")


@router.post("/reload")
async def reload_incidents(engine: DashboardEngine = Depends(get_engine)):
    try:
        snapshot = await engine.reload(EntityKind.INCIDENT)
    except OpsboardError as e:
        raise http_error(e)
    return {"kind": "incident", "count": len(snapshot)}


@router.post("/", response_model=Incident, status_code=201)
async def create_incident(data: IncidentCreate, engine: DashboardEngine = Depends(get_engine)):
    try:
        return await engine.create_incident(data)
    except OpsboardError as e:
        raise http_error(e)


@router.get("/{incident_id}", response_model=Incident)
async def get_incident(incident_id: str, engine: DashboardEngine = Depends(get_engine)):
    try:
        return await engine.get_incident(incident_id)
    except OpsboardError as e:
        raise http_error(e)


@router.patch("/{incident_id}/status", response_model=Incident)
async def update_incident_status(
    incident_id: str,
    update: IncidentStatusUpdate,
    engine: DashboardEngine = Depends(get_engine),
):
    """Change status. Resolving stamps resolved_at; reopening keeps it."""
    try:
        return await engine.set_incident_status(incident_id, update.status)
    except OpsboardError as e:
        raise http_error(e)
