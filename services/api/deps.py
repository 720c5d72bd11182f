"""
Opsboard — Router dependencies and error translation
"""
from fastapi import HTTPException, Request

from engine import DashboardEngine, CollectionView
from errors import CollaboratorError, NormalizationError, NotFound, OpsboardError


def get_engine(request: Request) -> DashboardEngine:
    """Dependency: the process-wide engine created in the lifespan."""
    return request.app.state.engine


def http_error(e: OpsboardError) -> HTTPException:
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, NormalizationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, CollaboratorError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def view_payload(view: CollectionView, key: str) -> dict:
    return {
        key: view.items,
        "counts": view.counts,
        "status_counts": view.status_counts,
        "total": view.total,
        "shown": len(view.items),
    }
