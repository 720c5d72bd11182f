"""
Opsboard — Health Check Router
"""
from fastapi import APIRouter, Request
from datetime import datetime, timezone

from models import EntityKind

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint for monitoring."""
    engine = request.app.state.engine
    return {
        "status": "healthy",
        "service": "opsboard-api",
        "version": "0.1.0",
        "collections": {
            kind.value: {
                "count": len(engine.store.get(kind)),
                "version": engine.store.version(kind),
            }
            for kind in EntityKind
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
