"""
Opsboard — Entity Normalizer

Converts raw persisted rows (snake_case, as the data source returns them)
into canonical entities. Invalid enum values are rejected, never coerced.
Optional fields that are absent stay None.
"""
from datetime import datetime
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from errors import NormalizationError
from models import EntityKind, Incident, Sensor, CCTVCamera


def _require_id(kind: EntityKind, raw: dict[str, Any]) -> str:
    if not isinstance(raw, dict):
        raise NormalizationError(kind.value, f"expected a mapping, got {type(raw).__name__}")
    record_id = raw.get("id")
    if record_id is None or str(record_id) == "":
        raise NormalizationError(kind.value, "missing identity")
    return str(record_id)


def _validate(kind: EntityKind, model: type, record_id: str, fields: dict[str, Any]):
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise NormalizationError(kind.value, problems, record_id) from e


def normalize_incident(raw: dict[str, Any]) -> Incident:
    record_id = _require_id(EntityKind.INCIDENT, raw)
    return _validate(EntityKind.INCIDENT, Incident, record_id, {
        "id": record_id,
        "title": raw.get("title"),
        "description": raw.get("description") or "",
        "status": raw.get("status"),
        "severity": raw.get("severity"),
        "type": raw.get("type"),
        "location": raw.get("location"),
        "reported_at": raw.get("reported_at"),
        "resolved_at": raw.get("resolved_at"),
        "assigned_to": raw.get("assigned_to"),
        "tags": raw.get("tags") or [],
    })


def normalize_sensor(raw: dict[str, Any]) -> Sensor:
    record_id = _require_id(EntityKind.SENSOR, raw)
    return _validate(EntityKind.SENSOR, Sensor, record_id, {
        "id": record_id,
        "name": raw.get("name"),
        "type": raw.get("type"),
        "status": raw.get("status"),
        "location": raw.get("location"),
        "last_reading": raw.get("last_reading"),
        # History only arrives through the selection loader
        "metrics": [],
    })


def normalize_camera(raw: dict[str, Any]) -> CCTVCamera:
    record_id = _require_id(EntityKind.CAMERA, raw)
    snapshot = raw.get("last_snapshot")
    recording = raw.get("recording_enabled")
    if isinstance(snapshot, datetime):
        snapshot = snapshot.isoformat()
    return _validate(EntityKind.CAMERA, CCTVCamera, record_id, {
        "id": record_id,
        "name": raw.get("name"),
        "location": raw.get("location"),
        "status": raw.get("status"),
        "stream_url": raw.get("stream_url"),
        "last_snapshot": snapshot,
        "recording_enabled": recording if recording is not None else False,
    })


NORMALIZERS: dict[EntityKind, Callable[[dict[str, Any]], Any]] = {
    EntityKind.INCIDENT: normalize_incident,
    EntityKind.SENSOR: normalize_sensor,
    EntityKind.CAMERA: normalize_camera,
}


def normalize(kind, raw: dict[str, Any]):
    return NORMALIZERS[EntityKind(kind)](raw)


def normalize_many(kind, rows: Iterable[dict[str, Any]]) -> list:
    """Normalize a whole load. The first bad row aborts the batch."""
    fn = NORMALIZERS[EntityKind(kind)]
    return [fn(row) for row in rows]
