"""
Opsboard — In-memory data source

Stands in for the database in development and demo mode. Rows are stored
the way the database returns them (snake_case, ISO timestamps, JSON
location objects) so they go through the same normalizer.
"""
import math
from copy import deepcopy
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from errors import CollaboratorError
from log import get_logger
from models import EntityKind

logger = get_logger()

WRITABLE_KINDS = {EntityKind.INCIDENT}

INCIDENT_COLUMNS = {
    "title", "description", "status", "severity", "type", "location",
    "reported_at", "resolved_at", "assigned_to", "tags",
}


def _to_row_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _to_row_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_row_value(v) for v in value]
    return value


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _reported_at(row: dict) -> datetime:
    value = row.get("reported_at")
    if not value:
        return _EPOCH
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    # Naive timestamps are UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _sort_key(kind: EntityKind):
    if kind is EntityKind.INCIDENT:
        return _reported_at
    return lambda row: (row.get("name") or "").lower()


class MemoryDataSource:
    """Dict-backed implementation of the DataSource protocol."""

    def __init__(
        self,
        incidents: Optional[list[dict]] = None,
        sensors: Optional[list[dict]] = None,
        cameras: Optional[list[dict]] = None,
        readings: Optional[dict[str, list[dict]]] = None,
    ):
        self._tables: dict[EntityKind, dict[str, dict]] = {
            EntityKind.INCIDENT: {str(r["id"]): deepcopy(r) for r in incidents or []},
            EntityKind.SENSOR: {str(r["id"]): deepcopy(r) for r in sensors or []},
            EntityKind.CAMERA: {str(r["id"]): deepcopy(r) for r in cameras or []},
        }
        self._readings: dict[str, list[dict]] = deepcopy(readings or {})

    @classmethod
    def with_demo_data(cls, now: Optional[datetime] = None) -> "MemoryDataSource":
        return cls(**demo_rows(now or datetime.now(timezone.utc)))

    async def fetch_all(self, kind) -> list[dict[str, Any]]:
        kind = EntityKind(kind)
        rows = sorted(self._tables[kind].values(), key=_sort_key(kind),
                      reverse=kind is EntityKind.INCIDENT)
        return deepcopy(rows)

    async def fetch_one(self, kind, record_id: str) -> Optional[dict[str, Any]]:
        row = self._tables[EntityKind(kind)].get(str(record_id))
        return deepcopy(row) if row is not None else None

    async def fetch_readings(self, sensor_id: str, limit: int) -> list[dict[str, Any]]:
        rows = sorted(self._readings.get(sensor_id, []),
                      key=lambda r: r["timestamp"], reverse=True)
        return deepcopy(rows[:limit])

    async def create_record(self, kind, fields: dict[str, Any]) -> dict[str, Any]:
        kind = self._writable(kind, "create_record")
        unknown = set(fields) - INCIDENT_COLUMNS
        if unknown:
            raise CollaboratorError("create_record", f"unknown columns {sorted(unknown)}")
        row = {"id": str(uuid4()), **_to_row_value(dict(fields))}
        row.setdefault("reported_at", datetime.now(timezone.utc).isoformat())
        self._tables[kind][row["id"]] = row
        logger.info("memory.created", kind=kind.value, id=row["id"])
        return deepcopy(row)

    async def update_record(self, kind, record_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        kind = self._writable(kind, "update_record")
        row = self._tables[kind].get(str(record_id))
        if row is None:
            raise CollaboratorError("update_record", f"{kind.value} {record_id} does not exist")
        row.update(_to_row_value(dict(patch)))
        return deepcopy(row)

    def _writable(self, kind, operation: str) -> EntityKind:
        kind = EntityKind(kind)
        if kind not in WRITABLE_KINDS:
            raise CollaboratorError(operation, f"{kind.value} records are read-only")
        return kind


# ═══════════════════════════════════════════════════════════
# DEMO DATA
# ═══════════════════════════════════════════════════════════

def _loc(lat: float, lng: float, address: str) -> dict:
    return {"lat": lat, "lng": lng, "address": address}


def demo_rows(now: datetime) -> dict[str, Any]:
    def ago(**kw) -> str:
        return (now - timedelta(**kw)).isoformat()

    incidents = [
        {"id": "inc-001", "title": "Water main break on Pine St",
         "description": "Flooding across two lanes, crews requested",
         "status": "active", "severity": "high", "type": "infrastructure",
         "location": _loc(47.6145, -122.3300, "Pine St & 6th Ave"),
         "reported_at": ago(minutes=25), "resolved_at": None,
         "assigned_to": "Public Works", "tags": ["water", "traffic"]},
        {"id": "inc-002", "title": "Multi-vehicle collision",
         "description": "Three cars involved, one lane blocked",
         "status": "investigating", "severity": "critical", "type": "traffic",
         "location": _loc(47.6062, -122.3321, "I-5 NB at Exit 165"),
         "reported_at": ago(hours=1, minutes=10), "resolved_at": None,
         "assigned_to": "Traffic Unit 4", "tags": ["collision"]},
        {"id": "inc-003", "title": "Smoke reported in parking garage",
         "description": "Caller reports smoke from level B2",
         "status": "active", "severity": "medium", "type": "fire",
         "location": _loc(47.6101, -122.3420, "1st Ave Garage"),
         "reported_at": ago(hours=2), "resolved_at": None,
         "assigned_to": None, "tags": None},
        {"id": "inc-004", "title": "Air quality alert downtown",
         "description": "PM2.5 above threshold for 30 minutes",
         "status": "resolved", "severity": "low", "type": "environmental",
         "location": _loc(47.6097, -122.3331, "Westlake Park"),
         "reported_at": ago(hours=6), "resolved_at": ago(hours=4),
         "assigned_to": "Environmental Desk", "tags": ["air_quality"]},
        {"id": "inc-005", "title": "Power outage in Belltown",
         "description": "Substation fault affecting 400 customers",
         "status": "closed", "severity": "high", "type": "utilities",
         "location": _loc(47.6150, -122.3470, "Bell St & 3rd Ave"),
         "reported_at": ago(days=1), "resolved_at": ago(hours=20),
         "assigned_to": "City Light", "tags": ["power"]},
    ]

    sensor_defs = [
        ("sen-aq-01", "Westlake AQ Monitor", "air_quality", "online", 47.6097, -122.3331,
         "Westlake Park", "µg/m³", 12.0),
        ("sen-tr-01", "I-5 Traffic Counter", "traffic", "online", 47.6062, -122.3321,
         "I-5 NB at Exit 165", "veh/min", 48.0),
        ("sen-no-01", "Pike Place Noise", "noise", "maintenance", 47.6094, -122.3417,
         "Pike Place Market", "dB", 64.0),
        ("sen-wa-01", "Elliott Bay Water Quality", "water", "online", 47.6030, -122.3500,
         "Pier 62", "pH", 7.9),
        ("sen-we-01", "Capitol Hill Weather", "weather", "offline", 47.6253, -122.3222,
         "Cal Anderson Park", "°C", 14.5),
    ]

    sensors = []
    readings: dict[str, list[dict]] = {}
    for sid, name, stype, status, lat, lng, addr, unit, base in sensor_defs:
        series = [
            {"timestamp": ago(minutes=5 * i),
             "value": round(base + base * 0.1 * math.sin(i / 4.0), 2)}
            for i in range(72)
        ]
        readings[sid] = series
        sensors.append({
            "id": sid, "name": name, "type": stype, "status": status,
            "location": _loc(lat, lng, addr),
            "last_reading": {"value": series[0]["value"], "unit": unit,
                             "timestamp": series[0]["timestamp"]},
        })

    cameras = [
        {"id": "cam-001", "name": "3rd Ave & Pine", "status": "online",
         "location": _loc(47.6114, -122.3379, "3rd Ave & Pine St"),
         "stream_url": "rtsp://cams.local/3rd-pine", "last_snapshot": ago(minutes=1),
         "recording_enabled": True},
        {"id": "cam-002", "name": "Alaskan Way Viaduct", "status": "offline",
         "location": _loc(47.6040, -122.3390, "Alaskan Way S"),
         "stream_url": "rtsp://cams.local/alaskan", "last_snapshot": None,
         "recording_enabled": False},
        {"id": "cam-003", "name": "Denny Triangle", "status": "online",
         "location": _loc(47.6180, -122.3380, "Denny Way & Westlake Ave"),
         "stream_url": "rtsp://cams.local/denny", "last_snapshot": ago(minutes=2),
         "recording_enabled": True},
        {"id": "cam-004", "name": "Seattle Center Gate", "status": "maintenance",
         "location": _loc(47.6205, -122.3493, "Seattle Center"),
         "stream_url": "rtsp://cams.local/center", "last_snapshot": ago(days=2),
         "recording_enabled": False},
    ]

    return {"incidents": incidents, "sensors": sensors, "cameras": cameras,
            "readings": readings}
