"""
Opsboard — Per-kind dispatch table

Each entity kind owns its discriminating field (the tab it is filtered by)
and its searchable-text recipe. Filtering and aggregation look these up
instead of branching on the record shape.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from models import (
    EntityKind, IncidentStatus, SensorType, DeviceStatus,
    Incident, Sensor, CCTVCamera,
)


@dataclass(frozen=True)
class KindProfile:
    kind: EntityKind
    tab_field: str                           # discriminating field
    tab_values: type[Enum]
    status_values: type[Enum]
    search_fields: Callable[[object], tuple[str, ...]]


def _incident_text(inc: Incident) -> tuple[str, ...]:
    return (inc.title, inc.description, inc.type)


def _sensor_text(sensor: Sensor) -> tuple[str, ...]:
    return (sensor.name, sensor.type.value)


def _camera_text(cam: CCTVCamera) -> tuple[str, ...]:
    return (cam.name, cam.location.address)


KIND_PROFILES: dict[EntityKind, KindProfile] = {
    EntityKind.INCIDENT: KindProfile(
        kind=EntityKind.INCIDENT,
        tab_field="status",
        tab_values=IncidentStatus,
        status_values=IncidentStatus,
        search_fields=_incident_text,
    ),
    EntityKind.SENSOR: KindProfile(
        kind=EntityKind.SENSOR,
        tab_field="type",
        tab_values=SensorType,
        status_values=DeviceStatus,
        search_fields=_sensor_text,
    ),
    EntityKind.CAMERA: KindProfile(
        kind=EntityKind.CAMERA,
        tab_field="status",
        tab_values=DeviceStatus,
        status_values=DeviceStatus,
        search_fields=_camera_text,
    ),
}


def profile_for(kind) -> KindProfile:
    """Look up the dispatch entry for a kind given as enum or string."""
    return KIND_PROFILES[EntityKind(kind)]


def field_value(record, field: str) -> str:
    """Plain string value of an enum-or-str attribute."""
    value = getattr(record, field)
    return value.value if isinstance(value, Enum) else value
