"""
Opsboard — Marker Composer

Flattens incidents, sensors and cameras into one marker layer. Composition
is concatenation in a fixed kind order (incidents, sensors, cameras), each
block in its source order. Callers pass collections already scoped to what
the map should show.
"""
from typing import Iterable, Sequence

from models import EntityKind, MapMarker, Incident, Sensor, CCTVCamera

ALL_KINDS = frozenset(EntityKind)

# Map tab → enabled source kinds
LAYERS: dict[str, frozenset] = {
    "all": ALL_KINDS,
    "incidents": frozenset({EntityKind.INCIDENT}),
    "sensors": frozenset({EntityKind.SENSOR}),
    "cameras": frozenset({EntityKind.CAMERA}),
}


def layer_kinds(layer: str) -> frozenset:
    try:
        return LAYERS[layer]
    except KeyError:
        raise ValueError(f"unknown map layer: {layer!r}") from None


def incident_marker(inc: Incident) -> MapMarker:
    return MapMarker(
        id=inc.id,
        position=(inc.location.lat, inc.location.lng),
        title=inc.title,
        description=inc.description,
        kind=EntityKind.INCIDENT,
        status=inc.severity.value,
    )


def sensor_marker(sensor: Sensor) -> MapMarker:
    return MapMarker(
        id=sensor.id,
        position=(sensor.location.lat, sensor.location.lng),
        title=sensor.name,
        description=f"{sensor.type.value} sensor",
        kind=EntityKind.SENSOR,
        status=sensor.status.value,
    )


def camera_marker(cam: CCTVCamera) -> MapMarker:
    return MapMarker(
        id=cam.id,
        position=(cam.location.lat, cam.location.lng),
        title=cam.name,
        description="CCTV Camera",
        kind=EntityKind.CAMERA,
        status=cam.status.value,
    )


def compose_markers(
    incidents: Sequence[Incident] = (),
    sensors: Sequence[Sensor] = (),
    cameras: Sequence[CCTVCamera] = (),
    enabled: Iterable[EntityKind] = ALL_KINDS,
) -> list[MapMarker]:
    enabled = {EntityKind(k) for k in enabled}
    markers: list[MapMarker] = []
    if EntityKind.INCIDENT in enabled:
        markers.extend(incident_marker(i) for i in incidents)
    if EntityKind.SENSOR in enabled:
        markers.extend(sensor_marker(s) for s in sensors)
    if EntityKind.CAMERA in enabled:
        markers.extend(camera_marker(c) for c in cameras)
    return markers
