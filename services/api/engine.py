"""
Opsboard — Dashboard Engine

Wires the data source, normalizer, collection store, filters, aggregates,
marker composer and selection loader together. One engine per process,
created in the app lifespan; tests build their own.

Reload flow:  fetch_all → normalize_many → replace_collection
A failed fetch or a bad row leaves the previous snapshot untouched.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from aggregates import aggregate, status_counts
from datasource import DataSource
from errors import CollaboratorError, NormalizationError, NotFound, OpsboardError
from filters import ALL, filter_collection, apply_status_transition
from kinds import field_value
from log import get_logger
from markers import compose_markers, layer_kinds
from metrics import track_reload, status_transitions
from models import (
    EntityKind, DashboardKPIs, Incident, IncidentCreate, IncidentStatus,
    MapMarker, Sensor,
)
from normalizer import normalize, normalize_many
from selection import SelectionLoader, DEFAULT_READINGS_LIMIT
from store import CollectionStore

logger = get_logger()

# What the map shows of each collection, by status
MAP_SCOPE = {
    EntityKind.INCIDENT: "active",
    EntityKind.SENSOR: "online",
    EntityKind.CAMERA: "online",
}


@dataclass
class CollectionView:
    """Filtered items plus tab counts taken over the unfiltered collection."""
    kind: EntityKind
    items: list
    counts: dict[str, int]
    total: int
    status_counts: dict[str, int] = field(default_factory=dict)


class DashboardEngine:

    def __init__(
        self,
        source: DataSource,
        store: Optional[CollectionStore] = None,
        readings_limit: int = DEFAULT_READINGS_LIMIT,
    ):
        self.source = source
        self.store = store or CollectionStore()
        self.selection = SelectionLoader(self.store, source, readings_limit)

    # ─── Reloads ───────────────────────────────────────────

    @track_reload
    async def reload(self, kind) -> tuple:
        """Replace one collection with a fresh snapshot from the source."""
        kind = EntityKind(kind)
        try:
            rows = await self.source.fetch_all(kind.value)
            records = normalize_many(kind, rows)
        except OpsboardError as e:
            logger.error("collection.reload_failed", kind=kind.value, error=str(e))
            raise
        except Exception as e:
            logger.error("collection.reload_failed", kind=kind.value, error=str(e))
            raise CollaboratorError(f"fetch_all({kind.value})", str(e)) from e

        snapshot = self.store.replace_collection(kind, records)
        if kind is EntityKind.SENSOR:
            await self._restore_selection()
        return snapshot

    async def reload_all(self) -> dict[str, str]:
        """
        Reload the three collections concurrently. Each one succeeds or fails
        on its own; the result maps kind → "ok" or the error message.
        """
        kinds = list(EntityKind)
        results = await asyncio.gather(*(self.reload(k) for k in kinds), return_exceptions=True)
        outcome = {}
        for kind, result in zip(kinds, results):
            if isinstance(result, OpsboardError):
                outcome[kind.value] = str(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome[kind.value] = "ok"
        return outcome

    async def _restore_selection(self) -> None:
        """Keep the selected sensor if it survived the reload, else pick the first."""
        sensors = self.store.get(EntityKind.SENSOR)
        if not sensors:
            return
        current = self.store.selected_sensor_id
        target = current if self.store.get_record(EntityKind.SENSOR, current or "") else sensors[0].id
        try:
            await self.selection.select(target)
        except (CollaboratorError, NormalizationError) as e:
            # The collection itself is already replaced; only the chart is missing.
            logger.warning("metrics.load_failed", sensor_id=target, error=str(e))

    # ─── Views ─────────────────────────────────────────────

    def view(self, kind, text: str = "", selector: Optional[str] = ALL) -> CollectionView:
        kind = EntityKind(kind)
        base = self.store.get(kind)
        return CollectionView(
            kind=kind,
            items=filter_collection(kind, base, text, selector),
            counts=aggregate(kind, base),
            total=len(base),
            status_counts=status_counts(kind, base),
        )

    def map_markers(self, layer: str = "all") -> list[MapMarker]:
        scoped = {
            kind: [r for r in self.store.get(kind) if field_value(r, "status") == status]
            for kind, status in MAP_SCOPE.items()
        }
        return compose_markers(
            incidents=scoped[EntityKind.INCIDENT],
            sensors=scoped[EntityKind.SENSOR],
            cameras=scoped[EntityKind.CAMERA],
            enabled=layer_kinds(layer),
        )

    def kpis(self) -> DashboardKPIs:
        incidents = self.store.get(EntityKind.INCIDENT)
        return DashboardKPIs(
            active_incidents=aggregate(EntityKind.INCIDENT, incidents)["active"],
            total_incidents=len(incidents),
            online_sensors=status_counts(EntityKind.SENSOR, self.store.get(EntityKind.SENSOR))["online"],
            online_cameras=status_counts(EntityKind.CAMERA, self.store.get(EntityKind.CAMERA))["online"],
        )

    def recent_incidents(self, limit: int = 5) -> list[Incident]:
        return list(self.store.get(EntityKind.INCIDENT)[:limit])

    # ─── Incidents ─────────────────────────────────────────

    async def get_incident(self, incident_id: str) -> Incident:
        """From the loaded snapshot, falling back to a single-record fetch."""
        incident = self.store.get_record(EntityKind.INCIDENT, incident_id)
        if incident is not None:
            return incident
        row = await self.source.fetch_one(EntityKind.INCIDENT.value, incident_id)
        if row is None:
            raise NotFound("incident", incident_id)
        return normalize(EntityKind.INCIDENT, row)

    async def create_incident(self, data: IncidentCreate, now: Optional[datetime] = None) -> Incident:
        now = now or datetime.now(timezone.utc)
        fields = data.model_dump()
        if fields.get("reported_at") is None:
            fields["reported_at"] = now
        if data.status is IncidentStatus.RESOLVED:
            fields["resolved_at"] = now

        row = await self.source.create_record(EntityKind.INCIDENT.value, fields)
        incident = normalize(EntityKind.INCIDENT, row)
        # Newest first, matching the source's incident ordering
        self.store.insert_record(EntityKind.INCIDENT, incident, position=0)
        logger.info("incident.created", id=incident.id, status=incident.status.value)
        return incident

    async def set_incident_status(self, incident_id: str, status,
                                  now: Optional[datetime] = None) -> Incident:
        incident = self.store.get_record(EntityKind.INCIDENT, incident_id)
        if incident is None:
            raise NotFound("incident", incident_id)

        patch = apply_status_transition(incident, status, now)
        await self.source.update_record(EntityKind.INCIDENT.value, incident_id, patch)

        updated = self.store.update_record(EntityKind.INCIDENT, incident_id, patch)
        if updated is None:
            # A reload during the write dropped the record
            raise NotFound("incident", incident_id)
        status_transitions.labels(to_status=updated.status.value).inc()
        logger.info("incident.status_changed", id=incident_id,
                    previous=incident.status.value, status=updated.status.value)
        return updated

    # ─── Sensors ───────────────────────────────────────────

    async def select_sensor(self, sensor_id: str) -> Sensor:
        await self.selection.select(sensor_id)
        return self.store.get_record(EntityKind.SENSOR, sensor_id)

    @property
    def selected_sensor(self) -> Optional[Sensor]:
        return self.store.selected_sensor
