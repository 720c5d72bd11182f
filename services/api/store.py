"""
Opsboard — Collection Store

Caller-owned state: the three canonical collections plus the selected-sensor
slot. Each collection is held as a tuple and swapped with a single
assignment, so a reader sees either the previous snapshot or the new one.
"""
from typing import Any, Iterable, Optional

from log import get_logger
from models import EntityKind, MetricPoint, Sensor

logger = get_logger()

# Fields that never change after a record is created
IMMUTABLE_FIELDS = frozenset({"id", "reported_at"})

METRIC_HISTORY_CAP = 50


class CollectionStore:
    """In-memory snapshots for incidents, sensors and cameras."""

    def __init__(self, metric_history_cap: int = METRIC_HISTORY_CAP):
        self._collections: dict[EntityKind, tuple] = {kind: () for kind in EntityKind}
        self._versions: dict[EntityKind, int] = {kind: 0 for kind in EntityKind}
        self._selected_sensor_id: Optional[str] = None
        self._selection_generation = 0
        self.metric_history_cap = metric_history_cap

    # ─── Reads ─────────────────────────────────────────────

    def get(self, kind) -> tuple:
        return self._collections[EntityKind(kind)]

    def version(self, kind) -> int:
        return self._versions[EntityKind(kind)]

    def get_record(self, kind, record_id: str):
        for record in self._collections[EntityKind(kind)]:
            if record.id == record_id:
                return record
        return None

    @property
    def selected_sensor_id(self) -> Optional[str]:
        return self._selected_sensor_id

    @property
    def selection_generation(self) -> int:
        return self._selection_generation

    @property
    def selected_sensor(self) -> Optional[Sensor]:
        if self._selected_sensor_id is None:
            return None
        return self.get_record(EntityKind.SENSOR, self._selected_sensor_id)

    # ─── Writes ────────────────────────────────────────────

    def replace_collection(self, kind, records: Iterable) -> tuple:
        """Swap in a whole new snapshot. Identity uniqueness is trusted."""
        kind = EntityKind(kind)
        snapshot = tuple(records)
        self._collections[kind] = snapshot
        self._versions[kind] += 1
        logger.info("collection.replaced", kind=kind.value, count=len(snapshot),
                    version=self._versions[kind])
        return snapshot

    def insert_record(self, kind, record, position: Optional[int] = None) -> None:
        """Add one record to the snapshot (appended when position is None)."""
        kind = EntityKind(kind)
        snapshot = self._collections[kind]
        if position is None:
            position = len(snapshot)
        self._collections[kind] = snapshot[:position] + (record,) + snapshot[position:]
        self._versions[kind] += 1

    def update_record(self, kind, record_id: str, patch: dict[str, Any]):
        """
        Apply patch fields to one record, keeping its position.
        Returns the updated record, or None when the identity is absent
        (nothing is inserted).
        """
        kind = EntityKind(kind)
        frozen = IMMUTABLE_FIELDS.intersection(patch)
        if frozen:
            raise ValueError(f"cannot patch immutable fields: {sorted(frozen)}")

        snapshot = self._collections[kind]
        for index, record in enumerate(snapshot):
            if record.id == record_id:
                updated = type(record).model_validate({**record.model_dump(), **patch})
                self._swap_record(kind, index, updated)
                logger.info("record.updated", kind=kind.value, id=record_id,
                            fields=sorted(patch))
                return updated

        logger.warning("record.update_missing", kind=kind.value, id=record_id)
        return None

    def select_sensor(self, sensor_id: str) -> bool:
        """
        Mark a sensor as selected and drop the previous selection's history.
        Does not load readings. Returns False when the sensor is unknown.
        """
        if self.get_record(EntityKind.SENSOR, sensor_id) is None:
            logger.warning("sensor.select_missing", id=sensor_id)
            return False

        previous = self._selected_sensor_id
        if previous is not None and previous != sensor_id:
            self._set_metrics(previous, [])
        self._set_metrics(sensor_id, [])
        self._selected_sensor_id = sensor_id
        self._selection_generation += 1
        logger.info("sensor.selected", id=sensor_id, generation=self._selection_generation)
        return True

    def set_sensor_metrics(self, sensor_id: str, points: Iterable[MetricPoint]) -> bool:
        """Replace (never append) a sensor's metric history."""
        history = list(points)[: self.metric_history_cap]
        return self._set_metrics(sensor_id, history)

    # ─── Internals ─────────────────────────────────────────

    def _set_metrics(self, sensor_id: str, history: list[MetricPoint]) -> bool:
        snapshot = self._collections[EntityKind.SENSOR]
        for index, sensor in enumerate(snapshot):
            if sensor.id == sensor_id:
                self._swap_record(EntityKind.SENSOR, index,
                                  sensor.model_copy(update={"metrics": history}))
                return True
        return False

    def _swap_record(self, kind: EntityKind, index: int, record) -> None:
        snapshot = self._collections[kind]
        self._collections[kind] = snapshot[:index] + (record,) + snapshot[index + 1:]
