"""
Opsboard — Selection Loader

Loads the recent readings of the selected sensor. Readings for a sensor
that is no longer the latest selection are dropped at the write site:
last selection wins, not last completion.
"""
from typing import Optional

from pydantic import ValidationError

from datasource import DataSource
from errors import CollaboratorError, NormalizationError, NotFound, OpsboardError
from log import get_logger
from metrics import metric_loads
from models import MetricPoint
from store import CollectionStore

logger = get_logger()

DEFAULT_READINGS_LIMIT = 50


def to_metric_points(sensor_id: str, rows: list[dict]) -> list[MetricPoint]:
    try:
        return [MetricPoint(timestamp=r["timestamp"], value=float(r["value"])) for r in rows]
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise NormalizationError("sensor_reading", str(e), sensor_id) from e


class SelectionLoader:

    def __init__(self, store: CollectionStore, source: DataSource,
                 default_limit: int = DEFAULT_READINGS_LIMIT):
        self._store = store
        self._source = source
        self.default_limit = default_limit

    async def select(self, sensor_id: str, limit: Optional[int] = None) -> bool:
        """Select a sensor and load its history. NotFound if it is not loaded."""
        if not self._store.select_sensor(sensor_id):
            raise NotFound("sensor", sensor_id)
        return await self.load_metrics(sensor_id, limit)

    async def load_metrics(self, sensor_id: str, limit: Optional[int] = None) -> bool:
        """
        Fetch up to `limit` readings and replace the sensor's history.
        Returns False when the result was stale and discarded.
        """
        if limit is None:
            limit = self.default_limit
        generation = self._store.selection_generation

        try:
            rows = await self._source.fetch_readings(sensor_id, limit)
        except OpsboardError:
            metric_loads.labels(outcome="error").inc()
            raise
        except Exception as e:
            metric_loads.labels(outcome="error").inc()
            logger.error("metrics.fetch_failed", sensor_id=sensor_id, error=str(e))
            raise CollaboratorError("fetch_readings", str(e)) from e

        if (self._store.selected_sensor_id != sensor_id
                or self._store.selection_generation != generation):
            metric_loads.labels(outcome="stale").inc()
            logger.debug("metrics.stale_dropped", sensor_id=sensor_id,
                         current=self._store.selected_sensor_id)
            return False

        points = to_metric_points(sensor_id, rows[:limit])
        self._store.set_sensor_metrics(sensor_id, points)
        metric_loads.labels(outcome="applied").inc()
        logger.info("metrics.loaded", sensor_id=sensor_id, points=len(points))
        return True
