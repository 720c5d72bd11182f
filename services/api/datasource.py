"""
Opsboard — Data-access contract

The engine only talks to persistence through this protocol. Rows are plain
dicts with the store's snake_case columns. Any failure must surface as
CollaboratorError.
"""
from typing import Any, Optional, Protocol

from config import Settings
from log import get_logger

logger = get_logger()


class DataSource(Protocol):

    async def fetch_all(self, kind: str) -> list[dict[str, Any]]:
        """Incidents newest first; sensors and cameras by name."""
        ...

    async def fetch_one(self, kind: str, record_id: str) -> Optional[dict[str, Any]]:
        ...

    async def fetch_readings(self, sensor_id: str, limit: int) -> list[dict[str, Any]]:
        """Most recent first, at most `limit` rows of {timestamp, value}."""
        ...

    async def create_record(self, kind: str, fields: dict[str, Any]) -> dict[str, Any]:
        ...

    async def update_record(self, kind: str, record_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        ...


def create_data_source(settings: Settings) -> DataSource:
    """Build the configured data source. Postgres needs init_postgres() first."""
    if settings.DATA_SOURCE == "postgres":
        from db.postgres import PostgresDataSource
        logger.info("datasource.selected", source="postgres")
        return PostgresDataSource()
    if settings.DATA_SOURCE == "memory":
        from db.memory import MemoryDataSource
        logger.info("datasource.selected", source="memory")
        return MemoryDataSource.with_demo_data()
    raise ValueError(f"unknown DATA_SOURCE: {settings.DATA_SOURCE!r}")
