"""
Opsboard — PostgreSQL data source

Tables: incidents, sensors, sensor_readings, cctv_cameras. `location` and
`last_reading` are JSON columns; `tags` is a text array.
"""
import json
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from log import get_logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from config import settings
from errors import CollaboratorError
from models import EntityKind

logger = get_logger()

engine = None
async_session_factory = None

TABLES = {
    EntityKind.INCIDENT: "incidents",
    EntityKind.SENSOR: "sensors",
    EntityKind.CAMERA: "cctv_cameras",
}

ORDER_BY = {
    EntityKind.INCIDENT: "reported_at DESC",
    EntityKind.SENSOR: "name",
    EntityKind.CAMERA: "name",
}

INCIDENT_COLUMNS = (
    "title", "description", "status", "severity", "type", "location",
    "reported_at", "resolved_at", "assigned_to", "tags",
)

JSON_COLUMNS = ("location", "last_reading")


async def init_postgres():
    """Initialize PostgreSQL connection pool."""
    global engine, async_session_factory
    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.APP_DEBUG,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
    )
    async_session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    logger.info("postgres.connected", url=engine.url.render_as_string(hide_password=True))


async def close_postgres():
    """Close PostgreSQL connection pool."""
    global engine
    if engine:
        await engine.dispose()
        logger.info("postgres.disconnected")


def _decode_row(row) -> dict[str, Any]:
    record = dict(row)
    for column in JSON_COLUMNS:
        if isinstance(record.get(column), str):
            record[column] = json.loads(record[column])
    return record


def _encode_params(fields: dict[str, Any]) -> dict[str, Any]:
    params = {}
    for key, value in fields.items():
        if key in JSON_COLUMNS and value is not None:
            value = json.dumps(value, default=str)
        elif isinstance(value, Enum):
            value = value.value
        params[key] = value
    return params


def _writable(kind) -> EntityKind:
    kind = EntityKind(kind)
    if kind is not EntityKind.INCIDENT:
        raise CollaboratorError("write", f"{kind.value} records are read-only")
    return kind


class PostgresDataSource:
    """DataSource backed by the async SQLAlchemy engine."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory

    def _session(self) -> AsyncSession:
        factory = self._session_factory or async_session_factory
        if factory is None:
            raise CollaboratorError("session", "postgres is not initialized")
        return factory()

    async def _query(self, operation: str, sql: str, params: dict, write: bool = False) -> list[dict]:
        try:
            async with self._session() as session:
                result = await session.execute(text(sql), params)
                rows = [_decode_row(r) for r in result.mappings().all()]
                if write:
                    await session.commit()
                return rows
        except SQLAlchemyError as e:
            logger.error("postgres.query_failed", operation=operation, error=str(e))
            raise CollaboratorError(operation, str(e)) from e

    async def fetch_all(self, kind) -> list[dict[str, Any]]:
        kind = EntityKind(kind)
        sql = f"SELECT * FROM {TABLES[kind]} ORDER BY {ORDER_BY[kind]}"
        return await self._query("fetch_all", sql, {})

    async def fetch_one(self, kind, record_id: str) -> Optional[dict[str, Any]]:
        kind = EntityKind(kind)
        rows = await self._query(
            "fetch_one", f"SELECT * FROM {TABLES[kind]} WHERE id = :id", {"id": record_id}
        )
        return rows[0] if rows else None

    async def fetch_readings(self, sensor_id: str, limit: int) -> list[dict[str, Any]]:
        return await self._query(
            "fetch_readings",
            "SELECT timestamp, value FROM sensor_readings "
            "WHERE sensor_id = :sensor_id ORDER BY timestamp DESC LIMIT :limit",
            {"sensor_id": sensor_id, "limit": limit},
        )

    async def create_record(self, kind, fields: dict[str, Any]) -> dict[str, Any]:
        kind = _writable(kind)
        columns = ["id"] + [c for c in INCIDENT_COLUMNS if c in fields]
        values = ", ".join(
            f"CAST(:{c} AS jsonb)" if c in JSON_COLUMNS else f":{c}" for c in columns
        )
        params = _encode_params({c: fields[c] for c in columns[1:]})
        params["id"] = str(uuid4())
        sql = f"INSERT INTO {TABLES[kind]} ({', '.join(columns)}) VALUES ({values}) RETURNING *"
        rows = await self._query("create_record", sql, params, write=True)
        return rows[0]

    async def update_record(self, kind, record_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        kind = _writable(kind)
        columns = [c for c in INCIDENT_COLUMNS if c in patch]
        if not columns:
            raise CollaboratorError("update_record", "empty patch")
        assignments = ", ".join(
            f"{c} = CAST(:{c} AS jsonb)" if c in JSON_COLUMNS else f"{c} = :{c}" for c in columns
        )
        params = _encode_params({c: patch[c] for c in columns})
        params["id"] = record_id
        sql = f"UPDATE {TABLES[kind]} SET {assignments} WHERE id = :id RETURNING *"
        rows = await self._query("update_record", sql, params, write=True)
        if not rows:
            raise CollaboratorError("update_record", f"{kind.value} {record_id} does not exist")
        return rows[0]
