"""
Opsboard — PostgreSQL schema + demo seed

Creates the four tables the Postgres data source reads and loads the same
demo rows the in-memory source serves:
  1. incidents        — location jsonb, tags text[]
  2. sensors          — location / last_reading jsonb
  3. sensor_readings  — (sensor_id, timestamp, value)
  4. cctv_cameras     — location jsonb

Usage:
  DATA_SOURCE=postgres DATABASE_URL=postgresql+asyncpg://... python scripts/seed_postgres.py
"""
import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "services" / "api"))

from sqlalchemy import text  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

from config import settings  # noqa: E402
from db.memory import demo_rows  # noqa: E402


SCHEMA = [
    """CREATE TABLE IF NOT EXISTS incidents (
        id text PRIMARY KEY DEFAULT gen_random_uuid()::text,
        title text NOT NULL,
        description text NOT NULL DEFAULT '',
        status text NOT NULL,
        severity text NOT NULL,
        type text NOT NULL,
        location jsonb NOT NULL,
        reported_at timestamptz NOT NULL DEFAULT now(),
        resolved_at timestamptz,
        assigned_to text,
        tags text[]
    )""",
    """CREATE TABLE IF NOT EXISTS sensors (
        id text PRIMARY KEY,
        name text NOT NULL,
        type text NOT NULL,
        status text NOT NULL,
        location jsonb NOT NULL,
        last_reading jsonb
    )""",
    """CREATE TABLE IF NOT EXISTS sensor_readings (
        id bigserial PRIMARY KEY,
        sensor_id text NOT NULL REFERENCES sensors(id),
        timestamp timestamptz NOT NULL,
        value double precision NOT NULL
    )""",
    "CREATE INDEX IF NOT EXISTS sensor_readings_recent ON sensor_readings (sensor_id, timestamp DESC)",
    """CREATE TABLE IF NOT EXISTS cctv_cameras (
        id text PRIMARY KEY,
        name text NOT NULL,
        location jsonb NOT NULL,
        status text NOT NULL,
        stream_url text NOT NULL,
        last_snapshot text,
        recording_enabled boolean NOT NULL DEFAULT false
    )""",
]


def _ts(value):
    return datetime.fromisoformat(value) if value else None


async def seed(database_url: str) -> dict[str, int]:
    rows = demo_rows(datetime.now(timezone.utc))
    engine = create_async_engine(database_url)
    counts = {}
    try:
        async with engine.begin() as conn:
            for ddl in SCHEMA:
                await conn.execute(text(ddl))
            for table in ("sensor_readings", "incidents", "sensors", "cctv_cameras"):
                await conn.execute(text(f"DELETE FROM {table}"))

            for inc in rows["incidents"]:
                await conn.execute(text(
                    "INSERT INTO incidents (id, title, description, status, severity, type, "
                    "location, reported_at, resolved_at, assigned_to, tags) VALUES "
                    "(:id, :title, :description, :status, :severity, :type, "
                    "CAST(:location AS jsonb), :reported_at, :resolved_at, :assigned_to, :tags)"
                ), {**inc, "location": json.dumps(inc["location"]),
                    "reported_at": _ts(inc["reported_at"]), "resolved_at": _ts(inc["resolved_at"])})
            counts["incidents"] = len(rows["incidents"])

            for sensor in rows["sensors"]:
                await conn.execute(text(
                    "INSERT INTO sensors (id, name, type, status, location, last_reading) VALUES "
                    "(:id, :name, :type, :status, CAST(:location AS jsonb), CAST(:last_reading AS jsonb))"
                ), {**sensor, "location": json.dumps(sensor["location"]),
                    "last_reading": json.dumps(sensor["last_reading"])})
            counts["sensors"] = len(rows["sensors"])

            total_readings = 0
            for sensor_id, series in rows["readings"].items():
                for reading in series:
                    await conn.execute(text(
                        "INSERT INTO sensor_readings (sensor_id, timestamp, value) "
                        "VALUES (:sensor_id, :timestamp, :value)"
                    ), {"sensor_id": sensor_id, "timestamp": _ts(reading["timestamp"]),
                        "value": reading["value"]})
                total_readings += len(series)
            counts["sensor_readings"] = total_readings

            for cam in rows["cameras"]:
                await conn.execute(text(
                    "INSERT INTO cctv_cameras (id, name, location, status, stream_url, "
                    "last_snapshot, recording_enabled) VALUES (:id, :name, CAST(:location AS jsonb), "
                    ":status, :stream_url, :last_snapshot, :recording_enabled)"
                ), {**cam, "location": json.dumps(cam["location"])})
            counts["cctv_cameras"] = len(rows["cameras"])
    finally:
        await engine.dispose()
    return counts


def main():
    print("=" * 60)
    print("  OPSBOARD — PostgreSQL schema + demo seed")
    print("=" * 60)

    counts = asyncio.run(seed(settings.DATABASE_URL))
    for table, n in counts.items():
        print(f"  {table:<16} {n:>5} rows")

    print(f"{'=' * 60}")


if __name__ == "__main__":
    main()
