"""
Opsboard — Postgres data source tests (SQL and parameters, no database)

A recording session stands in for the async session factory.
"""
import asyncio
import json

import pytest


class _Result:
    def __init__(self, rows):
        self._rows = rows

    def mappings(self):
        return self

    def all(self):
        return self._rows


class _RecordingSession:
    """Echoes bound parameters back as the RETURNING row."""

    def __init__(self):
        self.calls = []
        self.committed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, statement, params):
        self.calls.append((str(statement), dict(params)))
        return _Result([dict(params)])

    async def commit(self):
        self.committed = True


@pytest.fixture
def session():
    return _RecordingSession()


@pytest.fixture
def source(session):
    from db.postgres import PostgresDataSource
    return PostgresDataSource(session_factory=lambda: session)


# ═══════════════════════════════════════════════════════════
# Incident writes
# ═══════════════════════════════════════════════════════════

class TestPostgresWrites:

    def test_create_assigns_identity(self, source, session):
        from normalizer import normalize_incident
        fields = {
            "title": "Gas leak", "description": "", "status": "active",
            "severity": "critical", "type": "hazmat",
            "location": {"lat": 47.6, "lng": -122.3, "address": "5th Ave"},
            "reported_at": "2026-10-01T10:00:00+00:00", "assigned_to": None, "tags": [],
        }
        row = asyncio.run(source.create_record("incident", fields))

        sql, params = session.calls[0]
        assert sql.startswith("INSERT INTO incidents (id, title")
        assert params["id"]
        assert json.loads(params["location"])["address"] == "5th Ave"
        assert session.committed
        assert normalize_incident(row).id == params["id"]

    def test_create_ids_are_unique(self, source, session):
        fields = {"title": "x", "status": "active", "severity": "low", "type": "t",
                  "location": {"lat": 0, "lng": 0}}
        asyncio.run(source.create_record("incident", fields))
        asyncio.run(source.create_record("incident", fields))
        assert session.calls[0][1]["id"] != session.calls[1][1]["id"]

    def test_non_incident_writes_rejected(self, source, session):
        from errors import CollaboratorError
        with pytest.raises(CollaboratorError):
            asyncio.run(source.create_record("camera", {"name": "x"}))
        assert session.calls == []
