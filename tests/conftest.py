"""
Opsboard — shared test setup: service path and raw-row factories
"""
import sys
from pathlib import Path

import pytest

# Add service paths
sys.path.insert(0, str(Path(__file__).parent.parent / "services" / "api"))


def _location(lat=47.61, lng=-122.33, address="Pine St & 6th Ave"):
    return {"lat": lat, "lng": lng, "address": address}


@pytest.fixture
def incident_row():
    """Factory for raw incident rows as the data source returns them."""
    counter = {"n": 0}

    def make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        row = {
            "id": f"inc-{n:03d}",
            "title": f"Incident {n}",
            "description": "Reported by caller",
            "status": "active",
            "severity": "medium",
            "type": "traffic",
            "location": _location(),
            "reported_at": f"2026-10-01T{10 + n % 10:02d}:00:00+00:00",
            "resolved_at": None,
            "assigned_to": None,
            "tags": ["demo"],
        }
        row.update(overrides)
        return row
    return make


@pytest.fixture
def sensor_row():
    counter = {"n": 0}

    def make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        row = {
            "id": f"sen-{n:03d}",
            "name": f"Sensor {n}",
            "type": "air_quality",
            "status": "online",
            "location": _location(address=f"Station {n}"),
            "last_reading": {"value": 12.5, "unit": "µg/m³",
                             "timestamp": "2026-10-01T10:00:00+00:00"},
        }
        row.update(overrides)
        return row
    return make


@pytest.fixture
def camera_row():
    counter = {"n": 0}

    def make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        row = {
            "id": f"cam-{n:03d}",
            "name": f"Camera {n}",
            "status": "online",
            "location": _location(address=f"Corner {n}"),
            "stream_url": f"rtsp://cams.local/{n}",
            "last_snapshot": None,
            "recording_enabled": True,
        }
        row.update(overrides)
        return row
    return make


def readings_for(count: int, base: float = 10.0):
    """Most-recent-first readings, one per minute."""
    return [
        {"timestamp": f"2026-10-01T11:{59 - i:02d}:00+00:00", "value": str(base + i)}
        for i in range(count)
    ]


@pytest.fixture
def readings():
    return readings_for
