"""
Opsboard — Pydantic Models

Three independent entity kinds share a location value:
  Incident    — reported events, tabbed by status
  Sensor      — environmental/infrastructure sensors, tabbed by type
  CCTVCamera  — camera status feed

MapMarker is a derived projection and never outlives the reload that built it.
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# ═══════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════

class EntityKind(str, Enum):
    INCIDENT = "incident"
    SENSOR = "sensor"
    CAMERA = "camera"


class IncidentStatus(str, Enum):
    ACTIVE = "active"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SensorType(str, Enum):
    AIR_QUALITY = "air_quality"
    TRAFFIC = "traffic"
    NOISE = "noise"
    WATER = "water"
    WEATHER = "weather"


class DeviceStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    MAINTENANCE = "maintenance"


# ═══════════════════════════════════════════════════════════
# VALUE OBJECTS
# ═══════════════════════════════════════════════════════════

class Location(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: str = ""


class LastReading(BaseModel):
    value: float
    unit: str
    timestamp: datetime


class MetricPoint(BaseModel):
    timestamp: datetime
    value: float


# ═══════════════════════════════════════════════════════════
# ENTITIES
# ═══════════════════════════════════════════════════════════

class Incident(BaseModel):
    id: str
    title: str
    description: str = ""
    status: IncidentStatus
    severity: Severity
    type: str
    location: Location
    reported_at: datetime
    resolved_at: Optional[datetime] = None
    assigned_to: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class Sensor(BaseModel):
    id: str
    name: str
    type: SensorType
    status: DeviceStatus
    location: Location
    last_reading: Optional[LastReading] = None
    # Populated only while this sensor is the selected one
    metrics: list[MetricPoint] = Field(default_factory=list)


class CCTVCamera(BaseModel):
    id: str
    name: str
    location: Location
    status: DeviceStatus
    stream_url: str
    last_snapshot: Optional[str] = None    # timestamp or image URI
    recording_enabled: bool = False


# ═══════════════════════════════════════════════════════════
# INPUTS
# ═══════════════════════════════════════════════════════════

class IncidentCreate(BaseModel):
    title: str
    description: str = ""
    status: IncidentStatus = IncidentStatus.ACTIVE
    severity: Severity = Severity.MEDIUM
    type: str
    location: Location
    reported_at: Optional[datetime] = None
    assigned_to: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class IncidentStatusUpdate(BaseModel):
    status: IncidentStatus


# ═══════════════════════════════════════════════════════════
# DERIVED VIEWS
# ═══════════════════════════════════════════════════════════

class MapMarker(BaseModel):
    id: str
    position: tuple[float, float]        # (lat, lng)
    title: str
    description: str
    kind: EntityKind
    status: str                          # severity for incidents, device status otherwise


class DashboardKPIs(BaseModel):
    active_incidents: int = 0
    total_incidents: int = 0
    online_sensors: int = 0
    online_cameras: int = 0
