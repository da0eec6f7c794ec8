"""
Entity types for the cleanup fleet simulation.

Vessels, plastic hotspots and missions, plus the waypoint and trail records
a vessel carries. Dictionaries use the camelCase keys of the seed file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


# Trail positions kept per vessel
MAX_TRAIL_LENGTH = 200

# Severity thresholds in particles/km^2 (exclusive lower bounds)
CRITICAL_CONCENTRATION = 25_000
HIGH_CONCENTRATION = 18_000
MEDIUM_CONCENTRATION = 10_000


class VesselType(Enum):
    DRONE = "drone"
    SHIP = "ship"
    AUTONOMOUS = "autonomous"


class VesselStatus(Enum):
    ACTIVE = "active"
    IDLE = "idle"
    MAINTENANCE = "maintenance"
    RETURNING = "returning"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MissionStatus(Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


def severity_from_concentration(concentration: float) -> Severity:
    """Classify a hotspot by particle concentration."""
    if concentration > CRITICAL_CONCENTRATION:
        return Severity.CRITICAL
    if concentration > HIGH_CONCENTRATION:
        return Severity.HIGH
    if concentration > MEDIUM_CONCENTRATION:
        return Severity.MEDIUM
    return Severity.LOW


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# =============================================================================
# POSITIONS
# =============================================================================

@dataclass
class TrailPoint:
    """A past vessel position."""
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class Waypoint:
    """
    One target in a vessel's plan.

    Attributes:
        lat: Target latitude (degrees).
        lng: Target longitude (degrees).
        completed: Set once the vessel arrives; never cleared.
        hotspot_id: Hotspot the waypoint was drawn from, if any.
        eta: Estimated arrival, only set by the full-route planner.
    """
    lat: float
    lng: float
    completed: bool = False
    hotspot_id: Optional[str] = None
    eta: Optional[datetime] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"lat": self.lat, "lng": self.lng, "completed": self.completed}
        if self.hotspot_id is not None:
            data["hotspotId"] = self.hotspot_id
        if self.eta is not None:
            data["eta"] = _format_datetime(self.eta)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Waypoint:
        return cls(
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            completed=bool(data.get("completed", False)),
            hotspot_id=data.get("hotspotId"),
            eta=_parse_datetime(data.get("eta")),
        )


# =============================================================================
# VESSEL
# =============================================================================

@dataclass
class Vessel:
    """
    A cleanup vessel.

    Attributes:
        vessel_id: Unique identifier.
        name: Display name.
        vessel_type: drone, ship or autonomous.
        lat: Latitude in degrees.
        lng: Longitude in degrees.
        speed: Speed in knots.
        status: Operational status; only active vessels move.
        battery: Charge in percent, floored at 0.
        plastic_collected: Collected plastic in kg.
        current_target: Hotspot id currently steered toward.
        plan: Ordered waypoints (at most 3 from the planner), or None.
        trail: Past positions, oldest first, at most MAX_TRAIL_LENGTH.
    """
    vessel_id: str
    name: str
    vessel_type: VesselType
    lat: float
    lng: float
    speed: float = 0.0
    status: VesselStatus = VesselStatus.IDLE
    battery: float = 100.0
    plastic_collected: float = 0.0
    current_target: Optional[str] = None
    plan: Optional[list[Waypoint]] = None
    trail: list[TrailPoint] = field(default_factory=list)

    @property
    def position(self) -> tuple[float, float]:
        return (self.lat, self.lng)

    @property
    def is_active(self) -> bool:
        return self.status == VesselStatus.ACTIVE

    def append_trail(self, lat: float, lng: float, limit: int = MAX_TRAIL_LENGTH) -> None:
        """Append a position, evicting the oldest entries beyond the limit."""
        self.trail.append(TrailPoint(lat, lng))
        if len(self.trail) > limit:
            del self.trail[: len(self.trail) - limit]

    def reset_trail(self) -> None:
        self.trail = [TrailPoint(self.lat, self.lng)]

    def to_dict(self) -> dict:
        return {
            "id": self.vessel_id,
            "name": self.name,
            "type": self.vessel_type.value,
            "lat": self.lat,
            "lng": self.lng,
            "speed": self.speed,
            "status": self.status.value,
            "battery": self.battery,
            "plasticCollected": self.plastic_collected,
            "currentTarget": self.current_target,
            "plan": [w.to_dict() for w in self.plan] if self.plan is not None else None,
            "route": [p.to_dict() for p in self.trail],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Vessel:
        """
        Build a vessel from a seed record.

        The seed's ``route`` list becomes the trail. A ``plan`` list, when
        present, is restored as-is.
        """
        plan_data = data.get("plan")
        trail = [TrailPoint(float(p["lat"]), float(p["lng"])) for p in data.get("route", [])]
        return cls(
            vessel_id=data["id"],
            name=data.get("name", data["id"]),
            vessel_type=VesselType(data.get("type", "ship")),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            speed=float(data.get("speed", 0.0)),
            status=VesselStatus(data.get("status", "idle")),
            battery=float(data.get("battery", 100.0)),
            plastic_collected=float(data.get("plasticCollected", 0.0)),
            current_target=data.get("currentTarget"),
            plan=[Waypoint.from_dict(w) for w in plan_data] if plan_data is not None else None,
            trail=trail[-MAX_TRAIL_LENGTH:],
        )


# =============================================================================
# HOTSPOT
# =============================================================================

@dataclass
class PlasticHotspot:
    """A detected plastic accumulation zone."""
    hotspot_id: str
    lat: float
    lng: float
    concentration: float  # particles/km^2
    severity: Severity
    area: float  # km^2
    detected_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.hotspot_id,
            "lat": self.lat,
            "lng": self.lng,
            "concentration": self.concentration,
            "severity": self.severity.value,
            "area": self.area,
            "detectedAt": _format_datetime(self.detected_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> PlasticHotspot:
        """
        Build a hotspot; severity is derived when the record lacks one.

        Raises:
            ValueError: If severity is present but not a known severity name.
        """
        concentration = float(data.get("concentration", 0.0))
        severity = data.get("severity")
        if severity is not None and not isinstance(severity, str):
            raise ValueError(f"severity must be a string, got {severity!r}")
        return cls(
            hotspot_id=str(data["id"]),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            concentration=concentration,
            severity=Severity(severity.lower()) if severity else severity_from_concentration(concentration),
            area=float(data.get("area", 0.0)),
            detected_at=_parse_datetime(data.get("detectedAt")),
        )


# =============================================================================
# MISSION
# =============================================================================

@dataclass
class Mission:
    """A cleanup mission grouping vessels and target hotspots."""
    mission_id: str
    name: str
    status: MissionStatus
    vessels: list[str] = field(default_factory=list)
    targets: list[str] = field(default_factory=list)
    plastic_target: float = 0.0
    plastic_collected: float = 0.0
    efficiency: float = 0.0
    start_date: Optional[datetime] = None
    estimated_completion: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == MissionStatus.ACTIVE

    @property
    def progress_percent(self) -> float:
        if self.plastic_target <= 0:
            return 0.0
        return min(100.0, 100.0 * self.plastic_collected / self.plastic_target)

    def to_dict(self) -> dict:
        return {
            "id": self.mission_id,
            "name": self.name,
            "status": self.status.value,
            "vessels": list(self.vessels),
            "targets": list(self.targets),
            "plasticTarget": self.plastic_target,
            "plasticCollected": self.plastic_collected,
            "efficiency": self.efficiency,
            "startDate": _format_datetime(self.start_date),
            "estimatedCompletion": _format_datetime(self.estimated_completion),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Mission:
        return cls(
            mission_id=data["id"],
            name=data.get("name", data["id"]),
            status=MissionStatus(data.get("status", "planning")),
            vessels=list(data.get("vessels", [])),
            targets=list(data.get("targets", [])),
            plastic_target=float(data.get("plasticTarget", 0.0)),
            plastic_collected=float(data.get("plasticCollected", 0.0)),
            efficiency=float(data.get("efficiency", 0.0)),
            start_date=_parse_datetime(data.get("startDate")),
            estimated_completion=_parse_datetime(data.get("estimatedCompletion")),
        )
