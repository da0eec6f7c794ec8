"""Ocean cleanup fleet simulation package."""

from .entities import (
    MissionStatus,
    Mission,
    PlasticHotspot,
    Severity,
    TrailPoint,
    Vessel,
    VesselStatus,
    VesselType,
    Waypoint,
    severity_from_concentration,
)

from .errors import (
    FeedError,
    MalformedPlanError,
    NoHotspotsAvailable,
    OceanFleetError,
    SeedDataError,
)

from .config import SimulationConfig

from .planner import (
    generate_optimal_route,
    plan_is_exhausted,
    plan_nearest_hotspots,
)

from .integrator import MotionResult, advance_vessel

from .simulation import (
    FleetSimulation,
    SimulationEvent,
    SimulationEventType,
    SimulationSnapshot,
    active_vessel_ids,
    create_simulation_from_seed,
)

from .seed import SeedData, fallback_hotspots, load_seed_data

__all__ = [
    # Entities
    "MissionStatus",
    "Mission",
    "PlasticHotspot",
    "Severity",
    "TrailPoint",
    "Vessel",
    "VesselStatus",
    "VesselType",
    "Waypoint",
    "severity_from_concentration",
    # Errors
    "FeedError",
    "MalformedPlanError",
    "NoHotspotsAvailable",
    "OceanFleetError",
    "SeedDataError",
    # Configuration
    "SimulationConfig",
    # Planning
    "generate_optimal_route",
    "plan_is_exhausted",
    "plan_nearest_hotspots",
    # Motion
    "MotionResult",
    "advance_vessel",
    # Simulation
    "FleetSimulation",
    "SimulationEvent",
    "SimulationEventType",
    "SimulationSnapshot",
    "active_vessel_ids",
    "create_simulation_from_seed",
    # Seed data
    "SeedData",
    "fallback_hotspots",
    "load_seed_data",
]
