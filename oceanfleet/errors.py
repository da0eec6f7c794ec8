"""
Exception types for the ocean cleanup fleet simulation.

MalformedPlanError and NoHotspotsAvailable are raised and recovered inside
the planner and integrator; they never escape a tick. SeedDataError and
FeedError are the only ones callers see.
"""


class OceanFleetError(Exception):
    """Base class for all simulation errors."""


class MalformedPlanError(OceanFleetError):
    """A vessel's plan has no usable target waypoint."""

    def __init__(self, vessel_id: str, reason: str):
        self.vessel_id = vessel_id
        self.reason = reason
        super().__init__(f"Malformed plan for {vessel_id}: {reason}")


class NoHotspotsAvailable(OceanFleetError):
    """The planner was asked for a plan but no hotspots are known."""


class SeedDataError(OceanFleetError):
    """Seed file is missing a required top-level list or is not JSON."""


class FeedError(OceanFleetError):
    """Hotspot feed could not be fetched or decoded."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)
