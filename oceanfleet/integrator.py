#!/usr/bin/env python3
"""
Motion integration for cleanup vessels.

Advances one vessel by one tick:
- Re-plans from the nearest hotspots when the current plan is exhausted
- Steers toward the first incomplete waypoint along the initial bearing
- Steps speed x time with an equirectangular offset
- Marks the waypoint reached inside the arrival radius (haversine)
- Appends to the bounded trail and updates the collection/battery counters

Everything except the counters in the last step is deterministic.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from .entities import MAX_TRAIL_LENGTH, PlasticHotspot, Vessel, Waypoint
from .errors import MalformedPlanError
from .geo import (
    haversine_m,
    initial_bearing_rad,
    knots_to_ms,
    step_offset,
)
from .planner import DEFAULT_PLAN_SIZE, plan_is_exhausted, plan_nearest_hotspots

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Waypoint counts as reached inside this radius (m)
ARRIVAL_THRESHOLD_M = 5000.0

# Speed floor applied before stepping (m/s)
MIN_STEP_SPEED_MS = 0.1

# Upper bounds of the per-tick counter updates
MAX_PLASTIC_PER_TICK_KG = 5.0
MAX_BATTERY_DRAIN_PER_TICK = 0.1


# =============================================================================
# RESULT
# =============================================================================

@dataclass
class MotionResult:
    """
    Outcome of advancing one vessel by one tick.

    Attributes:
        vessel_id: Vessel that moved.
        previous_position: (lat, lng) before the tick.
        new_position: (lat, lng) after the tick.
        bearing_deg: Heading used, degrees clockwise from north in [0, 360).
        step_m: Distance stepped in meters (0 when held).
        distance_to_target_m: Haversine distance from the new position to the target.
        target: The waypoint steered toward.
        plan_created: A new plan was generated this tick.
        waypoint_reached: The target was marked completed this tick.
        held: The vessel held still on a degenerate or malformed target.
    """
    vessel_id: str
    previous_position: tuple[float, float]
    new_position: tuple[float, float]
    bearing_deg: float
    step_m: float
    distance_to_target_m: float
    target: Waypoint
    plan_created: bool = False
    waypoint_reached: bool = False
    held: bool = False


# =============================================================================
# TARGET SELECTION
# =============================================================================

def select_target(plan: Sequence[Waypoint]) -> Optional[Waypoint]:
    """First incomplete waypoint, else the last one, else None."""
    for waypoint in plan:
        if not waypoint.completed:
            return waypoint
    return plan[-1] if plan else None


def _checked_target(vessel: Vessel) -> Waypoint:
    target = select_target(vessel.plan or [])
    if target is None:
        raise MalformedPlanError(vessel.vessel_id, "plan has no waypoints")
    if not (math.isfinite(target.lat) and math.isfinite(target.lng)):
        raise MalformedPlanError(vessel.vessel_id, f"non-finite target ({target.lat}, {target.lng})")
    return target


# =============================================================================
# INTEGRATION
# =============================================================================

def advance_vessel(
    vessel: Vessel,
    hotspots: Sequence[PlasticHotspot],
    dt_seconds: float,
    rng: random.Random,
    max_waypoints: int = DEFAULT_PLAN_SIZE,
    arrival_threshold_m: float = ARRIVAL_THRESHOLD_M,
    min_step_speed_ms: float = MIN_STEP_SPEED_MS,
    trail_limit: int = MAX_TRAIL_LENGTH,
) -> MotionResult:
    """
    Advance a vessel's position, plan, trail and counters by one tick.

    The caller is responsible for deciding the vessel may move (active
    status, member of an active mission). The vessel is mutated in place.

    Args:
        vessel: Vessel to advance.
        hotspots: Current hotspot set, used when re-planning.
        dt_seconds: Simulated tick duration.
        rng: Random source for the collection and battery counters.
        max_waypoints: Plan length cap when re-planning.
        arrival_threshold_m: Arrival radius in meters.
        min_step_speed_ms: Speed floor in m/s.
        trail_limit: Trail positions to keep.

    Returns:
        MotionResult describing the step.
    """
    plan_created = False
    if plan_is_exhausted(vessel.plan):
        vessel.plan = plan_nearest_hotspots(vessel.lat, vessel.lng, hotspots, max_waypoints)
        plan_created = True
        logger.info("%s: new plan with %d waypoint(s)", vessel.vessel_id, len(vessel.plan))

    base_lat, base_lng = vessel.lat, vessel.lng

    try:
        target = _checked_target(vessel)
        target_lat, target_lng = target.lat, target.lng
    except MalformedPlanError as e:
        logger.warning("%s; holding position", e)
        # Holding on an empty plan still needs a waypoint to report
        target = select_target(vessel.plan or []) or Waypoint(lat=base_lat, lng=base_lng)
        target_lat, target_lng = base_lat, base_lng

    vessel.current_target = target.hotspot_id

    held = (target_lat, target_lng) == (base_lat, base_lng)
    if held:
        bearing = 0.0
        step_m = 0.0
        new_lat, new_lng = base_lat, base_lng
    else:
        speed_ms = max(min_step_speed_ms, knots_to_ms(vessel.speed))
        step_m = speed_ms * dt_seconds
        bearing = initial_bearing_rad(base_lat, base_lng, target_lat, target_lng)
        dlat, dlng = step_offset(base_lat, step_m, bearing)
        new_lat, new_lng = base_lat + dlat, base_lng + dlng

    vessel.lat, vessel.lng = new_lat, new_lng

    distance_m = haversine_m(new_lat, new_lng, target_lat, target_lng)
    waypoint_reached = False
    if distance_m < arrival_threshold_m and not target.completed:
        target.completed = True
        waypoint_reached = True
        logger.info(
            "%s reached waypoint (%.4f, %.4f)", vessel.vessel_id, target.lat, target.lng
        )

    vessel.append_trail(new_lat, new_lng, trail_limit)

    collected = round((vessel.plastic_collected + rng.random() * MAX_PLASTIC_PER_TICK_KG) * 10) / 10
    vessel.plastic_collected = max(vessel.plastic_collected, collected)
    vessel.battery = max(0.0, vessel.battery - rng.random() * MAX_BATTERY_DRAIN_PER_TICK)

    logger.debug(
        "%s moved (%.5f, %.5f) -> (%.5f, %.5f), %.1f m to target",
        vessel.vessel_id, base_lat, base_lng, new_lat, new_lng, distance_m,
    )

    return MotionResult(
        vessel_id=vessel.vessel_id,
        previous_position=(base_lat, base_lng),
        new_position=(new_lat, new_lng),
        bearing_deg=math.degrees(bearing) % 360.0,
        step_m=step_m,
        distance_to_target_m=distance_m,
        target=target,
        plan_created=plan_created,
        waypoint_reached=waypoint_reached,
        held=held,
    )
