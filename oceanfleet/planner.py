"""
Navigation planning for cleanup vessels.

Two planners:
- plan_nearest_hotspots: the short rotating plan the tick loop uses
  (nearest K hotspots by planar lat/lng distance).
- generate_optimal_route: a full concentration-weighted nearest-neighbour
  tour, used for route previews.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

import numpy as np

from .entities import PlasticHotspot, Waypoint
from .errors import NoHotspotsAvailable
from .geo import haversine_km

logger = logging.getLogger(__name__)


DEFAULT_PLAN_SIZE = 3

# Concentration at which the route weighting is neutral (particles/km^2)
REFERENCE_CONCENTRATION = 5000.0


def plan_is_exhausted(plan: Optional[Sequence[Waypoint]]) -> bool:
    """True when the plan is missing, empty, or fully completed."""
    if not plan:
        return True
    return all(w.completed for w in plan)


def nearest_hotspots(
    lat: float,
    lng: float,
    hotspots: Sequence[PlasticHotspot],
    count: int = DEFAULT_PLAN_SIZE,
) -> list[PlasticHotspot]:
    """
    The `count` hotspots closest to a position by planar degree distance.

    Sorted ascending; equal distances keep their order in `hotspots`.

    Raises:
        NoHotspotsAvailable: If `hotspots` is empty.
    """
    if not hotspots:
        raise NoHotspotsAvailable("no hotspots to plan against")

    lats = np.fromiter((h.lat for h in hotspots), dtype=float, count=len(hotspots))
    lngs = np.fromiter((h.lng for h in hotspots), dtype=float, count=len(hotspots))
    distances = np.hypot(lats - lat, lngs - lng)
    order = np.argsort(distances, kind="stable")[:count]
    return [hotspots[int(i)] for i in order]


def plan_nearest_hotspots(
    lat: float,
    lng: float,
    hotspots: Sequence[PlasticHotspot],
    max_waypoints: int = DEFAULT_PLAN_SIZE,
) -> list[Waypoint]:
    """
    Build a fresh plan from a vessel position.

    Args:
        lat: Vessel latitude in degrees.
        lng: Vessel longitude in degrees.
        hotspots: All known hotspots.
        max_waypoints: Plan length cap.

    Returns:
        Up to `max_waypoints` incomplete waypoints, nearest first. With no
        hotspots, a single waypoint at the vessel's own position.
    """
    try:
        chosen = nearest_hotspots(lat, lng, hotspots, max_waypoints)
    except NoHotspotsAvailable:
        logger.debug("No hotspots available; holding position at (%.4f, %.4f)", lat, lng)
        return [Waypoint(lat=lat, lng=lng)]

    return [Waypoint(lat=h.lat, lng=h.lng, hotspot_id=h.hotspot_id) for h in chosen]


def generate_optimal_route(
    lat: float,
    lng: float,
    hotspots: Sequence[PlasticHotspot],
    start_time: Optional[datetime] = None,
) -> list[Waypoint]:
    """
    Visit every hotspot, greedily choosing the best weighted next hop.

    Each hop minimises great-circle distance divided by
    concentration / REFERENCE_CONCENTRATION, so dense patches are worth a
    longer detour. The first waypoint is the starting position, already
    completed; hop n gets an ETA n days after `start_time`.

    Args:
        lat: Start latitude.
        lng: Start longitude.
        hotspots: Hotspots to include in the tour.
        start_time: Base for ETAs (defaults to now).

    Returns:
        The ordered route, len(hotspots) + 1 waypoints.
    """
    start_time = start_time or datetime.now()
    route = [Waypoint(lat=lat, lng=lng, completed=True)]

    remaining = list(hotspots)
    current_lat, current_lng = lat, lng

    while remaining:
        def weighted(h: PlasticHotspot) -> float:
            weight = max(h.concentration, 1.0) / REFERENCE_CONCENTRATION
            return haversine_km(current_lat, current_lng, h.lat, h.lng) / weight

        best = min(remaining, key=weighted)
        route.append(Waypoint(
            lat=best.lat,
            lng=best.lng,
            completed=False,
            hotspot_id=best.hotspot_id,
            eta=start_time + timedelta(days=len(route)),
        ))
        current_lat, current_lng = best.lat, best.lng
        remaining.remove(best)

    return route
