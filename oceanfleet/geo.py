#!/usr/bin/env python3
"""
Geodesy helpers for the fleet simulation.

Implements the small set of formulas the motion loop needs:
- Planar lat/lng distance (coarse ranking of hotspots)
- Forward azimuth on a sphere (initial bearing)
- Haversine great-circle distance
- Knots to meters per second
- Equirectangular step offset (small displacements only)

Planar distance is used only to rank candidate hotspots; bearing and arrival
use the spherical formulas.
"""

from __future__ import annotations

import math


# =============================================================================
# CONSTANTS
# =============================================================================

# Mean Earth radius (m)
EARTH_RADIUS_M = 6_371_000.0

# Meters per degree of latitude used by the local step approximation
METERS_PER_DEGREE = 111_000.0

# 1 knot in m/s
KNOTS_TO_MS = 0.514444

# Substitute for cos(lat) exactly at the poles
MIN_COS_LAT = 1e-6


# =============================================================================
# DISTANCE
# =============================================================================

def planar_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Euclidean distance in raw degrees. Not a physical distance."""
    return math.hypot(lat2 - lat1, lng2 - lng1)


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two points.

    Args:
        lat1, lng1: Start point in degrees.
        lat2, lng2: End point in degrees.

    Returns:
        Distance in meters on a sphere of radius EARTH_RADIUS_M.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometers."""
    return haversine_m(lat1, lng1, lat2, lng2) / 1000.0


# =============================================================================
# BEARING
# =============================================================================

def initial_bearing_rad(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Forward azimuth from point 1 to point 2.

    Returns radians in (-pi, pi], measured clockwise from true north, so
    due east is +pi/2.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlmb = math.radians(lng2 - lng1)

    y = math.sin(dlmb) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlmb)
    return math.atan2(y, x)


def initial_bearing_deg(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Forward azimuth normalised to [0, 360) degrees."""
    return math.degrees(initial_bearing_rad(lat1, lng1, lat2, lng2)) % 360.0


# =============================================================================
# MOTION
# =============================================================================

def knots_to_ms(knots: float) -> float:
    """Convert knots to meters per second."""
    return knots * KNOTS_TO_MS


def step_offset(lat: float, distance_m: float, bearing_rad: float) -> tuple[float, float]:
    """
    Latitude/longitude delta for a short step along a bearing.

    Equirectangular approximation around the starting latitude. Valid while
    the step is small compared to the Earth's radius.

    Args:
        lat: Starting latitude in degrees.
        distance_m: Step length in meters.
        bearing_rad: Heading in radians, clockwise from north.

    Returns:
        (dlat, dlng) in degrees.
    """
    cos_lat = math.cos(math.radians(lat)) or MIN_COS_LAT
    dlat = distance_m * math.cos(bearing_rad) / METERS_PER_DEGREE
    dlng = distance_m * math.sin(bearing_rad) / (METERS_PER_DEGREE * cos_lat)
    return dlat, dlng


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """True for finite coordinates inside [-90, 90] x [-180, 180]."""
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        return False
    if math.isnan(lat) or math.isnan(lng):
        return False
    return abs(lat) <= 90.0 and abs(lng) <= 180.0
