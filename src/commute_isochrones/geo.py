"""
Grid sampling around a destination.

Point-to-point backends can only answer "how long from A to B", so a reachability
polygon is approximated by a lattice of candidate points bounding the plausible
reachable area. The lattice is square, centered on the destination, and trimmed to
a circle by great-circle distance.

Example::

    from commute_isochrones.geo import generate_grid_points
    points = generate_grid_points(Location(lat=35.9042, lng=-79.0469), 10, TravelMode.WALK)
"""

from __future__ import annotations

import math

from commute_isochrones.schemas import Location, TravelMode

EARTH_RADIUS_KM = 6371.0

# Rough conversion used for the lattice extent
KM_PER_DEGREE = 111.0

#: Per-mode speed constants; divided by 60 for the per-minute rate.
MODE_SPEED: dict[TravelMode, float] = {
    TravelMode.DRIVE: 1.0,
    TravelMode.TRANSIT: 0.8,  # includes waiting
    TravelMode.BIKE: 0.5,
    TravelMode.WALK: 0.2,
}

MIN_GRID_SIZE = 8
MAX_GRID_SIZE = 20
GRID_SPACING_M = 200


def haversine_km(a: Location, b: Location) -> float:
    """Great-circle distance between two points in kilometers."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def estimate_radius_km(minutes: float, mode: TravelMode) -> float:
    """Estimated reachable radius in kilometers."""
    return MODE_SPEED[mode] / 60 * minutes


def estimate_radius(minutes: float, mode: TravelMode) -> float:
    """Estimated reachable radius in decimal degrees (1 degree ~ 111 km)."""
    return estimate_radius_km(minutes, mode) / KM_PER_DEGREE


def grid_size(radius_km: float) -> int:
    """Lattice half-width: about one point per 200 m, clamped to [8, 20]."""
    return min(MAX_GRID_SIZE, max(MIN_GRID_SIZE, math.floor(radius_km * 1000 / GRID_SPACING_M)))


def generate_grid_points(center: Location, minutes: float, mode: TravelMode) -> list[Location]:
    """
    Lattice points around ``center`` that lie within the estimated radius.

    Points are emitted in row-major scan order (latitude rows, longitude columns),
    which is also the ring order used for the resulting polygon. The center itself
    is always included.

    Args:
        center: Destination the lattice is centered on.
        minutes: Travel-time budget.
        mode: Travel mode used to pick the average speed.

    Returns:
        Candidate points, each within the radius (haversine) of ``center``.
    """
    radius_km = estimate_radius_km(minutes, mode)
    radius_deg = radius_km / KM_PER_DEGREE
    size = grid_size(radius_km)
    step = radius_deg / size

    points: list[Location] = []
    for i in range(-size, size + 1):
        lat = center.lat + i * step
        if not -90 <= lat <= 90:
            continue
        for j in range(-size, size + 1):
            lng = center.lng + j * step
            if not -180 <= lng <= 180:
                continue
            point = Location(lat=lat, lng=lng)
            if haversine_km(center, point) <= radius_km:
                points.append(point)
    return points
