"""
Reachability filtering for grid-sampled isochrones.

Every candidate grid point gets one travel-time query. Points whose measured
duration falls in ``(0, ceiling]`` minutes are kept. Queries are independent and
run on a thread pool; a failed query counts as 0 minutes and is dropped by the
``> 0`` check. Results are placed by original index, so the kept points stay in
lattice scan order whatever order the queries finish in.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from commute_isochrones.errors import IsochroneError
from commute_isochrones.schemas import Location

logger = logging.getLogger(__name__)

#: Hard ceiling on a kept point's travel time, independent of the request budget.
DEFAULT_CEILING_MINUTES = 60.0

#: Raw grid points used as the polygon when nothing passes the filter.
DEFAULT_FALLBACK_COUNT = 10

DEFAULT_WORKERS = 8

#: Travel time in minutes from the destination to a point; raises on failure.
TravelTimeFn = Callable[[Location], float]


@dataclass
class ReachabilityResult:
    """Points chosen for a polygon, plus how they were chosen."""

    points: list[Location]
    verified: bool
    candidates: int
    reachable: int


def measure_travel_times(
    points: Sequence[Location],
    travel_time: TravelTimeFn,
    *,
    workers: int = DEFAULT_WORKERS,
) -> list[float]:
    """
    Query the travel time to every point concurrently.

    Returns:
        Durations in minutes, aligned with ``points``. Failed queries are 0.
    """
    durations = [0.0] * len(points)
    if not points:
        return durations

    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(points)))) as executor:
        future_to_index = {
            executor.submit(travel_time, point): index for index, point in enumerate(points)
        }
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                durations[index] = future.result()
            except IsochroneError as e:
                point = points[index]
                logger.warning("Travel time to (%.6f, %.6f) failed: %s", point.lat, point.lng, e)
    return durations


def filter_reachable(
    points: Sequence[Location],
    durations: Sequence[float],
    *,
    ceiling_minutes: float = DEFAULT_CEILING_MINUTES,
) -> list[Location]:
    """Keep points whose duration is in ``(0, ceiling_minutes]``, in input order."""
    return [
        point
        for point, duration in zip(points, durations, strict=True)
        if 0 < duration <= ceiling_minutes
    ]


def select_polygon_points(
    grid: Sequence[Location],
    reachable: Sequence[Location],
    *,
    fallback_count: int = DEFAULT_FALLBACK_COUNT,
) -> tuple[list[Location], bool]:
    """
    Choose the polygon points.

    Returns:
        ``(points, verified)``. When nothing is reachable the first
        ``fallback_count`` raw grid points are used and ``verified`` is False.
    """
    if reachable:
        return list(reachable), True
    return list(grid[:fallback_count]), False


def sample_reachable_area(
    grid: Sequence[Location],
    travel_time: TravelTimeFn,
    *,
    ceiling_minutes: float = DEFAULT_CEILING_MINUTES,
    fallback_count: int = DEFAULT_FALLBACK_COUNT,
    workers: int = DEFAULT_WORKERS,
) -> ReachabilityResult:
    """Measure, filter and fall back in one step."""
    durations = measure_travel_times(grid, travel_time, workers=workers)
    reachable = filter_reachable(grid, durations, ceiling_minutes=ceiling_minutes)
    points, verified = select_polygon_points(grid, reachable, fallback_count=fallback_count)
    logger.info("Grid points: %d, reachable points: %d", len(grid), len(reachable))
    if not verified:
        logger.warning("No grid point passed the filter, using %d raw grid points", len(points))
    return ReachabilityResult(
        points=points,
        verified=verified,
        candidates=len(grid),
        reachable=len(reachable),
    )
