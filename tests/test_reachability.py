"""Tests for travel-time filtering of grid points."""

from __future__ import annotations

import time

import pytest

from commute_isochrones.errors import BackendTransportError
from commute_isochrones.reachability import (
    filter_reachable,
    measure_travel_times,
    sample_reachable_area,
    select_polygon_points,
)
from commute_isochrones.schemas import Location


def _points(n: int) -> list[Location]:
    return [Location(lat=35.0 + i * 0.001, lng=-79.0) for i in range(n)]


class TestMeasureTravelTimes:
    """Concurrent travel-time queries."""

    def test_results_aligned_with_points(self) -> None:
        points = _points(12)

        def travel_time(point: Location) -> float:
            index = round((point.lat - 35.0) / 0.001)
            # Later points finish first
            time.sleep(0.002 * (12 - index))
            return float(index + 1)

        durations = measure_travel_times(points, travel_time, workers=6)
        assert durations == [float(i + 1) for i in range(12)]

    def test_failed_query_counts_as_zero(self) -> None:
        points = _points(3)

        def travel_time(point: Location) -> float:
            if point == points[1]:
                raise BackendTransportError("Google API error: 500 Server Error")
            return 5.0

        assert measure_travel_times(points, travel_time) == [5.0, 0.0, 5.0]

    def test_empty_points(self) -> None:
        assert measure_travel_times([], lambda _p: 1.0) == []

    def test_one_query_per_point(self) -> None:
        points = _points(7)
        calls: list[Location] = []

        def travel_time(point: Location) -> float:
            calls.append(point)
            return 1.0

        measure_travel_times(points, travel_time, workers=3)
        assert sorted(calls, key=lambda p: p.lat) == points


class TestFilterReachable:
    """Duration window (0, ceiling]."""

    def test_bounds(self) -> None:
        points = _points(6)
        durations = [0.0, -1.0, 0.5, 60.0, 60.01, 30.0]
        kept = filter_reachable(points, durations)
        assert kept == [points[2], points[3], points[5]]

    def test_custom_ceiling(self) -> None:
        points = _points(3)
        kept = filter_reachable(points, [10.0, 20.0, 30.0], ceiling_minutes=20)
        assert kept == points[:2]

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(ValueError):
            filter_reachable(_points(2), [1.0])


class TestSelectPolygonPoints:
    """Fallback policy."""

    def test_reachable_points_are_verified(self) -> None:
        grid = _points(20)
        points, verified = select_polygon_points(grid, grid[3:5])
        assert points == grid[3:5]
        assert verified is True

    def test_fallback_to_first_ten(self) -> None:
        grid = _points(20)
        points, verified = select_polygon_points(grid, [])
        assert points == grid[:10]
        assert verified is False

    def test_fallback_with_small_grid(self) -> None:
        grid = _points(4)
        points, verified = select_polygon_points(grid, [])
        assert points == grid
        assert verified is False


class TestSampleReachableArea:
    """Measure + filter + fallback."""

    def test_all_zero_durations_fall_back(self) -> None:
        grid = _points(25)
        result = sample_reachable_area(grid, lambda _p: 0.0)
        assert result.points == grid[:10]
        assert result.verified is False
        assert result.candidates == 25
        assert result.reachable == 0

    def test_all_failures_fall_back(self) -> None:
        grid = _points(15)

        def travel_time(_point: Location) -> float:
            raise BackendTransportError("boom")

        result = sample_reachable_area(grid, travel_time)
        assert len(result.points) == 10
        assert result.verified is False

    def test_keeps_scan_order(self) -> None:
        grid = _points(10)
        result = sample_reachable_area(
            grid, lambda p: 10.0 if round((p.lat - 35.0) / 0.001) % 2 == 0 else 90.0
        )
        assert result.points == grid[0::2]
        assert result.verified is True
        assert result.reachable == 5
