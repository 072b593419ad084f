"""
Provider contract and helpers shared by every backend.

A provider turns an ``IsochroneRequest`` into a ``FeatureCollection``. Providers
differ only in how they get a polygon (``PolygonSource``): natively from the
backend, or by grid sampling a point-to-point travel-time API. Everything a
provider needs per request lives on the stack; instances are safe to share across
threads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Protocol

import requests

from commute_isochrones.errors import (
    BackendTransportError,
    BackendUnreachable,
    EmptyResultError,
    IsochroneError,
    MalformedResponseError,
)
from commute_isochrones.reachability import (
    DEFAULT_CEILING_MINUTES,
    DEFAULT_FALLBACK_COUNT,
    DEFAULT_WORKERS,
)
from commute_isochrones.schemas import (
    Feature,
    FeatureCollection,
    IsochroneRequest,
    Location,
    PolygonSource,
    ProviderName,
    parse_window_start,
)

logger = logging.getLogger(__name__)


class IsochroneProvider(Protocol):
    """Anything that can produce isochrones for a request."""

    name: ClassVar[ProviderName]
    capability: ClassVar[PolygonSource]

    def generate(self, request: IsochroneRequest) -> FeatureCollection: ...


@dataclass(frozen=True)
class ProviderOptions:
    """Tuning shared by all providers built from one configuration set."""

    destination_workers: int = 4
    point_workers: int = DEFAULT_WORKERS
    ceiling_minutes: float = DEFAULT_CEILING_MINUTES
    fallback_count: int = DEFAULT_FALLBACK_COUNT


# =============================================================================
# Departure time
# =============================================================================


def departure_time(window: str, now: datetime | None = None) -> datetime:
    """
    Departure instant for a ``HH:MM-HH:MM`` window.

    Today's date (local time) at the window's start hour and minute. Only the
    start half of the window is used.
    """
    hour, minute = parse_window_start(window)
    now = now or datetime.now().astimezone()
    return now.replace(hour=hour, minute=minute, second=0, microsecond=0)


# =============================================================================
# Backend calls
# =============================================================================


def call_backend(send: Callable[[], requests.Response], provider: str) -> Any:
    """
    Perform one backend call and decode its JSON body.

    Raises:
        BackendUnreachable: The connection could not be established.
        BackendTransportError: Any other transport failure or a non-2xx status.
        MalformedResponseError: The body is not JSON.
    """
    try:
        resp = send()
    except requests.ConnectionError as e:
        msg = f"{provider} API unreachable: {e}"
        raise BackendUnreachable(msg) from e
    except requests.RequestException as e:
        msg = f"{provider} API error: {e}"
        raise BackendTransportError(msg) from e

    try:
        resp.raise_for_status()
    except requests.HTTPError as e:
        msg = f"{provider} API error: {resp.status_code} {resp.reason}"
        raise BackendTransportError(msg, status_code=resp.status_code) from e

    try:
        return resp.json()
    except ValueError as e:
        msg = f"{provider} API returned a non-JSON body"
        raise MalformedResponseError(msg) from e


def first_polygon_ring(data: Any, provider: str) -> list[Location]:
    """
    Outer ring of the first feature in a GeoJSON FeatureCollection.

    GeoJSON positions are ``[lng, lat]``; the result is re-expressed as
    ``Location(lat, lng)`` in the same ring order.
    """
    if not isinstance(data, dict):
        msg = f"{provider} API returned {type(data).__name__}, expected an object"
        raise MalformedResponseError(msg)

    features = data.get("features")
    if not features:
        msg = f"No isochrone polygon returned from {provider}"
        raise EmptyResultError(msg)

    try:
        ring = features[0]["geometry"]["coordinates"][0]
        locations = [Location(lat=coord[1], lng=coord[0]) for coord in ring]
    except (KeyError, IndexError, TypeError, ValueError) as e:
        msg = f"{provider} API returned an unexpected polygon shape: {e}"
        raise MalformedResponseError(msg) from e

    if not locations:
        msg = f"No isochrone polygon returned from {provider}"
        raise EmptyResultError(msg)
    return locations


# =============================================================================
# Fan-out
# =============================================================================


@dataclass
class FanOutResult:
    """Features in destination order plus the errors of the destinations that failed."""

    features: list[Feature] = field(default_factory=list)
    errors: list[IsochroneError] = field(default_factory=list)

    @property
    def all_unreachable(self) -> bool:
        """True when nothing succeeded and every failure was a connection failure."""
        return (
            not self.features
            and bool(self.errors)
            and all(isinstance(e, BackendUnreachable) for e in self.errors)
        )


def fan_out(
    destinations: Sequence[Location],
    build_feature: Callable[[Location], Feature],
    *,
    workers: int,
) -> FanOutResult:
    """
    Build one feature per destination concurrently.

    Each finished feature is written to its destination's slot; empty slots are
    compacted away at the end, so features keep request order. A destination
    that raises an ``IsochroneError`` is logged and skipped.
    """
    slots: list[Feature | None] = [None] * len(destinations)
    result = FanOutResult()
    if not destinations:
        return result

    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(destinations)))) as executor:
        future_to_index = {
            executor.submit(build_feature, destination): index
            for index, destination in enumerate(destinations)
        }
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                slots[index] = future.result()
            except IsochroneError as e:
                dest = destinations[index]
                logger.warning(
                    "Failed to generate isochrone for destination %.6f,%.6f: %s",
                    dest.lat,
                    dest.lng,
                    e,
                )
                result.errors.append(e)

    result.features = [feature for feature in slots if feature is not None]
    return result
