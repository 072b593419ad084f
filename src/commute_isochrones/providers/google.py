"""Google Directions API provider (grid-sampled polygons).

Google has no isochrone endpoint, so the polygon is approximated: a lattice of
candidate points is generated around each destination (``geo``), the travel time
to every point is queried, and points within the ceiling are kept
(``reachability``).

API docs: https://developers.google.com/maps/documentation/directions
"""

from __future__ import annotations

import logging
from datetime import UTC
from typing import TYPE_CHECKING, Any, ClassVar

from commute_isochrones.errors import (
    BackendTransportError,
    ConfigurationError,
    MalformedResponseError,
)
from commute_isochrones.geo import generate_grid_points
from commute_isochrones.providers.base import (
    ProviderOptions,
    call_backend,
    departure_time,
    fan_out,
)
from commute_isochrones.reachability import sample_reachable_area
from commute_isochrones.schemas import (
    GOOGLE_BASE_URL,
    Feature,
    FeatureCollection,
    GoogleConfig,
    IsochroneRequest,
    Location,
    PolygonSource,
    ProviderName,
    TravelMode,
)
from commute_isochrones.services.http import session as default_session

if TYPE_CHECKING:
    from datetime import datetime

    import requests

logger = logging.getLogger(__name__)

MODE_TRAVEL_MODES: dict[TravelMode, str] = {
    TravelMode.DRIVE: "driving",
    TravelMode.TRANSIT: "transit",
    TravelMode.BIKE: "bicycling",
    TravelMode.WALK: "walking",
}


def rfc3339(instant: datetime) -> str:
    """UTC RFC 3339 timestamp, e.g. ``2026-10-18T07:30:00Z``."""
    return instant.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_duration_minutes(data: Any) -> float:
    """
    Duration of the first leg of the first route, in minutes.

    Returns 0.0 when the response has no route or leg duration.
    """
    if not isinstance(data, dict):
        msg = f"Google API returned {type(data).__name__}, expected an object"
        raise MalformedResponseError(msg)

    status = data.get("status")
    if status != "OK":
        msg = f"Google Routes API error: {status} - {data.get('error_message', 'Unknown error')}"
        raise BackendTransportError(msg)

    try:
        routes = data.get("routes") or []
        if not routes:
            return 0.0
        legs = routes[0].get("legs") or []
        if not legs:
            return 0.0
        duration = legs[0].get("duration")
        if not duration:
            return 0.0
        return float(duration["value"]) / 60
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
        msg = f"Google API returned an unexpected route shape: {e}"
        raise MalformedResponseError(msg) from e


class GoogleProvider:
    """Grid-sampled isochrones from point-to-point Google Directions queries."""

    name: ClassVar[ProviderName] = ProviderName.GOOGLE
    capability: ClassVar[PolygonSource] = PolygonSource.GRID_SAMPLED

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = GOOGLE_BASE_URL,
        *,
        session: requests.Session | None = None,
        options: ProviderOptions | None = None,
    ) -> None:
        missing = [
            label for label, value in (("api_key", api_key), ("base_url", base_url)) if not value
        ]
        if missing:
            raise ConfigurationError(self.name, missing)
        self.api_key = api_key
        self.base_url = str(base_url).rstrip("/")
        self.session = session or default_session
        self.options = options or ProviderOptions()

    @classmethod
    def from_config(
        cls,
        config: GoogleConfig,
        *,
        session: requests.Session | None = None,
        options: ProviderOptions | None = None,
    ) -> GoogleProvider:
        return cls(config.api_key, config.base_url, session=session, options=options)

    def generate(self, request: IsochroneRequest) -> FeatureCollection:
        result = fan_out(
            request.destinations,
            lambda destination: self._feature(destination, request),
            workers=self.options.destination_workers,
        )
        return FeatureCollection(features=result.features)

    def travel_time(
        self,
        origin: Location,
        destination: Location,
        travel_mode: str,
        departure: datetime | None = None,
    ) -> float:
        """Travel time in minutes from ``origin`` to ``destination``."""
        params: dict[str, str] = {
            "origin": f"{origin.lat},{origin.lng}",
            "destination": f"{destination.lat},{destination.lng}",
            "mode": travel_mode,
            "key": str(self.api_key),
        }
        if departure is not None:
            params["departure_time"] = rfc3339(departure)

        url = f"{self.base_url}/directions/json"
        data = call_backend(lambda: self.session.get(url, params=params), "Google")
        return parse_duration_minutes(data)

    def _feature(self, destination: Location, request: IsochroneRequest) -> Feature:
        travel_mode = MODE_TRAVEL_MODES[request.mode]
        departure = departure_time(request.window)
        grid = generate_grid_points(destination, request.minutes, request.mode)

        sample = sample_reachable_area(
            grid,
            lambda point: self.travel_time(destination, point, travel_mode, departure),
            ceiling_minutes=self.options.ceiling_minutes,
            fallback_count=self.options.fallback_count,
            workers=self.options.point_workers,
        )
        return Feature.for_destination(
            request, destination, sample.points, verified=sample.verified
        )
