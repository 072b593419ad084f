"""Mapbox Isochrone API provider (native polygons).

API docs: https://docs.mapbox.com/api/navigation/isochrone/
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from commute_isochrones.errors import BackendUnreachable, ConfigurationError
from commute_isochrones.providers.base import (
    ProviderOptions,
    call_backend,
    departure_time,
    fan_out,
    first_polygon_ring,
)
from commute_isochrones.schemas import (
    MAPBOX_BASE_URL,
    Feature,
    FeatureCollection,
    IsochroneRequest,
    Location,
    MapboxConfig,
    PolygonSource,
    ProviderName,
    TravelMode,
)
from commute_isochrones.services.http import session as default_session

if TYPE_CHECKING:
    import requests

# Mapbox has no pure transit profile
MODE_PROFILES: dict[TravelMode, str] = {
    TravelMode.DRIVE: "driving",
    TravelMode.TRANSIT: "driving-transit",
    TravelMode.BIKE: "cycling",
    TravelMode.WALK: "walking",
}


class MapboxProvider:
    """Isochrones straight from the Mapbox Isochrone API."""

    name: ClassVar[ProviderName] = ProviderName.MAPBOX
    capability: ClassVar[PolygonSource] = PolygonSource.NATIVE

    def __init__(
        self,
        access_token: str | None,
        base_url: str | None = MAPBOX_BASE_URL,
        *,
        session: requests.Session | None = None,
        options: ProviderOptions | None = None,
    ) -> None:
        missing = [
            label
            for label, value in (("access_token", access_token), ("base_url", base_url))
            if not value
        ]
        if missing:
            raise ConfigurationError(self.name, missing)
        self.access_token = access_token
        self.base_url = str(base_url).rstrip("/")
        self.session = session or default_session
        self.options = options or ProviderOptions()

    @classmethod
    def from_config(
        cls,
        config: MapboxConfig,
        *,
        session: requests.Session | None = None,
        options: ProviderOptions | None = None,
    ) -> MapboxProvider:
        return cls(config.access_token, config.base_url, session=session, options=options)

    def generate(self, request: IsochroneRequest) -> FeatureCollection:
        result = fan_out(
            request.destinations,
            lambda destination: self._feature(destination, request),
            workers=self.options.destination_workers,
        )
        if result.all_unreachable:
            count = len(request.destinations)
            msg = f"{self.name} backend unreachable for all {count} destinations"
            raise BackendUnreachable(msg)
        return FeatureCollection(features=result.features)

    def _feature(self, destination: Location, request: IsochroneRequest) -> Feature:
        profile = MODE_PROFILES[request.mode]
        depart_at = departure_time(request.window)
        url = f"{self.base_url}/mapbox/{profile}/{destination.lng},{destination.lat}"
        params: dict[str, str] = {
            "contours_minutes": f"{request.minutes:g}",
            "polygons": "true",
            "access_token": str(self.access_token),
            "depart_at": depart_at.isoformat(timespec="minutes"),
        }

        data = call_backend(lambda: self.session.get(url, params=params), "Mapbox")
        ring = first_polygon_ring(data, "Mapbox")
        return Feature.for_destination(request, destination, ring)
