"""OpenRouteService isochrones provider (native polygons).

Free tier: 2000 requests/day, API key required.
API docs: https://openrouteservice.org/dev/#/api-docs/v2/isochrones
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from commute_isochrones.errors import BackendUnreachable, ConfigurationError
from commute_isochrones.providers.base import (
    ProviderOptions,
    call_backend,
    departure_time,
    fan_out,
    first_polygon_ring,
)
from commute_isochrones.schemas import (
    OPENROUTE_BASE_URL,
    Feature,
    FeatureCollection,
    IsochroneRequest,
    Location,
    OpenRouteConfig,
    PolygonSource,
    ProviderName,
    TravelMode,
)
from commute_isochrones.services.http import session as default_session

if TYPE_CHECKING:
    import requests

# No transit profile; heavy-goods driving is the closest alternative
MODE_PROFILES: dict[TravelMode, str] = {
    TravelMode.DRIVE: "driving-car",
    TravelMode.TRANSIT: "driving-hgv",
    TravelMode.BIKE: "cycling-regular",
    TravelMode.WALK: "foot-walking",
}


class OpenRouteProvider:
    """Isochrones straight from the OpenRouteService v2 API."""

    name: ClassVar[ProviderName] = ProviderName.OPENROUTE
    capability: ClassVar[PolygonSource] = PolygonSource.NATIVE

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = OPENROUTE_BASE_URL,
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
        config: OpenRouteConfig,
        *,
        session: requests.Session | None = None,
        options: ProviderOptions | None = None,
    ) -> OpenRouteProvider:
        return cls(config.api_key, config.base_url, session=session, options=options)

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

    def build_body(self, destination: Location, request: IsochroneRequest) -> dict[str, Any]:
        """JSON body for one isochrone call; ORS positions are ``[lng, lat]``."""
        return {
            "locations": [[destination.lng, destination.lat]],
            "range": [request.minutes * 60],
            "range_type": "time",
            "units": "m",
            "location_type": "start",
            "options": {
                "avoid_features": [],
                "avoid_borders": "none",
                "avoid_countries": [],
                "avoid_polygons": [],
                "departure_time": int(departure_time(request.window).timestamp()),
            },
        }

    def _feature(self, destination: Location, request: IsochroneRequest) -> Feature:
        url = f"{self.base_url}/isochrones/{MODE_PROFILES[request.mode]}"
        headers = {"Authorization": str(self.api_key), "Content-Type": "application/json"}
        body = self.build_body(destination, request)

        data = call_backend(
            lambda: self.session.post(url, json=body, headers=headers), "OpenRouteService"
        )
        ring = first_polygon_ring(data, "OpenRouteService")
        return Feature.for_destination(request, destination, ring)
