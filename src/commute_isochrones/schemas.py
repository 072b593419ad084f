"""
Domain models for commute isochrones.

Pydantic models for requests, results and backend configuration.
These define the canonical schema - providers normalize backend responses to these.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

# =============================================================================
# Enumerations
# =============================================================================


class TravelMode(StrEnum):
    """How the commuter travels."""

    DRIVE = "drive"
    TRANSIT = "transit"
    BIKE = "bike"
    WALK = "walk"


class ProviderName(StrEnum):
    """Travel-time backends the system recognizes."""

    MAPBOX = "mapbox"
    OPENROUTE = "openroute"
    GOOGLE = "google"


class PolygonSource(StrEnum):
    """How a provider obtains its reachability polygon."""

    NATIVE = "native"
    GRID_SAMPLED = "grid_sampled"


# =============================================================================
# Geographic
# =============================================================================


class Location(BaseModel):
    """Geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


#: Ring order as produced by the backend or by the grid scan.
Polygon = list[Location]


# =============================================================================
# Request
# =============================================================================

WINDOW_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)-([01]\d|2[0-3]):([0-5]\d)$")


def parse_window_start(window: str) -> tuple[int, int]:
    """Return ``(hour, minute)`` of the start half of an ``HH:MM-HH:MM`` window."""
    match = WINDOW_PATTERN.match(window)
    if match is None:
        msg = f"window must be HH:MM-HH:MM, got {window!r}"
        raise ValueError(msg)
    return int(match.group(1)), int(match.group(2))


class IsochroneRequest(BaseModel):
    """A validated request for travel-time polygons around each destination."""

    model_config = ConfigDict(frozen=True)

    destinations: tuple[Location, ...] = Field(..., min_length=1)
    mode: TravelMode
    window: str = Field(..., description="Departure window, HH:MM-HH:MM")
    minutes: float = Field(..., gt=0, description="Travel-time budget")
    provider: ProviderName

    @field_validator("window")
    @classmethod
    def _check_window(cls, value: str) -> str:
        parse_window_start(value)
        return value


# =============================================================================
# Result
# =============================================================================


class PolygonGeometry(BaseModel):
    """Polygon geometry expressed as ``{lat, lng}`` points."""

    type: Literal["Polygon"] = "Polygon"
    coordinates: Polygon


class FeatureProperties(BaseModel):
    """Attributes attached to every isochrone feature."""

    mode: TravelMode
    minutes: float
    window: str
    destination: Location
    verified: bool = Field(
        default=True,
        description="False when the polygon is an unfiltered grid fallback",
    )


class Feature(BaseModel):
    """One isochrone polygon for one destination."""

    type: Literal["Feature"] = "Feature"
    geometry: PolygonGeometry
    properties: FeatureProperties

    @classmethod
    def for_destination(
        cls,
        request: IsochroneRequest,
        destination: Location,
        ring: Polygon,
        *,
        verified: bool = True,
    ) -> Feature:
        """Build a feature carrying the request attributes for ``destination``."""
        return cls(
            geometry=PolygonGeometry(coordinates=ring),
            properties=FeatureProperties(
                mode=request.mode,
                minutes=request.minutes,
                window=request.window,
                destination=destination,
                verified=verified,
            ),
        )


class FeatureCollection(BaseModel):
    """Isochrones for every destination that succeeded, in request order."""

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[Feature] = Field(default_factory=list)


class RequestSummary(BaseModel):
    """Echo of the request parameters attached to a response."""

    destination_count: int
    mode: TravelMode
    window: str
    minutes: float


class ResponseMetadata(BaseModel):
    """Provenance for a generated (or cached) response."""

    request_hash: str
    provider: ProviderName
    generated_at: datetime
    request: RequestSummary
    cached: bool = False


class IsochroneResponse(FeatureCollection):
    """Feature collection plus response metadata."""

    metadata: ResponseMetadata


# =============================================================================
# Provider configuration
# =============================================================================

MAPBOX_BASE_URL = "https://api.mapbox.com/isochrone/v1"
OPENROUTE_BASE_URL = "https://api.openrouteservice.org/v2"
GOOGLE_BASE_URL = "https://maps.googleapis.com/maps/api"


class MapboxConfig(BaseModel):
    """Mapbox Isochrone API credentials."""

    provider: Literal["mapbox"] = "mapbox"
    access_token: str | None = None
    base_url: str = MAPBOX_BASE_URL


class OpenRouteConfig(BaseModel):
    """OpenRouteService credentials."""

    provider: Literal["openroute"] = "openroute"
    api_key: str | None = None
    base_url: str = OPENROUTE_BASE_URL


class GoogleConfig(BaseModel):
    """Google Directions API credentials."""

    provider: Literal["google"] = "google"
    api_key: str | None = None
    base_url: str = GOOGLE_BASE_URL


AnyProviderConfig = MapboxConfig | OpenRouteConfig | GoogleConfig

ProviderConfig = Annotated[AnyProviderConfig, Field(discriminator="provider")]

_provider_config_adapter: TypeAdapter[AnyProviderConfig] = TypeAdapter(ProviderConfig)


def parse_provider_config(data: dict[str, object]) -> AnyProviderConfig:
    """Validate a raw config dict into the matching provider config variant."""
    return _provider_config_adapter.validate_python(data)
