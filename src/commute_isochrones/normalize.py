"""Canonical request form for cache keys.

Two requests that differ only in destination order, or in coordinates beyond the
6th decimal place, normalize to the same value. The canonical form is what a
caching layer hashes; nothing here hashes or stores.
"""

from __future__ import annotations

import json

from commute_isochrones.schemas import IsochroneRequest, Location

COORDINATE_DECIMALS = 6


def normalize(request: IsochroneRequest) -> IsochroneRequest:
    """Round coordinates to 6 decimals and sort destinations by ``(lat, lng)``."""
    destinations = sorted(
        (
            Location(
                lat=round(d.lat, COORDINATE_DECIMALS),
                lng=round(d.lng, COORDINATE_DECIMALS),
            )
            for d in request.destinations
        ),
        key=lambda d: (d.lat, d.lng),
    )
    return request.model_copy(update={"destinations": tuple(destinations)})


def canonical_form(request: IsochroneRequest) -> str:
    """Compact, key-sorted JSON of the normalized request."""
    payload = normalize(request).model_dump(mode="json")
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))
