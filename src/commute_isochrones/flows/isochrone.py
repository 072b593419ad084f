"""
Prefect flow for generating isochrones with a result cache.

The flow derives a cache key from the normalized request, serves a fresh cached
response when there is one, and otherwise runs the requested provider and stores
the response with metadata (request hash, provider, generation time).

Run locally:
    commute-isochrones isochrone --provider mapbox --mode walk --window 08:00-09:00 \
        --minutes 15 --dest 35.9042,-79.0469

Run with Prefect dashboard:
    prefect server start &
    commute-isochrones isochrone ...
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from pathlib import Path

from prefect import flow, task

from commute_isochrones.config import get_settings
from commute_isochrones.normalize import canonical_form
from commute_isochrones.schemas import (
    FeatureCollection,
    IsochroneRequest,
    IsochroneResponse,
    RequestSummary,
    ResponseMetadata,
)
from commute_isochrones.service import IsochroneService
from commute_isochrones.store import ResultStore, cache_key

# Result cache under the configured cache directory
store = ResultStore(Path(get_settings().cache_dir))


@lru_cache
def get_service() -> IsochroneService:
    """Service built once from settings and shared across flow runs."""
    return IsochroneService.from_settings(get_settings())


def build_response(
    collection: FeatureCollection,
    request: IsochroneRequest,
    request_hash: str,
    generated_at: datetime | None = None,
) -> IsochroneResponse:
    """Attach response metadata to a feature collection."""
    return IsochroneResponse(
        features=collection.features,
        metadata=ResponseMetadata(
            request_hash=request_hash,
            provider=request.provider,
            generated_at=generated_at or datetime.now(UTC),
            request=RequestSummary(
                destination_count=len(request.destinations),
                mode=request.mode,
                window=request.window,
                minutes=request.minutes,
            ),
        ),
    )


@task(name="run-provider")
def run_provider(request: IsochroneRequest) -> FeatureCollection:
    """Generate isochrones with the requested provider. No retries."""
    return get_service().generate(request)


@task(name="save-isochrones")
def save_response(key: str, response: IsochroneResponse) -> Path:
    """Save a response via the result store."""
    ttl = timedelta(hours=get_settings().cache_ttl_hours)
    return store.write(
        key,
        response.model_dump(mode="json"),
        source=str(response.metadata.provider),
        valid_until=datetime.now(UTC) + ttl,
    )


@flow(name="generate-isochrones", log_prints=True)
def generate_isochrones(request: IsochroneRequest, use_cache: bool = True) -> IsochroneResponse:
    """
    Generate (or serve cached) isochrones for a request.

    Checks freshness before calling the provider. Empty results are returned but
    never cached.
    """
    key = cache_key(canonical_form(request))

    if use_cache and store.is_fresh(key):
        print(f"Isochrones {key[:12]} are fresh, skipping {request.provider}.")
        cached = IsochroneResponse.model_validate(store.read(key))
        cached.metadata.cached = True
        return cached

    print(
        f"Generating {request.provider} isochrones for "
        f"{len(request.destinations)} destinations ({request.mode}, {request.minutes:g} min)..."
    )
    collection = run_provider(request)
    response = build_response(collection, request, key)
    print(f"Got {len(response.features)} of {len(request.destinations)} features.")

    if use_cache and response.features:
        path = save_response(key, response)
        print(f"Saved isochrones to {path}")

    return response


if __name__ == "__main__":
    from commute_isochrones.cli import main

    raise SystemExit(main())
