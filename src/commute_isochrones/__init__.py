"""Commute Isochrones - travel-time reachability polygons for commute destinations.

Architecture::

    schemas.py     Requests, features, provider configs (pydantic)
    providers/     One module per backend + registry (Mapbox, OpenRouteService, Google)
    geo.py         Grid sampling around a destination (radius, lattice, haversine)
    reachability   Travel-time filtering of grid points with fallback
    normalize.py   Canonical request form for cache keys
    service.py     Provider lookup and delegation
    store.py       Result cache with TTL
    flows/         Prefect orchestration (cache check, generate, save)

Data flow: request -> service -> provider (-> geo -> reachability) -> features

Extension points - see each package's docstring:
  - New backend:   providers/__init__.py
"""

__version__ = "0.1.0"

from commute_isochrones.config import Settings
from commute_isochrones.schemas import FeatureCollection, IsochroneRequest, Location

__all__ = ["FeatureCollection", "IsochroneRequest", "Location", "Settings", "__version__"]
