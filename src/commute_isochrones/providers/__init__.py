"""Isochrone providers.

Each module is one travel-time backend exposing the same ``generate`` contract:

    providers/
    ├── base.py        # Contract, fan-out, backend call helpers
    ├── mapbox.py      # Native polygons (Mapbox Isochrone API)
    ├── openroute.py   # Native polygons (OpenRouteService)
    ├── google.py      # Grid-sampled polygons (Google Directions)
    └── registry.py    # Name -> provider lookup built from configuration

Adding a new backend
--------------------
1. Create ``providers/{name}.py`` with a class carrying ``name``, ``capability``,
   ``from_config`` and ``generate``.
2. Add its config model to ``schemas.py`` and its name to ``ProviderName``.
3. Register ``from_config`` in ``registry._FACTORIES``.
4. Add a test class in ``tests/test_providers.py``.
"""

from commute_isochrones.providers.base import IsochroneProvider, ProviderOptions
from commute_isochrones.providers.google import GoogleProvider
from commute_isochrones.providers.mapbox import MapboxProvider
from commute_isochrones.providers.openroute import OpenRouteProvider
from commute_isochrones.providers.registry import (
    ProviderRegistry,
    create_provider,
    supported_provider_names,
)

__all__ = [
    "GoogleProvider",
    "IsochroneProvider",
    "MapboxProvider",
    "OpenRouteProvider",
    "ProviderOptions",
    "ProviderRegistry",
    "create_provider",
    "supported_provider_names",
]
