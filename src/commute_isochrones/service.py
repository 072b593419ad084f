"""
Isochrone orchestration.

Resolves the requested provider from the registry and delegates to it. There is
no fallback: a request for an unconfigured provider fails with
``ProviderUnavailable`` even when other providers are available.

Example::

    from commute_isochrones.config import get_settings
    from commute_isochrones.service import IsochroneService

    service = IsochroneService.from_settings(get_settings())
    collection = service.generate(request)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from commute_isochrones.providers.registry import ProviderRegistry
from commute_isochrones.services.http import create_session

if TYPE_CHECKING:
    from commute_isochrones.config import Settings
    from commute_isochrones.schemas import FeatureCollection, IsochroneRequest, ProviderName

logger = logging.getLogger(__name__)


class IsochroneService:
    """Transport-independent entry point for isochrone generation."""

    def __init__(self, registry: ProviderRegistry) -> None:
        self.registry = registry

    @classmethod
    def from_settings(cls, settings: Settings) -> IsochroneService:
        """Build the registry from every backend configured in ``settings``."""
        registry = ProviderRegistry.build(
            settings.provider_configs(),
            session=create_session(timeout=settings.http_timeout_s),
            options=settings.provider_options(),
        )
        return cls(registry)

    def generate(self, request: IsochroneRequest) -> FeatureCollection:
        """
        Generate isochrones with the provider named in ``request``.

        Raises:
            ProviderUnavailable: The requested provider is not in the registry.
            BackendUnreachable: A native-polygon backend could not be reached at all.
        """
        provider = self.registry.lookup(request.provider)
        logger.info(
            "Generating %s isochrones for %d destinations (%s, %g min, %s)",
            request.provider,
            len(request.destinations),
            request.mode,
            request.minutes,
            request.window,
        )
        collection = provider.generate(request)
        logger.info(
            "%s returned %d of %d features",
            request.provider,
            len(collection.features),
            len(request.destinations),
        )
        return collection

    def available_providers(self) -> list[ProviderName]:
        return self.registry.available()
