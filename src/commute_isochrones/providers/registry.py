"""
Provider registry: one provider instance per configured backend.

Built once per configuration set and read-only afterwards. A backend whose
configuration is incomplete is left out and reported in ``warnings``; it never
stops the other backends from being built.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from commute_isochrones.errors import ConfigurationError, ProviderUnavailable
from commute_isochrones.providers.google import GoogleProvider
from commute_isochrones.providers.mapbox import MapboxProvider
from commute_isochrones.providers.openroute import OpenRouteProvider
from commute_isochrones.schemas import AnyProviderConfig, ProviderName

if TYPE_CHECKING:
    import requests

    from commute_isochrones.providers.base import IsochroneProvider, ProviderOptions

logger = logging.getLogger(__name__)

_FACTORIES: dict[ProviderName, Callable[..., Any]] = {
    ProviderName.MAPBOX: MapboxProvider.from_config,
    ProviderName.OPENROUTE: OpenRouteProvider.from_config,
    ProviderName.GOOGLE: GoogleProvider.from_config,
}


def supported_provider_names() -> frozenset[ProviderName]:
    """Every provider name the system recognizes, configured or not."""
    return frozenset(ProviderName)


def create_provider(
    config: AnyProviderConfig,
    *,
    session: requests.Session | None = None,
    options: ProviderOptions | None = None,
) -> IsochroneProvider:
    """
    Build the provider matching ``config.provider``.

    Raises:
        ConfigurationError: Required credentials are missing.
    """
    factory = _FACTORIES[ProviderName(config.provider)]
    provider: IsochroneProvider = factory(config, session=session, options=options)
    return provider


class ProviderRegistry:
    """Read-only mapping from provider name to provider."""

    def __init__(
        self,
        providers: Mapping[ProviderName, IsochroneProvider],
        warnings: Iterable[str] = (),
    ) -> None:
        self._providers = MappingProxyType(dict(providers))
        self.warnings: tuple[str, ...] = tuple(warnings)

    @classmethod
    def build(
        cls,
        configs: Iterable[AnyProviderConfig],
        *,
        session: requests.Session | None = None,
        options: ProviderOptions | None = None,
    ) -> ProviderRegistry:
        """Build every configured backend, skipping the ones that fail."""
        providers: dict[ProviderName, IsochroneProvider] = {}
        warnings: list[str] = []
        for config in configs:
            try:
                providers[ProviderName(config.provider)] = create_provider(
                    config, session=session, options=options
                )
            except ConfigurationError as e:
                message = f"Failed to initialize {config.provider} provider: {e}"
                logger.warning(message)
                warnings.append(message)
            except Exception as e:
                # Any other construction failure leaves only this backend out
                message = f"Failed to initialize {config.provider} provider: {e}"
                logger.exception(message)
                warnings.append(message)
        return cls(providers, warnings)

    @property
    def providers(self) -> Mapping[ProviderName, IsochroneProvider]:
        return self._providers

    def lookup(self, name: ProviderName | str) -> IsochroneProvider:
        """
        Provider registered under ``name``.

        Raises:
            ProviderUnavailable: ``name`` is unknown, unconfigured, or failed to build.
        """
        try:
            return self._providers[ProviderName(name)]
        except (KeyError, ValueError):
            raise ProviderUnavailable(str(name)) from None

    def available(self) -> list[ProviderName]:
        """Configured provider names, in configuration order."""
        return list(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)
