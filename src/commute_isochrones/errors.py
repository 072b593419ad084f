"""
Error taxonomy for isochrone generation.

Only ``ProviderUnavailable`` (and ``BackendUnreachable`` for a native backend that
never answered) reach callers of ``IsochroneService.generate``. The per-destination
and per-point errors are raised inside providers and recovered there: the failing
unit is logged and dropped.
"""

from __future__ import annotations


class IsochroneError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(IsochroneError):
    """A backend is missing required credentials at registry build time."""

    def __init__(self, provider: str, missing: list[str]) -> None:
        self.provider = provider
        self.missing = missing
        super().__init__(f"{provider} provider requires {' and '.join(missing)}")


class ProviderUnavailable(IsochroneError):
    """The requested provider is not configured or failed to initialize."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Provider {provider} is not available")


class BackendTransportError(IsochroneError):
    """The backend returned a non-success status or the transport failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class BackendUnreachable(BackendTransportError):
    """Every call to a native-polygon backend failed at the connection level."""


class MalformedResponseError(BackendTransportError):
    """The backend payload does not have the expected shape."""


class EmptyResultError(IsochroneError):
    """The backend answered successfully but returned no usable polygon or points."""
