"""
Shared HTTP client for travel-time backends.

Provides a pre-configured ``requests.Session`` with a bounded per-call timeout and a
connection pool sized for the fan-out thread pools. Failed calls are never
retried: a failed point or destination is dropped by the caller instead.

Usage::

    from commute_isochrones.services.http import create_session

    s = create_session(timeout=10)
    resp = s.get("https://api.mapbox.com/isochrone/v1/...")
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

#: No retries at all; status errors are left to ``resp.raise_for_status()``.
NO_RETRY = Retry(total=0, raise_on_status=False)

DEFAULT_TIMEOUT = 15  # seconds

#: Connections kept per host; matches destination x point worker fan-out.
DEFAULT_POOL_SIZE = 32

USER_AGENT = "commute-isochrones/0.1"


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    pool_size: int = DEFAULT_POOL_SIZE,
) -> requests.Session:
    """
    Build a ``requests.Session`` with the no-retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``NO_RETRY``).
        timeout: Default timeout applied to every request.
        pool_size: Connection pool size per host.
    """
    s = requests.Session()
    adapter = HTTPAdapter(
        max_retries=retry or NO_RETRY,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = USER_AGENT

    # Inject a default timeout so a stalled backend cannot block a batch.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = timeout
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session, used by providers that are not handed one.
session: requests.Session = create_session()
