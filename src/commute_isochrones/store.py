"""Result cache with freshness-aware reads.

Generated isochrone responses are stored as JSON files keyed by a content digest of
the normalized request:

    {base_dir}/isochrones/{key[:2]}/{key}.json

Every file is wrapped in a metadata envelope with ``valid_until`` so the request
flow can serve a fresh cached response instead of calling a backend again.
Entries are never evicted here; expired files are simply overwritten.
"""

from __future__ import annotations

import hashlib
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


def cache_key(canonical: str) -> str:
    """SHA-256 hex digest of a canonical request form."""
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _expiry(envelope: dict[str, Any]) -> datetime | None:
    raw = envelope.get("meta", {}).get("valid_until")
    if raw is None:
        return None
    expiry = datetime.fromisoformat(raw)
    # Naive timestamps are written as UTC
    return expiry if expiry.tzinfo else expiry.replace(tzinfo=UTC)


class ResultStore:
    """Cached isochrone responses addressed by request digest."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.isochrones = base_dir / "isochrones"

    def path_for(self, key: str) -> Path:
        """Relative path of the entry for ``key``."""
        return Path("isochrones") / key[:2] / f"{key}.json"

    def read(self, key: str) -> dict[str, Any] | None:
        """Cached response payload for ``key``, or None on a miss."""
        envelope = self.read_raw(key)
        if envelope is None:
            return None
        payload: dict[str, Any] = envelope.get("data", envelope)
        return payload

    def read_raw(self, key: str) -> dict[str, Any] | None:
        """Full envelope (meta + data) for ``key``, or None on a miss."""
        entry = self._resolve(self.path_for(key))
        if not entry.is_file():
            return None
        envelope: dict[str, Any] = json.loads(entry.read_text())
        return envelope

    def write(
        self,
        key: str,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Store a response under ``key``.

        Args:
            key: Request digest (see ``cache_key``).
            data: Serialized response.
            source: Provider that generated the response.
            valid_until: Expiry timestamp. None means never fresh.
            **params: Extra metadata fields.

        Returns:
            Absolute path of the entry.
        """
        entry = self._resolve(self.path_for(key))
        entry.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "key": key,
            "source": source,
            "fetched_at": datetime.now(UTC).isoformat(),
            **params,
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()

        entry.write_text(json.dumps({"meta": meta, "data": data}, indent=2))
        return entry

    def is_fresh(self, key: str) -> bool:
        """True when an entry exists and its ``valid_until`` is still ahead.

        Entries without ``valid_until`` are never fresh.
        """
        envelope = self.read_raw(key)
        if envelope is None:
            return False
        expiry = _expiry(envelope)
        return expiry is not None and datetime.now(UTC) < expiry

    def _resolve(self, relative: Path) -> Path:
        full = self.base / relative
        if not full.resolve().is_relative_to(self.base.resolve()):
            msg = f"Path escapes store base directory: {relative}"
            raise ValueError(msg)
        return full
