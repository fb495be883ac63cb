"""On-disk quota cache shared by nearby invocations.

The file maps credential fingerprints to the last answer and the endpoint
that produced it::

    {"version": 1,
     "entries": {"<fingerprint>": {"endpoint_used": "main",
                                   "fetched_at": 1760000000.0,
                                   "payload": {"daily_spent": "88.48",
                                               "currency": "USD",
                                               "opus_available": true}}}}

Unknown fields are ignored on read. Writes go through a temporary file and
``os.replace`` so readers never observe a half-written file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from ccline.types.quota import QuotaCacheEntry
from ccline.types.segments import QuotaStatus

logger = logging.getLogger(__name__)

CACHE_VERSION = 1

# Entries untouched for this long are dropped on the next write.
MAX_ENTRY_AGE_SEC = 7 * 86_400


def default_cache_path() -> Path:
    return Path.home() / ".claude" / "ccline" / "quota_cache.json"


def _entry_to_dict(entry: QuotaCacheEntry) -> dict[str, Any]:
    return {
        "endpoint_used": entry.endpoint_used,
        "fetched_at": entry.fetched_at,
        "payload": {
            "daily_spent": str(entry.payload.daily_spent),
            "currency": entry.payload.currency,
            "opus_available": entry.payload.opus_available,
        },
    }


def _entry_from_dict(fingerprint: str, raw: Any) -> QuotaCacheEntry | None:
    if not isinstance(raw, dict):
        return None
    endpoint = raw.get("endpoint_used")
    fetched_at = raw.get("fetched_at")
    payload = raw.get("payload")
    if not isinstance(endpoint, str) or not isinstance(payload, dict):
        return None
    if isinstance(fetched_at, bool) or not isinstance(fetched_at, (int, float)):
        return None
    opus = payload.get("opus_available")
    currency = payload.get("currency", "USD")
    if not isinstance(opus, bool) or not isinstance(currency, str):
        return None
    try:
        spent = Decimal(str(payload.get("daily_spent")))
    except InvalidOperation:
        return None
    if not spent.is_finite():
        return None
    return QuotaCacheEntry(
        credential_fingerprint=fingerprint,
        endpoint_used=endpoint,
        payload=QuotaStatus(
            daily_spent=spent,
            opus_available=opus,
            endpoint_used=endpoint,
            currency=currency,
        ),
        fetched_at=float(fetched_at),
    )


class QuotaCache:
    """Read/write access to the quota cache file.

    Every read goes back to disk; a missing or corrupt file reads as empty.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_cache_path()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read_entries(self) -> dict[str, Any]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.debug("Ignoring unreadable quota cache %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        entries = data.get("entries")
        return dict(entries) if isinstance(entries, dict) else {}

    def lookup(self, fingerprint: str) -> tuple[QuotaCacheEntry | None, float | None]:
        """Return the cached entry and the last failure time for *fingerprint* in one read.

        The entry is returned regardless of its age.
        """
        raw = self._read_entries().get(fingerprint)
        return _entry_from_dict(fingerprint, raw), _failed_at(raw)

    def load(self, fingerprint: str) -> QuotaCacheEntry | None:
        """Return the cached entry for *fingerprint*, ignoring its age."""
        return self.lookup(fingerprint)[0]

    def last_failure(self, fingerprint: str) -> float | None:
        """Timestamp of the last probe where every endpoint failed, if any."""
        return self.lookup(fingerprint)[1]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def store(self, entry: QuotaCacheEntry) -> None:
        """Replace the slot for the entry's fingerprint (clears any failure mark)."""
        entries = self._read_entries()
        entries[entry.credential_fingerprint] = _entry_to_dict(entry)
        self._write(entries, now=entry.fetched_at)

    def record_failure(self, fingerprint: str, when: float) -> None:
        """Mark *fingerprint* as failed, keeping its last good entry for stickiness."""
        entries = self._read_entries()
        slot = entries.get(fingerprint)
        slot = dict(slot) if isinstance(slot, dict) else {}
        slot["failed_at"] = when
        entries[fingerprint] = slot
        self._write(entries, now=when)

    def clear(self) -> bool:
        """Delete the cache file. Returns True if a file was removed."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        return True

    def _write(self, entries: dict[str, Any], *, now: float) -> None:
        kept = {
            fp: slot for fp, slot in entries.items()
            if isinstance(slot, dict) and now - _last_touched(slot) < MAX_ENTRY_AGE_SEC
        }
        data = {"version": CACHE_VERSION, "entries": kept}

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise


def _last_touched(slot: dict[str, Any]) -> float:
    stamps = [
        v for v in (slot.get("fetched_at"), slot.get("failed_at"))
        if isinstance(v, (int, float)) and not isinstance(v, bool)
    ]
    return max(stamps, default=0.0)


def _failed_at(raw: Any) -> float | None:
    if not isinstance(raw, dict):
        return None
    failed_at = raw.get("failed_at")
    if isinstance(failed_at, bool) or not isinstance(failed_at, (int, float)):
        return None
    return float(failed_at)
