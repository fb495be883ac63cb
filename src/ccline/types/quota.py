"""Quota monitor types: endpoints, probe outcomes and cache entries."""

from __future__ import annotations

from dataclasses import dataclass

from ccline.types.segments import QuotaStatus

# Entries stamped further ahead of the local clock than this are not trusted.
CLOCK_SKEW_SEC = 5.0


@dataclass(frozen=True, slots=True)
class EndpointDescriptor:
    """One remote service address able to answer a quota query.

    Lower ``priority`` values are tried first. ``last_known_good`` is the
    timestamp of the last successful answer for the current credential.
    """

    name: str
    url: str
    priority: int = 0
    last_known_good: float | None = None


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of a successful probe: the data and the endpoint that answered."""

    status: QuotaStatus
    endpoint: EndpointDescriptor


@dataclass(frozen=True, slots=True)
class QuotaCacheEntry:
    """A cached quota answer for one credential fingerprint."""

    credential_fingerprint: str
    endpoint_used: str
    payload: QuotaStatus
    fetched_at: float

    def age(self, now: float) -> float:
        """Seconds since the entry was fetched; negative if stamped in the future."""
        return now - self.fetched_at

    def is_fresh(self, now: float, max_age: float) -> bool:
        return -CLOCK_SKEW_SEC <= self.age(now) < max_age
