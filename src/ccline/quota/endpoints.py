"""Built-in accounting endpoints and probe ordering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from ccline.types.quota import EndpointDescriptor

DEFAULT_ENDPOINTS: tuple[EndpointDescriptor, ...] = (
    EndpointDescriptor(
        name="main",
        url="https://www.packycode.com/api/backend/users/info",
        priority=0,
    ),
    EndpointDescriptor(
        name="share",
        url="https://share.packycode.com/api/backend/users/info",
        priority=1,
    ),
)


def mark_last_known_good(
    endpoints: Iterable[EndpointDescriptor],
    name: str,
    when: float,
) -> tuple[EndpointDescriptor, ...]:
    """Return a copy of *endpoints* with *name* stamped as last known good."""
    return tuple(
        replace(ep, last_known_good=when) if ep.name == name else ep
        for ep in endpoints
    )


def order_endpoints(
    endpoints: Sequence[EndpointDescriptor],
    preferred: str | None = None,
) -> list[EndpointDescriptor]:
    """Order endpoints for probing.

    The *preferred* endpoint goes first, then endpoints that have answered
    before (most recent first), then the rest by priority. Duplicate names
    are dropped so no endpoint is attempted twice.
    """
    seen: set[str] = set()
    unique: list[EndpointDescriptor] = []
    for ep in endpoints:
        if ep.name not in seen:
            seen.add(ep.name)
            unique.append(ep)

    def _key(ep: EndpointDescriptor) -> tuple[int, float, int]:
        rank = 0 if ep.name == preferred else 1 if ep.last_known_good is not None else 2
        recency = -(ep.last_known_good or 0.0)
        return (rank, recency, ep.priority)

    return sorted(unique, key=_key)
