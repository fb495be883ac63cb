"""QuotaMonitor — cached quota lookup across several endpoints with sticky failover."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from typing import Protocol

import httpx

from ccline.core.credentials import fingerprint
from ccline.quota.cache import QuotaCache
from ccline.quota.client import QuotaClient, QuotaFetchError
from ccline.quota.endpoints import DEFAULT_ENDPOINTS, mark_last_known_good, order_endpoints
from ccline.types.config import QuotaConfig
from ccline.types.quota import EndpointDescriptor, ProbeResult, QuotaCacheEntry
from ccline.types.segments import QuotaStatus

logger = logging.getLogger(__name__)


class QuotaFetcher(Protocol):
    async def fetch(self, endpoint: EndpointDescriptor, credential: str) -> QuotaStatus:
        ...


async def probe_endpoints(
    client: QuotaFetcher,
    endpoints: Sequence[EndpointDescriptor],
    credential: str,
    *,
    preferred: str | None = None,
    attempt_timeout: float | None = None,
    budget_sec: float = 4.0,
) -> ProbeResult | None:
    """Try endpoints in order until one answers.

    *preferred* (the endpoint that answered last time) is tried first. Each
    endpoint is attempted at most once and, when *attempt_timeout* is set,
    abandoned after that many seconds so the next one still gets a turn.
    The whole probe is bounded by *budget_sec*; when it runs out the
    in-flight attempt is cancelled and None is returned.
    """
    attempted: list[str] = []
    try:
        async with asyncio.timeout(budget_sec):
            for endpoint in order_endpoints(endpoints, preferred):
                attempted.append(endpoint.name)
                try:
                    async with asyncio.timeout(attempt_timeout):
                        status = await client.fetch(endpoint, credential)
                except QuotaFetchError as exc:
                    logger.debug("Quota endpoint %s failed: %s", exc.endpoint, exc.reason)
                    continue
                except TimeoutError:
                    logger.debug(
                        "Quota endpoint %s timed out after %.1fs", endpoint.name, attempt_timeout,
                    )
                    continue
                return ProbeResult(status=status, endpoint=endpoint)
    except TimeoutError:
        logger.debug(
            "Quota probe budget of %.1fs exhausted (attempted: %s)",
            budget_sec, ", ".join(attempted),
        )
        return None

    logger.debug("All quota endpoints failed (attempted: %s)", ", ".join(attempted))
    return None


class QuotaMonitor:
    """Produces the current QuotaStatus for a credential.

    Lookup order: in-process memo, then the on-disk cache (fresh within
    ``ttl_seconds``), then a network probe. The endpoint that answered last
    is remembered in the cache and tried first for ``sticky_seconds``.
    After a probe where every endpoint failed, further probes for the same
    credential are skipped for ``failure_backoff_seconds``.

    Pass ``cache=None`` to keep results in memory only.
    """

    def __init__(
        self,
        *,
        endpoints: Sequence[EndpointDescriptor] | None = None,
        cache: QuotaCache | None = None,
        ttl_seconds: float = 60.0,
        sticky_seconds: float = 86_400.0,
        failure_backoff_seconds: float = 15.0,
        attempt_timeout: float = 2.0,
        budget_seconds: float = 4.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._endpoints = tuple(endpoints) if endpoints else DEFAULT_ENDPOINTS
        self._cache = cache
        self._ttl = ttl_seconds
        self._sticky = sticky_seconds
        self._failure_backoff = failure_backoff_seconds
        self._attempt_timeout = attempt_timeout
        self._budget = budget_seconds
        self._transport = transport
        self._clock = clock
        self._memo: dict[str, tuple[QuotaCacheEntry | None, float | None]] = {}

    @classmethod
    def from_config(
        cls,
        config: QuotaConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> QuotaMonitor:
        return cls(
            endpoints=config.endpoints,
            cache=QuotaCache(config.cache_path) if config.use_disk_cache else None,
            ttl_seconds=config.ttl_seconds,
            sticky_seconds=config.sticky_seconds,
            failure_backoff_seconds=config.failure_backoff_seconds,
            attempt_timeout=config.attempt_timeout,
            budget_seconds=config.budget_seconds,
            transport=transport,
        )

    @property
    def endpoints(self) -> tuple[EndpointDescriptor, ...]:
        return self._endpoints

    async def collect(self, credential: str) -> QuotaStatus | None:
        """Return quota data for *credential*, or None if no endpoint answered."""
        fp = fingerprint(credential)
        now = self._clock()

        entry, failed_at = self._lookup(fp)
        if entry is not None and entry.is_fresh(now, self._ttl):
            logger.debug(
                "Quota cache hit (age %.1fs, endpoint %s)", entry.age(now), entry.endpoint_used,
            )
            return entry.payload

        if self._recently_failed(failed_at, now):
            logger.debug(
                "Skipping quota probe; all endpoints failed within %.0fs", self._failure_backoff,
            )
            return None

        endpoints = self._endpoints
        preferred: str | None = None
        if entry is not None and entry.is_fresh(now, self._sticky):
            preferred = entry.endpoint_used
            endpoints = mark_last_known_good(endpoints, preferred, entry.fetched_at)

        async with QuotaClient(timeout=self._attempt_timeout, transport=self._transport) as client:
            result = await probe_endpoints(
                client, endpoints, credential,
                preferred=preferred,
                attempt_timeout=self._attempt_timeout,
                budget_sec=self._budget,
            )

        finished = self._clock()
        if result is None:
            if self._failure_backoff > 0:
                self._memo[fp] = (entry, finished)
                self._save_failure(fp, finished)
            return None

        fresh = QuotaCacheEntry(
            credential_fingerprint=fp,
            endpoint_used=result.endpoint.name,
            payload=result.status,
            fetched_at=finished,
        )
        self._memo[fp] = (fresh, None)
        self._save(fresh)
        return result.status

    # ------------------------------------------------------------------
    # Cache persistence: I/O errors here never fail the lookup
    # ------------------------------------------------------------------

    def _lookup(self, fp: str) -> tuple[QuotaCacheEntry | None, float | None]:
        """Memoised entry and failure mark; the cache file is read at most once per credential."""
        if fp in self._memo:
            return self._memo[fp]
        slot: tuple[QuotaCacheEntry | None, float | None] = (None, None)
        if self._cache is not None:
            slot = self._cache.lookup(fp)
        self._memo[fp] = slot
        return slot

    def _recently_failed(self, failed_at: float | None, now: float) -> bool:
        if failed_at is None or self._failure_backoff <= 0:
            return False
        return 0 <= now - failed_at < self._failure_backoff

    def _save(self, entry: QuotaCacheEntry) -> None:
        if self._cache is None:
            return
        try:
            self._cache.store(entry)
        except OSError as exc:
            logger.debug("Could not write quota cache %s: %s", self._cache.path, exc)

    def _save_failure(self, fp: str, when: float) -> None:
        if self._cache is None:
            return
        try:
            self._cache.record_failure(fp, when)
        except OSError as exc:
            logger.debug("Could not write quota cache %s: %s", self._cache.path, exc)
