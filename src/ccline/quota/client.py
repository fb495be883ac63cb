"""QuotaClient — httpx-based client for the accounting API."""

from __future__ import annotations

import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from ccline.types.quota import EndpointDescriptor
from ccline.types.segments import QuotaStatus

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 2.0


class QuotaFetchError(Exception):
    """One endpoint failed to produce a usable quota answer."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"{endpoint}: {reason}")
        self.endpoint = endpoint
        self.reason = reason


def parse_quota_response(data: Any, endpoint: str) -> QuotaStatus:
    """Validate a decoded response body and build a QuotaStatus.

    ``daily_spent_usd`` may be a decimal string or a number;
    ``opus_enabled`` must be a boolean. Extra fields are ignored.
    """
    if not isinstance(data, dict):
        raise QuotaFetchError(endpoint, "response body is not an object")

    raw_spent = data.get("daily_spent_usd")
    if isinstance(raw_spent, bool) or not isinstance(raw_spent, (str, int, float)):
        raise QuotaFetchError(endpoint, "missing or invalid daily_spent_usd")
    try:
        spent = Decimal(str(raw_spent).strip())
    except InvalidOperation:
        raise QuotaFetchError(endpoint, f"unparseable daily_spent_usd {raw_spent!r}") from None
    if not spent.is_finite():
        raise QuotaFetchError(endpoint, f"non-finite daily_spent_usd {raw_spent!r}")

    opus = data.get("opus_enabled")
    if not isinstance(opus, bool):
        raise QuotaFetchError(endpoint, "missing or invalid opus_enabled")

    return QuotaStatus(daily_spent=spent, opus_available=opus, endpoint_used=endpoint)


class QuotaClient:
    """Queries one endpoint at a time with a short, fixed timeout.

    Use as an async context manager to share one connection pool across
    endpoint attempts::

        async with QuotaClient(timeout=2.0) as client:
            status = await client.fetch(endpoint, api_key)

    ``fetch`` also works outside the context manager with a short-lived client.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> QuotaClient:
        self._client = self._make_client()
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    @staticmethod
    def _headers(credential: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {credential}",
            "Accept": "*/*",
            "Content-Type": "application/json",
        }

    async def _get(self, url: str, credential: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, headers=self._headers(credential))
        async with self._make_client() as c:
            return await c.get(url, headers=self._headers(credential))

    async def fetch(self, endpoint: EndpointDescriptor, credential: str) -> QuotaStatus:
        """Query *endpoint*. Raises QuotaFetchError on any failure."""
        started = time.monotonic()
        try:
            resp = await self._get(endpoint.url, credential)
        except httpx.HTTPError as exc:
            raise QuotaFetchError(endpoint.name, f"{type(exc).__name__}: {exc}") from exc

        elapsed_ms = (time.monotonic() - started) * 1000
        if resp.status_code != 200:
            raise QuotaFetchError(endpoint.name, f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise QuotaFetchError(endpoint.name, "response body is not JSON") from exc

        status = parse_quota_response(data, endpoint.name)
        logger.debug("Quota endpoint %s answered in %.0fms", endpoint.name, elapsed_ms)
        return status
