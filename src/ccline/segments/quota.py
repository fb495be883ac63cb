"""Quota segment — daily spend and Opus availability from the accounting API."""

from __future__ import annotations

from ccline.quota.monitor import QuotaMonitor
from ccline.segments.base import BaseSegment
from ccline.types.segments import QuotaStatus, SegmentId
from ccline.types.session import SessionContext


class QuotaSegment(BaseSegment):
    """Shows quota data; unavailable without a credential."""

    def __init__(self, monitor: QuotaMonitor | None = None) -> None:
        self._monitor = monitor or QuotaMonitor()

    @property
    def id(self) -> SegmentId:
        return SegmentId.QUOTA

    async def collect(self, ctx: SessionContext) -> QuotaStatus | None:
        if not ctx.credential:
            return None
        return await self._monitor.collect(ctx.credential)
