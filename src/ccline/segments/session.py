"""Segments fed directly by the host payload: time, cost and output style."""

from __future__ import annotations

from ccline.segments.base import BaseSegment
from ccline.types.segments import OutputStyleInfo, SegmentId, SessionCost, SessionTime
from ccline.types.session import SessionContext


class TimeSegment(BaseSegment):
    """Session wall-clock duration."""

    @property
    def id(self) -> SegmentId:
        return SegmentId.TIME

    async def collect(self, ctx: SessionContext) -> SessionTime | None:
        if ctx.duration_ms is None or ctx.duration_ms < 0:
            return None
        return SessionTime(duration_ms=ctx.duration_ms)


class CostSegment(BaseSegment):
    """Session cost in USD."""

    @property
    def id(self) -> SegmentId:
        return SegmentId.COST

    async def collect(self, ctx: SessionContext) -> SessionCost | None:
        if ctx.cost_usd is None or ctx.cost_usd < 0:
            return None
        return SessionCost(total_usd=ctx.cost_usd)


class OutputStyleSegment(BaseSegment):
    @property
    def id(self) -> SegmentId:
        return SegmentId.OUTPUT_STYLE

    async def collect(self, ctx: SessionContext) -> OutputStyleInfo | None:
        if not ctx.output_style:
            return None
        return OutputStyleInfo(name=ctx.output_style)
