"""Directory segment — the session's working directory."""

from __future__ import annotations

from ccline.segments.base import BaseSegment
from ccline.types.segments import DirectoryInfo, SegmentId
from ccline.types.session import SessionContext


class DirectorySegment(BaseSegment):
    """Shows the last component of the working directory."""

    @property
    def id(self) -> SegmentId:
        return SegmentId.DIRECTORY

    async def collect(self, ctx: SessionContext) -> DirectoryInfo:
        return DirectoryInfo(path=ctx.cwd, name=ctx.cwd.name or str(ctx.cwd))
