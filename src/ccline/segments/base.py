"""Base segment class with shared logic."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ccline.types.segments import SegmentId, SegmentValue
from ccline.types.session import SessionContext


class BaseSegment(ABC):
    """Base class for all segment collectors.

    ``collect`` returns ``None`` when the segment's data is unavailable.
    It may also raise; the manager converts exceptions to ``None``.
    """

    @property
    @abstractmethod
    def id(self) -> SegmentId:
        ...

    @abstractmethod
    async def collect(self, ctx: SessionContext) -> SegmentValue | None:
        ...
