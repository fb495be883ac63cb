"""SegmentManager — registry and failure-isolating dispatcher for segment collectors."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from ccline.quota.monitor import QuotaMonitor
from ccline.segments.base import BaseSegment
from ccline.segments.directory import DirectorySegment
from ccline.segments.git import GitBackend, GitSegment, SubprocessGit
from ccline.segments.model import ModelSegment
from ccline.segments.quota import QuotaSegment
from ccline.segments.session import CostSegment, OutputStyleSegment, TimeSegment
from ccline.segments.usage import TokenEstimator, UsageSegment
from ccline.types.segments import SegmentId, SegmentValue, SegmentValues
from ccline.types.session import SessionContext

logger = logging.getLogger(__name__)


class SegmentManager:
    """Registers segment collectors and runs them in isolation.

    Usage::

        manager = SegmentManager()
        manager.register_defaults()
        values = await manager.collect_all([SegmentId.MODEL, SegmentId.GIT], ctx)
    """

    def __init__(self) -> None:
        self._registry: dict[SegmentId, BaseSegment] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, segment: BaseSegment) -> None:
        """Add a collector, replacing any previous one for the same kind."""
        self._registry[segment.id] = segment

    def register_defaults(
        self,
        *,
        git_backend: GitBackend | None = None,
        quota_monitor: QuotaMonitor | None = None,
        estimator: TokenEstimator | None = None,
        show_sha: bool = False,
    ) -> None:
        """Create and register the eight built-in collectors."""
        for segment in (
            DirectorySegment(),
            GitSegment(git_backend or SubprocessGit(), show_sha=show_sha),
            ModelSegment(),
            UsageSegment(estimator),
            QuotaSegment(quota_monitor),
            TimeSegment(),
            CostSegment(),
            OutputStyleSegment(),
        ):
            self.register(segment)

    def get(self, segment_id: SegmentId) -> BaseSegment | None:
        return self._registry.get(segment_id)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def collect(self, segment_id: SegmentId, ctx: SessionContext) -> SegmentValue | None:
        """Run one collector. Any exception is logged and reported as unavailable."""
        segment = self._registry.get(segment_id)
        if segment is None:
            logger.debug("No collector registered for %s", segment_id.value)
            return None
        try:
            return await segment.collect(ctx)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Segment %s failed: %s", segment_id.value, exc, exc_info=True)
            return None

    async def collect_all(
        self,
        segment_ids: Iterable[SegmentId],
        ctx: SessionContext,
    ) -> SegmentValues:
        """Run the collectors for *segment_ids* concurrently.

        Each collector fills only its own slot; a failing collector leaves
        ``None`` in its slot without affecting the others.
        """
        ids = list(dict.fromkeys(segment_ids))
        results = await asyncio.gather(*(self.collect(sid, ctx) for sid in ids))
        return dict(zip(ids, results))

    def __len__(self) -> int:
        return len(self._registry)

    def __contains__(self, segment_id: object) -> bool:
        return segment_id in self._registry

    def __repr__(self) -> str:
        return f"SegmentManager(segments={sorted(s.value for s in self._registry)})"
