"""Configuration types for ccline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ccline.types.quota import EndpointDescriptor
from ccline.types.segments import SegmentId

DEFAULT_SEGMENTS: tuple[SegmentId, ...] = (
    SegmentId.MODEL,
    SegmentId.DIRECTORY,
    SegmentId.GIT,
    SegmentId.USAGE,
    SegmentId.QUOTA,
)


@dataclass(frozen=True, slots=True)
class QuotaConfig:
    """Settings for the quota monitor.

    ``endpoints`` of ``None`` means the built-in endpoint set.
    """

    enabled: bool = True
    ttl_seconds: float = 60.0
    sticky_seconds: float = 86_400.0
    attempt_timeout: float = 2.0
    budget_seconds: float = 4.0
    failure_backoff_seconds: float = 15.0
    use_disk_cache: bool = True
    endpoints: tuple[EndpointDescriptor, ...] | None = None
    cache_path: Path | None = None


@dataclass(frozen=True, slots=True)
class StatusConfig:
    """Resolved configuration for one invocation."""

    segments: tuple[SegmentId, ...] = DEFAULT_SEGMENTS
    theme: str = "default"
    nerd_font: bool = False
    show_sha: bool = False
    git_timeout: float = 2.0
    quota: QuotaConfig = field(default_factory=QuotaConfig)
