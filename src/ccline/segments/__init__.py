"""Segment collectors for ccline.

Public surface
--------------
- :class:`BaseSegment`      — abstract collector
- :class:`SegmentManager`   — registry that runs collectors in isolation
- :func:`normalize_model_name` / :func:`context_limit` — model name table
- :func:`calculate_usage`   — transcript context-usage estimate
- :class:`GitBackend`       — capability interface for repository state
"""

from __future__ import annotations

from ccline.segments.base import BaseSegment
from ccline.segments.directory import DirectorySegment
from ccline.segments.git import GitBackend, GitSegment, SubprocessGit, parse_porcelain_v2
from ccline.segments.manager import SegmentManager
from ccline.segments.model import ModelSegment, context_limit, normalize_model_name
from ccline.segments.quota import QuotaSegment
from ccline.segments.session import CostSegment, OutputStyleSegment, TimeSegment
from ccline.segments.usage import (
    HeuristicEstimator,
    ReportedUsageEstimator,
    TokenEstimator,
    UsageSegment,
    calculate_usage,
)

__all__ = [
    "BaseSegment",
    "CostSegment",
    "DirectorySegment",
    "GitBackend",
    "GitSegment",
    "HeuristicEstimator",
    "ModelSegment",
    "OutputStyleSegment",
    "QuotaSegment",
    "ReportedUsageEstimator",
    "SegmentManager",
    "SubprocessGit",
    "TimeSegment",
    "TokenEstimator",
    "UsageSegment",
    "calculate_usage",
    "context_limit",
    "normalize_model_name",
    "parse_porcelain_v2",
]
