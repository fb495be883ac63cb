"""Type definitions for ccline."""

from ccline.types.config import DEFAULT_SEGMENTS, QuotaConfig, StatusConfig
from ccline.types.quota import EndpointDescriptor, ProbeResult, QuotaCacheEntry
from ccline.types.segments import (
    ContextUsage,
    DirectoryInfo,
    GitStatus,
    ModelLabel,
    OutputStyleInfo,
    QuotaStatus,
    SegmentId,
    SegmentValue,
    SegmentValues,
    SessionCost,
    SessionTime,
)
from ccline.types.session import SessionContext
from ccline.types.theme import SegmentStyle, Theme

__all__ = [
    "DEFAULT_SEGMENTS",
    "ContextUsage",
    "DirectoryInfo",
    "EndpointDescriptor",
    "GitStatus",
    "ModelLabel",
    "OutputStyleInfo",
    "ProbeResult",
    "QuotaCacheEntry",
    "QuotaConfig",
    "QuotaStatus",
    "SegmentId",
    "SegmentStyle",
    "SegmentValue",
    "SegmentValues",
    "SessionContext",
    "SessionCost",
    "SessionTime",
    "StatusConfig",
    "Theme",
]
