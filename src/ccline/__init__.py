"""ccline — status line for coding-assistant sessions.

Usage:
    import asyncio
    from pathlib import Path

    import ccline

    ctx = ccline.SessionContext(cwd=Path.cwd(), model_id="claude-sonnet-4")
    line = asyncio.run(ccline.StatusPipeline().render(ctx))
"""

import logging

from ccline.core.config import resolve_config
from ccline.core.pipeline import StatusPipeline, build_context
from ccline.segments.model import normalize_model_name
from ccline.segments.usage import calculate_usage
from ccline.types.config import QuotaConfig, StatusConfig
from ccline.types.segments import SegmentId, SegmentValue, SegmentValues
from ccline.types.session import SessionContext
from ccline.types.theme import SegmentStyle, Theme

logging.getLogger("ccline").addHandler(logging.NullHandler())

__version__ = "0.3.0"

__all__ = [
    # Core API
    "StatusPipeline",
    "build_context",
    "resolve_config",
    # Helpers
    "calculate_usage",
    "normalize_model_name",
    # Types
    "QuotaConfig",
    "SegmentId",
    "SegmentStyle",
    "SegmentValue",
    "SegmentValues",
    "SessionContext",
    "StatusConfig",
    "Theme",
]
