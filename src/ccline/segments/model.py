"""Model segment and the model-name normalizer."""

from __future__ import annotations

import re

from ccline.segments.base import BaseSegment
from ccline.types.segments import ModelLabel, SegmentId
from ccline.types.session import SessionContext

# ---------------------------------------------------------------------------
# Display names
# ---------------------------------------------------------------------------

# Exact matches on the cleaned identifier. Claude ids that follow the usual
# naming scheme are handled by the patterns below and need no entry here.
MODEL_NAMES: dict[str, str] = {
    "claude-instant-1": "Claude Instant",
    "claude-2": "Claude 2",
    "claude-2-1": "Claude 2.1",
    "glm-4.5": "GLM 4.5",
    "glm-4.5-air": "GLM 4.5 Air",
    "kimi-k2-turbo-preview": "Kimi K2 Turbo",
    "kimi-k2": "Kimi K2",
    "qwen3-coder-plus": "Qwen3 Coder Plus",
    "qwen3-coder": "Qwen3 Coder",
    "deepseek-chat": "DeepSeek V3",
    "deepseek-reasoner": "DeepSeek R1",
}

_FAMILIES = ("opus", "sonnet", "haiku")

# claude-sonnet-4, claude-opus-4-1, claude-haiku-4-5
_FAMILY_FIRST = re.compile(r"^claude-(opus|sonnet|haiku)-(\d+)(?:-(\d+))?$")
# claude-3-5-sonnet, claude-3-opus
_VERSION_FIRST = re.compile(r"^claude-(\d+)(?:-(\d+))?-(opus|sonnet|haiku)$")

_DATE_SUFFIX = re.compile(r"-(\d{8}|latest)$")
_BRACKET_SUFFIX = re.compile(r"\[[^\]]*\]$")
_BEDROCK_SUFFIX = re.compile(r"-v\d+(:\d+)?$")

# ---------------------------------------------------------------------------
# Context limits
# ---------------------------------------------------------------------------

DEFAULT_CONTEXT_LIMIT = 200_000
EXTENDED_CONTEXT_LIMIT = 1_000_000

# Keyed by normalized display name; unlisted names get DEFAULT_CONTEXT_LIMIT.
CONTEXT_LIMITS: dict[str, int] = {
    "Claude Instant": 100_000,
    "Claude 2": 100_000,
    "GLM 4.5": 128_000,
    "GLM 4.5 Air": 128_000,
    "Kimi K2": 128_000,
    "Kimi K2 Turbo": 128_000,
    "Qwen3 Coder": 256_000,
    "Qwen3 Coder Plus": 1_000_000,
    "DeepSeek V3": 128_000,
    "DeepSeek R1": 128_000,
}


def _clean(raw: str) -> str:
    """Lowercase and strip provider prefixes, date and bracket suffixes."""
    model = raw.strip().lower()
    model = _BRACKET_SUFFIX.sub("", model)
    # Bedrock/Vertex style: "us.anthropic.claude-sonnet-4-20250514-v1:0"
    idx = model.find("claude-")
    if idx > 0:
        model = model[idx:]
    model = model.rsplit("/", 1)[-1]
    model = _BEDROCK_SUFFIX.sub("", model)
    model = _DATE_SUFFIX.sub("", model)
    model = model.replace("@", "-")
    return _DATE_SUFFIX.sub("", model)


def _version(major: str, minor: str | None) -> str:
    return f"{major}.{minor}" if minor else major


def normalize_model_name(raw: str) -> str:
    """Map a raw model identifier to a short display label.

    Unrecognized identifiers are returned unchanged.

    >>> normalize_model_name("claude-sonnet-4-20250514")
    'Sonnet 4'
    >>> normalize_model_name("claude-3-5-haiku-20241022")
    'Haiku 3.5'
    >>> normalize_model_name("gpt-4o")
    'gpt-4o'
    """
    if not raw:
        return raw
    model = _clean(raw)

    if model in MODEL_NAMES:
        return MODEL_NAMES[model]

    if m := _FAMILY_FIRST.match(model):
        family, major, minor = m.groups()
        return f"{family.capitalize()} {_version(major, minor)}"
    if m := _VERSION_FIRST.match(model):
        major, minor, family = m.groups()
        return f"{family.capitalize()} {_version(major, minor)}"

    # Longest table prefix, for variants like "kimi-k2-0905".
    for key in sorted(MODEL_NAMES, key=len, reverse=True):
        if model.startswith(key + "-"):
            return MODEL_NAMES[key]

    if model.startswith("claude"):
        for family in _FAMILIES:
            if family in model:
                return family.capitalize()

    return raw


def context_limit(model_id: str) -> int:
    """Return the context window size for *model_id*."""
    if "[1m]" in model_id.lower():
        return EXTENDED_CONTEXT_LIMIT
    return CONTEXT_LIMITS.get(normalize_model_name(model_id), DEFAULT_CONTEXT_LIMIT)


class ModelSegment(BaseSegment):
    """Shows the short name of the active model."""

    @property
    def id(self) -> SegmentId:
        return SegmentId.MODEL

    async def collect(self, ctx: SessionContext) -> ModelLabel | None:
        if not ctx.model_id:
            if ctx.model_display_name:
                return ModelLabel(model_id="", display_name=ctx.model_display_name)
            return None
        name = normalize_model_name(ctx.model_id)
        if name == ctx.model_id and ctx.model_display_name:
            name = ctx.model_display_name
        return ModelLabel(model_id=ctx.model_id, display_name=name)
