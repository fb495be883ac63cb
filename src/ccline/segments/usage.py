"""Usage segment — context-window consumption estimated from the session transcript."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ccline.segments.base import BaseSegment
from ccline.segments.model import context_limit
from ccline.types.segments import ContextUsage, SegmentId
from ccline.types.session import SessionContext

logger = logging.getLogger(__name__)

# Per-turn overhead for role markers and message framing.
TURN_OVERHEAD_TOKENS = 4
# Extra tokens charged for each tool_use / tool_result block.
TOOL_BLOCK_OVERHEAD_TOKENS = 10

_USAGE_FIELDS = (
    "input_tokens",
    "cache_creation_input_tokens",
    "cache_read_input_tokens",
    "output_tokens",
)


@dataclass(frozen=True, slots=True)
class TurnRecord:
    """One user or assistant record from a transcript."""

    role: str
    content: str | list[dict[str, Any]] = ""
    usage: dict[str, Any] | None = None
    model: str | None = None
    is_sidechain: bool = False


class TokenEstimator(Protocol):
    """Turns a sequence of transcript records into a token count."""

    def estimate(self, turns: Sequence[TurnRecord]) -> int:
        ...


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_record(entry: dict[str, Any]) -> TurnRecord | None:
    record_type = entry.get("type")
    if record_type not in ("user", "assistant"):
        return None
    message = entry.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content", "")
    if not isinstance(content, (str, list)):
        content = ""
    usage = message.get("usage")
    model = message.get("model")
    return TurnRecord(
        role=str(message.get("role") or record_type),
        content=content,
        usage=usage if isinstance(usage, dict) else None,
        model=model if isinstance(model, str) else None,
        is_sidechain=bool(entry.get("isSidechain", False)),
    )


def parse_transcript(path: Path) -> list[TurnRecord]:
    """Read a JSONL transcript and return its user/assistant records.

    Blank lines, undecodable lines and non-turn records (summaries, system
    entries) are skipped. Raises OSError if the file cannot be read.
    """
    turns: list[TurnRecord] = []
    skipped = 0
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                skipped += 1
                continue
            if not isinstance(entry, dict):
                skipped += 1
                continue
            record = _parse_record(entry)
            if record is not None:
                turns.append(record)
    if skipped:
        logger.debug("Skipped %d malformed lines in %s", skipped, path)
    return turns


# ---------------------------------------------------------------------------
# Estimators
# ---------------------------------------------------------------------------


def _text_tokens(text: str) -> int:
    return len(text) // 4


def estimate_turn_tokens(turn: TurnRecord) -> int:
    """Character-based estimate for one turn."""
    if isinstance(turn.content, str):
        return _text_tokens(turn.content) + TURN_OVERHEAD_TOKENS
    total = TURN_OVERHEAD_TOKENS
    for block in turn.content:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type == "text":
            total += _text_tokens(str(block.get("text", "")))
        elif block_type == "thinking":
            total += _text_tokens(str(block.get("thinking", "")))
        elif block_type == "tool_use":
            total += _text_tokens(json.dumps(block.get("input", {}))) + TOOL_BLOCK_OVERHEAD_TOKENS
        elif block_type == "tool_result":
            total += _text_tokens(str(block.get("content", ""))) + TOOL_BLOCK_OVERHEAD_TOKENS
        else:
            total += _text_tokens(json.dumps(block))
    return total


def reported_tokens(usage: dict[str, Any]) -> int:
    """Sum the token counters of a reported usage block."""
    total = 0
    for name in _USAGE_FIELDS:
        value = usage.get(name)
        if isinstance(value, int) and not isinstance(value, bool):
            total += value
    return total


class HeuristicEstimator:
    """Sums a character-based estimate over every turn."""

    def estimate(self, turns: Sequence[TurnRecord]) -> int:
        return sum(estimate_turn_tokens(turn) for turn in turns)


class ReportedUsageEstimator:
    """Uses the usage block of the latest main-thread assistant turn.

    Each assistant turn reports the full prompt it was given, so the latest
    one reflects the current context size. Falls back to *fallback* when no
    turn carries usage.
    """

    def __init__(self, fallback: TokenEstimator | None = None) -> None:
        self._fallback = fallback or HeuristicEstimator()

    def estimate(self, turns: Sequence[TurnRecord]) -> int:
        for turn in reversed(turns):
            if turn.role != "assistant" or turn.is_sidechain or not turn.usage:
                continue
            tokens = reported_tokens(turn.usage)
            if tokens > 0:
                return tokens
        return self._fallback.estimate(turns)


def calculate_usage(
    path: Path,
    model_id: str,
    estimator: TokenEstimator | None = None,
) -> ContextUsage | None:
    """Estimate context consumption for the transcript at *path*.

    Returns None when the transcript is missing, unreadable or holds no
    turn records.
    """
    try:
        turns = parse_transcript(path)
    except OSError as exc:
        logger.debug("Cannot read transcript %s: %s", path, exc)
        return None
    if not turns:
        return None

    if not model_id:
        model_id = next((t.model for t in reversed(turns) if t.model), "")
    tokens = (estimator or ReportedUsageEstimator()).estimate(turns)
    return ContextUsage(tokens=tokens, limit=context_limit(model_id))


class UsageSegment(BaseSegment):
    """Shows context-window usage as a percentage of the model's limit."""

    def __init__(self, estimator: TokenEstimator | None = None) -> None:
        self._estimator = estimator or ReportedUsageEstimator()

    @property
    def id(self) -> SegmentId:
        return SegmentId.USAGE

    async def collect(self, ctx: SessionContext) -> ContextUsage | None:
        if ctx.transcript_path is None:
            return None
        return await asyncio.to_thread(
            calculate_usage, ctx.transcript_path, ctx.model_id, self._estimator,
        )
