"""Tests for transcript parsing and the usage calculator."""

from __future__ import annotations

from pathlib import Path

import pytest

from ccline.segments.usage import (
    TOOL_BLOCK_OVERHEAD_TOKENS,
    TURN_OVERHEAD_TOKENS,
    HeuristicEstimator,
    ReportedUsageEstimator,
    TurnRecord,
    UsageSegment,
    calculate_usage,
    estimate_turn_tokens,
    parse_transcript,
    reported_tokens,
)
from ccline.types.segments import ContextUsage
from ccline.types.session import SessionContext

_USAGE_120K = {
    "input_tokens": 100_000,
    "cache_creation_input_tokens": 5_000,
    "cache_read_input_tokens": 10_000,
    "output_tokens": 5_000,
}


class TestParseTranscript:
    def test_keeps_user_and_assistant(self, write_transcript, records):
        path = write_transcript([
            {"type": "summary", "summary": "earlier work"},
            records.user("hello"),
            records.assistant({"input_tokens": 10}),
            {"type": "system", "content": "compacted"},
        ])
        turns = parse_transcript(path)
        assert [t.role for t in turns] == ["user", "assistant"]
        assert turns[1].usage == {"input_tokens": 10}
        assert turns[1].model == "claude-sonnet-4-20250514"

    def test_skips_malformed_lines(self, write_transcript, records):
        path = write_transcript([
            "{truncated",
            "",
            "[1, 2, 3]",
            records.user("hi"),
            '{"type": "assistant", "message": "not a dict"}',
        ])
        turns = parse_transcript(path)
        assert len(turns) == 1
        assert turns[0].content == "hi"

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(OSError):
            parse_transcript(tmp_path / "missing.jsonl")


class TestEstimators:
    def test_reported_tokens_sums_counters(self):
        assert reported_tokens(_USAGE_120K) == 120_000

    def test_reported_tokens_ignores_junk(self):
        assert reported_tokens({"input_tokens": "12", "output_tokens": True, "extra": 5}) == 0

    def test_turn_estimate_text(self):
        turn = TurnRecord(role="user", content="x" * 400)
        assert estimate_turn_tokens(turn) == 100 + TURN_OVERHEAD_TOKENS

    def test_turn_estimate_tool_blocks(self):
        turn = TurnRecord(role="assistant", content=[
            {"type": "text", "text": "a" * 40},
            {"type": "tool_use", "name": "Read", "input": {}},
            {"type": "tool_result", "content": "b" * 80},
        ])
        expected = TURN_OVERHEAD_TOKENS + 10 + (0 + TOOL_BLOCK_OVERHEAD_TOKENS) + (
            20 + TOOL_BLOCK_OVERHEAD_TOKENS
        )
        assert estimate_turn_tokens(turn) == expected

    def test_heuristic_sums_turns(self):
        turns = [TurnRecord(role="user", content="x" * 40)] * 3
        assert HeuristicEstimator().estimate(turns) == 3 * (10 + TURN_OVERHEAD_TOKENS)

    def test_reported_uses_latest_main_thread_turn(self):
        turns = [
            TurnRecord(role="assistant", usage={"input_tokens": 1_000}),
            TurnRecord(role="assistant", usage={"input_tokens": 2_000}),
            TurnRecord(role="assistant", usage={"input_tokens": 99_999}, is_sidechain=True),
            TurnRecord(role="user", content="next"),
        ]
        assert ReportedUsageEstimator().estimate(turns) == 2_000

    def test_reported_falls_back_without_usage(self):
        turns = [TurnRecord(role="user", content="x" * 40)]
        assert ReportedUsageEstimator().estimate(turns) == 10 + TURN_OVERHEAD_TOKENS


class TestCalculateUsage:
    def test_sixty_percent(self, write_transcript, records):
        path = write_transcript([records.user("go"), records.assistant(_USAGE_120K)])
        usage = calculate_usage(path, "claude-sonnet-4-20250514")
        assert usage == ContextUsage(tokens=120_000, limit=200_000)
        assert usage.percent == 60

    def test_model_taken_from_transcript(self, write_transcript, records):
        path = write_transcript([records.assistant({"input_tokens": 64_000}, model="glm-4.5")])
        usage = calculate_usage(path, "")
        assert usage is not None
        assert usage.limit == 128_000
        assert usage.percent == 50

    def test_missing_file(self, tmp_path: Path):
        assert calculate_usage(tmp_path / "nope.jsonl", "claude-sonnet-4") is None

    def test_only_garbage(self, write_transcript):
        path = write_transcript(["not json", "{}", '{"type": "summary"}'])
        assert calculate_usage(path, "claude-sonnet-4") is None

    def test_custom_estimator(self, write_transcript, records):
        class Fixed:
            def estimate(self, turns):
                return 50_000

        path = write_transcript([records.user("hi")])
        usage = calculate_usage(path, "claude-sonnet-4", estimator=Fixed())
        assert usage == ContextUsage(tokens=50_000, limit=200_000)


class TestUsageSegment:
    @pytest.mark.asyncio
    async def test_collect(self, tmp_path: Path, write_transcript, records):
        path = write_transcript([records.assistant(_USAGE_120K)])
        ctx = SessionContext(cwd=tmp_path, model_id="claude-sonnet-4", transcript_path=path)
        usage = await UsageSegment().collect(ctx)
        assert usage is not None
        assert usage.percent == 60

    @pytest.mark.asyncio
    async def test_no_transcript(self, tmp_path: Path):
        assert await UsageSegment().collect(SessionContext(cwd=tmp_path)) is None
