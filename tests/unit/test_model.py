"""Tests for the model normalizer and ModelSegment."""

from __future__ import annotations

from pathlib import Path

import pytest

from ccline.segments.model import (
    DEFAULT_CONTEXT_LIMIT,
    EXTENDED_CONTEXT_LIMIT,
    ModelSegment,
    context_limit,
    normalize_model_name,
)
from ccline.types.segments import ModelLabel
from ccline.types.session import SessionContext


class TestNormalize:
    @pytest.mark.parametrize("raw, expected", [
        ("claude-sonnet-4-20250514", "Sonnet 4"),
        ("claude-opus-4-1-20250805", "Opus 4.1"),
        ("claude-sonnet-4-5", "Sonnet 4.5"),
        ("claude-haiku-4-5-20251001", "Haiku 4.5"),
        ("claude-3-5-sonnet-20241022", "Sonnet 3.5"),
        ("claude-3-5-haiku-latest", "Haiku 3.5"),
        ("claude-3-opus-20240229", "Opus 3"),
        ("claude-3-7-sonnet-20250219", "Sonnet 3.7"),
    ])
    def test_claude_ids(self, raw: str, expected: str):
        assert normalize_model_name(raw) == expected

    @pytest.mark.parametrize("raw, expected", [
        ("us.anthropic.claude-sonnet-4-20250514-v1:0", "Sonnet 4"),
        ("anthropic/claude-opus-4-1", "Opus 4.1"),
        ("claude-sonnet-4@20250514", "Sonnet 4"),
        ("claude-sonnet-4-5-20250929[1m]", "Sonnet 4.5"),
        ("CLAUDE-OPUS-4", "Opus 4"),
    ])
    def test_provider_variants(self, raw: str, expected: str):
        assert normalize_model_name(raw) == expected

    @pytest.mark.parametrize("raw, expected", [
        ("glm-4.5", "GLM 4.5"),
        ("glm-4.5-air", "GLM 4.5 Air"),
        ("kimi-k2-turbo-preview", "Kimi K2 Turbo"),
        ("kimi-k2-0905", "Kimi K2"),
        ("deepseek-reasoner", "DeepSeek R1"),
        ("qwen3-coder-plus", "Qwen3 Coder Plus"),
        ("claude-2-1", "Claude 2.1"),
    ])
    def test_table_entries(self, raw: str, expected: str):
        assert normalize_model_name(raw) == expected

    @pytest.mark.parametrize("raw", ["gpt-4o", "some-custom-model", "o3"])
    def test_unknown_passes_through(self, raw: str):
        assert normalize_model_name(raw) == raw

    def test_unusual_claude_falls_back_to_family(self):
        assert normalize_model_name("claude-sonnet-experimental") == "Sonnet"

    def test_empty(self):
        assert normalize_model_name("") == ""


class TestContextLimit:
    def test_default(self):
        assert context_limit("claude-sonnet-4") == DEFAULT_CONTEXT_LIMIT
        assert context_limit("unknown-model") == DEFAULT_CONTEXT_LIMIT

    def test_extended_context_suffix(self):
        assert context_limit("claude-sonnet-4-5[1m]") == EXTENDED_CONTEXT_LIMIT

    def test_table(self):
        assert context_limit("glm-4.5") == 128_000


class TestModelSegment:
    @pytest.mark.asyncio
    async def test_normalizes(self, tmp_path: Path):
        ctx = SessionContext(cwd=tmp_path, model_id="claude-opus-4-1-20250805")
        assert await ModelSegment().collect(ctx) == ModelLabel(
            model_id="claude-opus-4-1-20250805", display_name="Opus 4.1",
        )

    @pytest.mark.asyncio
    async def test_unknown_id_uses_host_display_name(self, tmp_path: Path):
        ctx = SessionContext(cwd=tmp_path, model_id="mystery-1", model_display_name="Mystery")
        label = await ModelSegment().collect(ctx)
        assert label is not None
        assert label.display_name == "Mystery"

    @pytest.mark.asyncio
    async def test_unknown_id_without_display_name(self, tmp_path: Path):
        ctx = SessionContext(cwd=tmp_path, model_id="mystery-1")
        label = await ModelSegment().collect(ctx)
        assert label is not None
        assert label.display_name == "mystery-1"

    @pytest.mark.asyncio
    async def test_no_model(self, tmp_path: Path):
        assert await ModelSegment().collect(SessionContext(cwd=tmp_path)) is None
