"""Tests for the payload-fed segments."""

from __future__ import annotations

from pathlib import Path

import pytest

from ccline.segments.directory import DirectorySegment
from ccline.segments.session import CostSegment, OutputStyleSegment, TimeSegment
from ccline.types.segments import DirectoryInfo, OutputStyleInfo, SessionCost, SessionTime
from ccline.types.session import SessionContext


class TestDirectorySegment:
    @pytest.mark.asyncio
    async def test_last_component(self):
        ctx = SessionContext(cwd=Path("/home/user/my-project"))
        assert await DirectorySegment().collect(ctx) == DirectoryInfo(
            path=Path("/home/user/my-project"), name="my-project",
        )

    @pytest.mark.asyncio
    async def test_root(self):
        info = await DirectorySegment().collect(SessionContext(cwd=Path("/")))
        assert info.name == "/"


class TestSessionSegments:
    @pytest.mark.asyncio
    async def test_time(self, tmp_path: Path):
        ctx = SessionContext(cwd=tmp_path, duration_ms=90_000)
        assert await TimeSegment().collect(ctx) == SessionTime(duration_ms=90_000)

    @pytest.mark.asyncio
    async def test_cost(self, tmp_path: Path):
        ctx = SessionContext(cwd=tmp_path, cost_usd=0.42)
        assert await CostSegment().collect(ctx) == SessionCost(total_usd=0.42)

    @pytest.mark.asyncio
    async def test_output_style(self, tmp_path: Path):
        ctx = SessionContext(cwd=tmp_path, output_style="Learning")
        assert await OutputStyleSegment().collect(ctx) == OutputStyleInfo(name="Learning")

    @pytest.mark.asyncio
    async def test_missing_values(self, tmp_path: Path):
        ctx = SessionContext(cwd=tmp_path)
        assert await TimeSegment().collect(ctx) is None
        assert await CostSegment().collect(ctx) is None
        assert await OutputStyleSegment().collect(ctx) is None

    @pytest.mark.asyncio
    async def test_negative_values(self, tmp_path: Path):
        ctx = SessionContext(cwd=tmp_path, duration_ms=-1, cost_usd=-0.5)
        assert await TimeSegment().collect(ctx) is None
        assert await CostSegment().collect(ctx) is None
