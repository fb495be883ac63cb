"""Shared fixtures: isolated environment, fake git backend, transcripts, fake quota API."""

from __future__ import annotations

import asyncio
import json
import os
from collections import Counter
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from ccline.types.segments import GitStatus

_ENV_PREFIXES = ("CCLINE_", "PACKYCODE_", "ANTHROPIC_")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point HOME at a scratch directory and drop credential/config env vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    return home


class FakeGitBackend:
    """A scripted GitBackend.

    Usage:
        backend = FakeGitBackend(GitStatus(branch="main", dirty=True, ahead=1))
    """

    def __init__(self, status: GitStatus | None = None, error: Exception | None = None):
        self.status = status
        self.error = error
        self.calls: list[Path] = []

    async def query_status(self, path: Path) -> GitStatus | None:
        self.calls.append(path)
        if self.error is not None:
            raise self.error
        return self.status


@pytest.fixture
def fake_git() -> FakeGitBackend:
    return FakeGitBackend(GitStatus(branch="main", dirty=True, ahead=1, sha="abc1234"))


@pytest.fixture
def write_transcript(tmp_path: Path) -> Callable[..., Path]:
    """Write JSONL transcript records (dicts or raw strings) and return the path."""

    def _write(records: list[Any], name: str = "transcript.jsonl") -> Path:
        path = tmp_path / name
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


def assistant_record(usage: dict[str, int] | None = None, *, text: str = "ok",
                     model: str = "claude-sonnet-4-20250514",
                     sidechain: bool = False) -> dict[str, Any]:
    message: dict[str, Any] = {
        "role": "assistant",
        "model": model,
        "content": [{"type": "text", "text": text}],
    }
    if usage is not None:
        message["usage"] = usage
    return {"type": "assistant", "isSidechain": sidechain, "message": message}


def user_record(text: str) -> dict[str, Any]:
    return {"type": "user", "message": {"role": "user", "content": text}}


@pytest.fixture
def records() -> Any:
    """Builders for transcript records."""

    class _Records:
        assistant = staticmethod(assistant_record)
        user = staticmethod(user_record)

    return _Records


class FakeQuotaAPI:
    """In-process accounting API served through httpx.MockTransport.

    Each host can be set to answer normally, fail with an HTTP status,
    return a malformed body or stall. Requests are counted per host.
    """

    MAIN = "www.packycode.com"
    SHARE = "share.packycode.com"

    def __init__(self) -> None:
        self.calls: Counter[str] = Counter()
        self.auth_headers: list[str] = []
        self.behaviour: dict[str, Any] = {}
        self.body: dict[str, Any] = {"daily_spent_usd": "88.48", "opus_enabled": True}

    def set(self, host: str, behaviour: Any) -> None:
        """*behaviour*: "ok", an int status, "garbage", "connect-error" or ("sleep", secs)."""
        self.behaviour[host] = behaviour

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.calls[host] += 1
        self.auth_headers.append(request.headers.get("Authorization", ""))
        behaviour = self.behaviour.get(host, "ok")
        if isinstance(behaviour, tuple) and behaviour[0] == "sleep":
            await asyncio.sleep(behaviour[1])
            behaviour = "ok"
        if isinstance(behaviour, int):
            return httpx.Response(behaviour, json={"error": "unavailable"})
        if behaviour == "garbage":
            return httpx.Response(200, text="<html>not json</html>")
        if behaviour == "connect-error":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


@pytest.fixture
def quota_api() -> FakeQuotaAPI:
    return FakeQuotaAPI()


class FakeClock:
    def __init__(self, start: float = 1_760_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
