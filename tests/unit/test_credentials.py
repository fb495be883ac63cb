"""Tests for credential resolution."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ccline.core.credentials import (
    default_sources,
    env_source,
    fingerprint,
    is_valid_key,
    key_file_source,
    resolve_credential,
    settings_source,
)


class TestValidity:
    @pytest.mark.parametrize("key", ["sk-abc123", "pk_live_XYZ"])
    def test_valid(self, key: str):
        assert is_valid_key(key)

    @pytest.mark.parametrize("key", [None, "", "has space", "tab\tkey", "nl\n", "bell\x07"])
    def test_invalid(self, key: str | None):
        assert not is_valid_key(key)


class TestFingerprint:
    def test_stable_and_short(self):
        assert fingerprint("sk-a") == fingerprint("sk-a")
        assert len(fingerprint("sk-a")) == 16

    def test_does_not_contain_key(self):
        assert "sk-secret" not in fingerprint("sk-secret")

    def test_distinct(self):
        assert fingerprint("sk-a") != fingerprint("sk-b")


class TestSources:
    def test_env_source(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PACKYCODE_API_KEY", "  sk-env  ")
        assert env_source("PACKYCODE_API_KEY")() == "sk-env"

    def test_env_source_missing(self):
        assert env_source("PACKYCODE_API_KEY")() is None

    def test_settings_source(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"env": {"ANTHROPIC_AUTH_TOKEN": "sk-settings"}}))
        assert settings_source(path)() == "sk-settings"

    def test_settings_source_prefers_auth_token(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"env": {
            "ANTHROPIC_API_KEY": "sk-api", "ANTHROPIC_AUTH_TOKEN": "sk-token",
        }}))
        assert settings_source(path)() == "sk-token"

    def test_settings_source_skips_malformed_field(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"env": {
            "ANTHROPIC_AUTH_TOKEN": "sk bad token", "ANTHROPIC_API_KEY": "sk-api",
        }}))
        assert settings_source(path)() == "sk-api"

    def test_settings_source_corrupt(self, tmp_path: Path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert settings_source(path)() is None

    def test_key_file_default_location(self, isolated_env: Path):
        (isolated_env / ".claude").mkdir()
        (isolated_env / ".claude" / "api_key").write_text("sk-file\n")
        assert key_file_source()() == "sk-file"


class TestResolve:
    def test_first_valid_wins(self):
        calls: list[str] = []

        def make(name: str, value: str | None):
            def _src() -> str | None:
                calls.append(name)
                return value
            return _src

        key = resolve_credential([make("a", None), make("b", "sk-b"), make("c", "sk-c")])
        assert key == "sk-b"
        assert calls == ["a", "b"]

    def test_malformed_skipped(self):
        key = resolve_credential([lambda: "bad key", lambda: "sk-good"])
        assert key == "sk-good"

    def test_none_available(self):
        assert resolve_credential([lambda: None]) is None

    def test_env_beats_settings(self, monkeypatch: pytest.MonkeyPatch, isolated_env: Path):
        claude = isolated_env / ".claude"
        claude.mkdir()
        (claude / "settings.json").write_text(
            json.dumps({"env": {"ANTHROPIC_AUTH_TOKEN": "sk-settings"}})
        )
        assert resolve_credential(default_sources()) == "sk-settings"
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
        assert resolve_credential(default_sources()) == "sk-env"

    def test_packycode_key_first(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-anthropic")
        monkeypatch.setenv("PACKYCODE_API_KEY", "sk-packy")
        assert resolve_credential() == "sk-packy"
