"""API credential resolution from an ordered list of sources."""

from __future__ import annotations

import hashlib
import json
import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

CredentialSource = Callable[[], str | None]

# Checked in this order; the first valid key wins.
ENV_VARS: tuple[str, ...] = (
    "PACKYCODE_API_KEY",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_AUTH_TOKEN",
)

# Fields of the ``env`` table in the host's settings.json, in priority order.
SETTINGS_FIELDS: tuple[str, ...] = ("ANTHROPIC_AUTH_TOKEN", "ANTHROPIC_API_KEY")


def _claude_dir() -> Path:
    return Path.home() / ".claude"


def is_valid_key(key: str | None) -> bool:
    """Return True for a non-empty key made of printable, non-space characters."""
    if not key:
        return False
    return key.isprintable() and not any(ch.isspace() for ch in key)


def fingerprint(key: str) -> str:
    """Derive a stable cache key for a credential without storing the credential."""
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]


def env_source(name: str) -> CredentialSource:
    """Source reading the environment variable *name*."""

    def _read() -> str | None:
        value = os.environ.get(name)
        return value.strip() if value else None

    _read.__name__ = f"env:{name}"
    return _read


def settings_source(path: Path | None = None) -> CredentialSource:
    """Source reading ``env.ANTHROPIC_AUTH_TOKEN``/``env.ANTHROPIC_API_KEY`` from settings.json."""

    def _read() -> str | None:
        settings_path = path or _claude_dir() / "settings.json"
        try:
            data = json.loads(settings_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        env = data.get("env") if isinstance(data, dict) else None
        if not isinstance(env, dict):
            return None
        for field_name in SETTINGS_FIELDS:
            value = env.get(field_name)
            if isinstance(value, str) and is_valid_key(value.strip()):
                return value.strip()
        return None

    _read.__name__ = "settings"
    return _read


def key_file_source(path: Path | None = None) -> CredentialSource:
    """Source reading a bare key from ``~/.claude/api_key``."""

    def _read() -> str | None:
        key_path = path or _claude_dir() / "api_key"
        try:
            return key_path.read_text(encoding="utf-8").strip() or None
        except OSError:
            return None

    _read.__name__ = "key_file"
    return _read


def default_sources() -> tuple[CredentialSource, ...]:
    """Environment variables, then settings.json, then the key file."""
    return (
        *(env_source(name) for name in ENV_VARS),
        settings_source(),
        key_file_source(),
    )


def resolve_credential(sources: Sequence[CredentialSource] | None = None) -> str | None:
    """Return the key from the first source that yields a valid one.

    Sources after the winning one are never called.
    """
    for source in sources if sources is not None else default_sources():
        key = source()
        if key is None:
            continue
        if is_valid_key(key):
            logger.debug("Using credential from %s", getattr(source, "__name__", source))
            return key
        logger.debug("Ignoring malformed credential from %s", getattr(source, "__name__", source))
    return None
