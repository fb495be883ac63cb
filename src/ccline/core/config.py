"""Configuration loading (TOML, env vars, .env)."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ccline.types.config import DEFAULT_SEGMENTS, QuotaConfig, StatusConfig
from ccline.types.quota import EndpointDescriptor
from ccline.types.segments import SegmentId

logger = logging.getLogger(__name__)

# Load .env from current directory (and parents), won't override existing env vars
load_dotenv()

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def config_dir() -> Path:
    return Path.home() / ".claude" / "ccline"


def _as_bool(value: Any, name: str) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    logger.warning("Ignoring non-boolean value for %s: %r", name, value)
    return None


def _as_float(value: Any, name: str) -> float | None:
    if isinstance(value, bool):
        logger.warning("Ignoring non-numeric value for %s: %r", name, value)
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric value for %s: %r", name, value)
        return None
    if number < 0:
        logger.warning("Ignoring negative value for %s: %r", name, value)
        return None
    return number


def parse_segments(names: Iterable[str] | str) -> tuple[SegmentId, ...]:
    """Parse segment names in order, skipping (and logging) unknown ones.

    Anything other than a comma-separated string or a list of names is
    logged and yields no segments.
    """
    if not isinstance(names, (str, list, tuple)):
        logger.warning("Ignoring segments value that is not a string or list: %r", names)
        return ()
    if isinstance(names, str):
        names = [n for n in names.split(",") if n.strip()]
    segments: list[SegmentId] = []
    for name in names:
        try:
            segment = SegmentId.parse(str(name))
        except ValueError as exc:
            logger.warning("%s", exc)
            continue
        if segment not in segments:
            segments.append(segment)
    return tuple(segments)


def parse_endpoints(raw: Any) -> tuple[EndpointDescriptor, ...] | None:
    """Parse ``[[quota.endpoints]]`` tables; None if absent or entirely invalid."""
    if not isinstance(raw, list):
        return None
    endpoints: list[EndpointDescriptor] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or not isinstance(item.get("url"), str):
            logger.warning("Skipping invalid quota endpoint #%d: %r", i, item)
            continue
        priority = item.get("priority", i)
        endpoints.append(EndpointDescriptor(
            name=str(item.get("name") or f"endpoint{i}"),
            url=item["url"],
            priority=priority if isinstance(priority, int) else i,
        ))
    return tuple(endpoints) or None


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    if theme := os.environ.get("CCLINE_THEME"):
        config["theme"] = theme
    if segments := os.environ.get("CCLINE_SEGMENTS"):
        config["segments"] = segments
    if nerd := os.environ.get("CCLINE_NERD_FONT"):
        config["nerd_font"] = nerd
    if no_quota := os.environ.get("CCLINE_NO_QUOTA"):
        if _as_bool(no_quota, "CCLINE_NO_QUOTA"):
            config["quota_enabled"] = False
    if ttl := os.environ.get("CCLINE_QUOTA_TTL"):
        config["quota_ttl"] = ttl
    if cache_path := os.environ.get("CCLINE_CACHE_PATH"):
        config["cache_path"] = cache_path

    return config


def load_toml_config(path: Path | None = None) -> dict[str, Any]:
    """Load ``~/.claude/ccline/config.toml`` flattened to loader keys.

    A missing file yields ``{}``; an unreadable one is logged and ignored.
    """
    toml_path = path or config_dir() / "config.toml"
    if not toml_path.exists():
        return {}
    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Failed to read config %s: %s", toml_path, exc)
        return {}

    config: dict[str, Any] = {}
    statusline = data.get("statusline", {})
    if isinstance(statusline, dict):
        for key in ("theme", "segments", "nerd_font", "show_sha", "git_timeout"):
            if key in statusline:
                config[key] = statusline[key]

    quota = data.get("quota", {})
    if isinstance(quota, dict):
        for src, dest in (
            ("enabled", "quota_enabled"),
            ("ttl_seconds", "quota_ttl"),
            ("attempt_timeout", "quota_attempt_timeout"),
            ("budget_seconds", "quota_budget"),
            ("failure_backoff_seconds", "quota_backoff"),
            ("disk_cache", "quota_disk_cache"),
            ("cache_path", "cache_path"),
            ("endpoints", "quota_endpoints"),
        ):
            if src in quota:
                config[dest] = quota[src]
    return config


def resolve_config(
    overrides: dict[str, Any] | None = None,
    *,
    toml_path: Path | None = None,
) -> StatusConfig:
    """Merge built-in defaults < TOML < environment < *overrides*.

    ``None`` values in *overrides* are ignored so CLI options left unset
    don't mask lower layers.
    """
    merged: dict[str, Any] = {}
    merged.update(load_toml_config(toml_path))
    merged.update(load_env_config())
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    defaults = StatusConfig()
    quota_defaults = defaults.quota

    segments = defaults.segments
    if "segments" in merged:
        segments = parse_segments(merged["segments"]) or DEFAULT_SEGMENTS

    def _bool(key: str, default: bool) -> bool:
        if key not in merged:
            return default
        value = _as_bool(merged[key], key)
        return default if value is None else value

    def _float(key: str, default: float) -> float:
        if key not in merged:
            return default
        value = _as_float(merged[key], key)
        return default if value is None else value

    def _str(key: str) -> str | None:
        value = merged.get(key)
        if value is None or isinstance(value, str):
            return value
        logger.warning("Ignoring non-string value for %s: %r", key, value)
        return None

    cache_path = _str("cache_path")
    quota = QuotaConfig(
        enabled=_bool("quota_enabled", quota_defaults.enabled),
        ttl_seconds=_float("quota_ttl", quota_defaults.ttl_seconds),
        sticky_seconds=quota_defaults.sticky_seconds,
        attempt_timeout=_float("quota_attempt_timeout", quota_defaults.attempt_timeout),
        budget_seconds=_float("quota_budget", quota_defaults.budget_seconds),
        failure_backoff_seconds=_float("quota_backoff", quota_defaults.failure_backoff_seconds),
        use_disk_cache=_bool("quota_disk_cache", quota_defaults.use_disk_cache),
        endpoints=parse_endpoints(merged.get("quota_endpoints")),
        cache_path=Path(cache_path).expanduser() if cache_path else None,
    )

    return StatusConfig(
        segments=segments,
        theme=_str("theme") or defaults.theme,
        nerd_font=_bool("nerd_font", defaults.nerd_font),
        show_sha=_bool("show_sha", defaults.show_sha),
        git_timeout=_float("git_timeout", defaults.git_timeout),
        quota=quota,
    )


def debug_enabled() -> bool:
    """True when CCLINE_DEBUG (or the legacy PACKYCODE_DEBUG) is set."""
    return any(os.environ.get(name) for name in ("CCLINE_DEBUG", "PACKYCODE_DEBUG"))
