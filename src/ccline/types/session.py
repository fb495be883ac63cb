"""Per-invocation session context built from the host payload."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _str_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _number_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Immutable input bundle for one invocation.

    ``credential`` is resolved once by the caller; collectors never look up
    keys on their own.
    """

    cwd: Path
    model_id: str = ""
    model_display_name: str | None = None
    transcript_path: Path | None = None
    credential: str | None = None
    session_id: str | None = None
    cost_usd: float | None = None
    duration_ms: int | None = None
    output_style: str | None = None

    @classmethod
    def from_host_payload(
        cls,
        payload: dict[str, Any],
        *,
        cwd: str | Path | None = None,
        transcript_path: str | Path | None = None,
        model: str | None = None,
        credential: str | None = None,
    ) -> SessionContext:
        """Build a context from the JSON document the host writes on stdin.

        Explicit keyword arguments take precedence over payload fields.
        Unknown or mistyped payload fields are ignored.
        """
        workspace = _section(payload, "workspace")
        model_info = _section(payload, "model")
        cost = _section(payload, "cost")
        style = _section(payload, "output_style")

        raw_cwd = (
            cwd
            or _str_or_none(workspace.get("current_dir"))
            or _str_or_none(payload.get("cwd"))
            or Path.cwd()
        )
        raw_transcript = transcript_path or _str_or_none(payload.get("transcript_path"))
        duration = _number_or_none(cost.get("total_duration_ms"))

        return cls(
            cwd=Path(raw_cwd),
            model_id=model or _str_or_none(model_info.get("id")) or "",
            model_display_name=None if model else _str_or_none(model_info.get("display_name")),
            transcript_path=Path(raw_transcript) if raw_transcript else None,
            credential=credential,
            session_id=_str_or_none(payload.get("session_id")),
            cost_usd=_number_or_none(cost.get("total_cost_usd")),
            duration_ms=int(duration) if duration is not None else None,
            output_style=_str_or_none(style.get("name")),
        )
