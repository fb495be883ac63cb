"""Segment identifiers and the typed values produced by segment collectors."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path


class SegmentId(Enum):
    """The closed set of segment kinds a status line can contain."""

    DIRECTORY = "directory"
    GIT = "git"
    MODEL = "model"
    USAGE = "usage"
    QUOTA = "quota"
    TIME = "time"
    COST = "cost"
    OUTPUT_STYLE = "output_style"

    @classmethod
    def parse(cls, name: str) -> SegmentId:
        """Look up a segment kind by name, accepting ``-`` for ``_``.

        Raises ValueError for unknown names.
        """
        key = name.strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown segment {name!r} (expected one of: {valid})") from None


@dataclass(frozen=True, slots=True)
class DirectoryInfo:
    """The session's working directory."""

    path: Path
    name: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Source-control state of the working directory."""

    branch: str
    dirty: bool = False
    conflicts: bool = False
    ahead: int = 0
    behind: int = 0
    sha: str | None = None


@dataclass(frozen=True, slots=True)
class ModelLabel:
    """Raw model identifier and its short display name."""

    model_id: str
    display_name: str


@dataclass(frozen=True, slots=True)
class ContextUsage:
    """Estimated context-window consumption."""

    tokens: int
    limit: int

    @property
    def percent(self) -> int:
        if self.limit <= 0:
            return 0
        return round(self.tokens * 100 / self.limit)


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    """Daily spend and feature availability reported by the accounting API."""

    daily_spent: Decimal
    opus_available: bool
    endpoint_used: str
    currency: str = "USD"


@dataclass(frozen=True, slots=True)
class SessionTime:
    """Wall-clock duration of the session so far."""

    duration_ms: int


@dataclass(frozen=True, slots=True)
class SessionCost:
    """Cost of the session so far, as reported by the host."""

    total_usd: float


@dataclass(frozen=True, slots=True)
class OutputStyleInfo:
    """Active output style of the host application."""

    name: str


SegmentValue = (
    DirectoryInfo
    | GitStatus
    | ModelLabel
    | ContextUsage
    | QuotaStatus
    | SessionTime
    | SessionCost
    | OutputStyleInfo
)

# A missing key or a ``None`` value both mean "unavailable".
SegmentValues = dict[SegmentId, SegmentValue | None]
