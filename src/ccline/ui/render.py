"""SegmentRenderer — turns segment values into the styled status line."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from rich.console import Console
from rich.text import Text

from ccline.types.segments import (
    ContextUsage,
    DirectoryInfo,
    GitStatus,
    ModelLabel,
    OutputStyleInfo,
    QuotaStatus,
    SegmentId,
    SegmentValue,
    SegmentValues,
    SessionCost,
    SessionTime,
)
from ccline.types.theme import SegmentStyle, Theme

POWERLINE_ARROW = "\ue0b0"

MARK_DIRTY = "\u25cf"      # ●
MARK_CONFLICT = "\u26a0"   # ⚠
MARK_AHEAD = "\u2191"      # ↑
MARK_BEHIND = "\u2193"     # ↓
MARK_OPUS_ON = "Opus\u2713"   # ✓
MARK_OPUS_OFF = "Opus\u2717"  # ✗

_CENTS = Decimal("0.01")

# Wide enough that rich never wraps a status line.
_RENDER_WIDTH = 10_000


# ── Text formatting ──────────────────────────────────────────────────────────


def format_tokens(tokens: int) -> str:
    """Compact token count: ``950``, ``120k``, ``1.5M``."""
    if tokens >= 1_000_000:
        value, suffix = tokens / 1_000_000, "M"
    elif tokens >= 1_000:
        value, suffix = tokens / 1_000, "k"
    else:
        return str(tokens)
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text}{suffix}"


def format_duration(duration_ms: int) -> str:
    seconds = duration_ms // 1000
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_money(amount: Decimal, currency: str = "USD") -> str:
    rounded = amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
    if currency.upper() == "USD":
        return f"${rounded}"
    return f"{rounded} {currency}"


def format_git(status: GitStatus) -> str:
    parts = [status.branch]
    if status.sha and not status.branch.startswith(":"):
        parts.append(f"({status.sha})")
    if status.dirty:
        parts.append(MARK_DIRTY)
    if status.conflicts:
        parts.append(MARK_CONFLICT)
    if status.ahead:
        parts.append(f"{MARK_AHEAD}{status.ahead}")
    if status.behind:
        parts.append(f"{MARK_BEHIND}{status.behind}")
    return " ".join(parts)


def format_value(value: SegmentValue) -> str:
    """Plain text for one segment value, without icon or color."""
    match value:
        case DirectoryInfo(name=name):
            return name
        case GitStatus():
            return format_git(value)
        case ModelLabel(display_name=name):
            return name
        case ContextUsage(tokens=tokens, limit=limit):
            return f"{value.percent}% · {format_tokens(tokens)}/{format_tokens(limit)}"
        case QuotaStatus(daily_spent=spent, currency=currency, opus_available=opus):
            marker = MARK_OPUS_ON if opus else MARK_OPUS_OFF
            return f"{format_money(spent, currency)} {marker}"
        case SessionTime(duration_ms=ms):
            return format_duration(ms)
        case SessionCost(total_usd=usd):
            return format_money(Decimal(str(usd)))
        case OutputStyleInfo(name=name):
            return name
    raise TypeError(f"Unsupported segment value: {value!r}")


# ── Rendering ────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class _Piece:
    style: SegmentStyle
    icon: str
    text: str


def _join(*parts: str | None) -> str | None:
    style = " ".join(p for p in parts if p)
    return style or None


class SegmentRenderer:
    """Renders the enabled, available segments in configured order.

    Unavailable segments (missing or ``None``) are skipped without leaving a
    separator behind. Output depends only on the values, theme, enabled list
    and renderer options, so identical inputs give byte-identical lines.
    """

    def __init__(
        self,
        theme: Theme,
        enabled: Sequence[SegmentId],
        *,
        nerd_font: bool = False,
        color_system: str = "truecolor",
    ) -> None:
        self._theme = theme
        self._enabled = tuple(dict.fromkeys(enabled))
        self._nerd_font = nerd_font
        self._color_system = color_system

    @property
    def theme(self) -> Theme:
        return self._theme

    def _pieces(self, values: SegmentValues) -> list[_Piece]:
        pieces: list[_Piece] = []
        for segment_id in self._enabled:
            value = values.get(segment_id)
            if value is None:
                continue
            text = format_value(value)
            if not text:
                continue
            style = self._theme.style_for(segment_id)
            icon = style.nerd_icon if self._nerd_font and style.nerd_icon else style.icon
            pieces.append(_Piece(style=style, icon=icon, text=text))
        return pieces

    def build(self, values: SegmentValues) -> Text:
        """Assemble the styled line as a rich Text."""
        pieces = self._pieces(values)
        if self._theme.powerline:
            return self._build_powerline(pieces)
        return self._build_plain(pieces)

    def _build_plain(self, pieces: list[_Piece]) -> Text:
        line = Text(no_wrap=True, end="")
        for i, piece in enumerate(pieces):
            if i:
                line.append(self._theme.separator, style=self._theme.separator_color or "")
            bg = f"on {piece.style.background}" if piece.style.background else None
            pad = " " if piece.style.background else ""
            if pad:
                line.append(pad, style=bg or "")
            if piece.icon:
                line.append(piece.icon, style=_join(piece.style.icon_color, bg) or "")
                line.append(" ", style=bg or "")
            weight = "bold" if piece.style.bold else None
            line.append(piece.text, style=_join(weight, piece.style.text_color, bg) or "")
            if pad:
                line.append(pad, style=bg or "")
        return line

    def _build_powerline(self, pieces: list[_Piece]) -> Text:
        line = Text(no_wrap=True, end="")
        for i, piece in enumerate(pieces):
            bg = piece.style.background
            on_bg = f"on {bg}" if bg else None
            if i:
                prev_bg = pieces[i - 1].style.background
                line.append(POWERLINE_ARROW, style=_join(prev_bg, on_bg) or "")
            line.append(" ", style=on_bg or "")
            if piece.icon:
                line.append(piece.icon, style=_join(piece.style.icon_color, on_bg) or "")
                line.append(" ", style=on_bg or "")
            weight = "bold" if piece.style.bold else None
            line.append(piece.text, style=_join(weight, piece.style.text_color, on_bg) or "")
            line.append(" ", style=on_bg or "")
        if pieces:
            line.append(POWERLINE_ARROW, style=pieces[-1].style.background or "")
        return line

    def render(self, values: SegmentValues, *, color: bool = True) -> str:
        """Render the line as a string with ANSI styling (or plain text)."""
        text = self.build(values)
        if not color:
            return text.plain
        console = Console(
            force_terminal=True,
            color_system=self._color_system,  # type: ignore[arg-type]
            width=_RENDER_WIDTH,
            emoji=False,
            highlight=False,
            markup=False,
        )
        with console.capture() as capture:
            console.print(text, end="", soft_wrap=True)
        return capture.get()
