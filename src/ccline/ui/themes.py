"""Built-in themes."""

from __future__ import annotations

from ccline.types.segments import SegmentId
from ccline.types.theme import SegmentStyle, Theme

# ── Icons ────────────────────────────────────────────────────────────────────
# (plain, nerd font) per segment kind, shared by every theme.

ICONS: dict[SegmentId, tuple[str, str]] = {
    SegmentId.MODEL: ("\U0001f916", "\ue26d"),
    SegmentId.DIRECTORY: ("\U0001f4c1", "\U000f024b"),
    SegmentId.GIT: ("\U0001f33f", "\U000f02a2"),
    SegmentId.USAGE: ("\u26a1", "\uf49b"),
    SegmentId.QUOTA: ("\U0001f4b3", "\uf09d"),
    SegmentId.COST: ("\U0001f4b0", "\ueec1"),
    SegmentId.TIME: ("\u23f1", "\U000f19bb"),
    SegmentId.OUTPUT_STYLE: ("\U0001f3af", "\U000f12f5"),
}


def _styles(
    colors: dict[SegmentId, tuple[str | None, str | None, str | None]],
    *,
    bold: bool = False,
) -> dict[SegmentId, SegmentStyle]:
    """Build styles from ``{segment: (icon_color, text_color, background)}``."""
    styles: dict[SegmentId, SegmentStyle] = {}
    for segment, (icon_color, text_color, background) in colors.items():
        plain, nerd = ICONS[segment]
        styles[segment] = SegmentStyle(
            icon=plain,
            nerd_icon=nerd,
            icon_color=icon_color,
            text_color=text_color,
            background=background,
            bold=bold,
        )
    return styles


DEFAULT_THEME = Theme(
    name="default",
    styles=_styles({
        SegmentId.MODEL: ("bright_cyan", "bright_cyan", None),
        SegmentId.DIRECTORY: ("bright_yellow", "bright_green", None),
        SegmentId.GIT: ("bright_blue", "bright_blue", None),
        SegmentId.USAGE: ("bright_magenta", "bright_magenta", None),
        SegmentId.QUOTA: ("bright_green", "bright_green", None),
        SegmentId.COST: ("yellow", "yellow", None),
        SegmentId.TIME: ("green", "green", None),
        SegmentId.OUTPUT_STYLE: ("cyan", "cyan", None),
    }),
    separator=" | ",
    separator_color="bright_black",
)

_NORD_FG = "#2e3440"

NORD_THEME = Theme(
    name="nord",
    styles=_styles({
        SegmentId.MODEL: (_NORD_FG, _NORD_FG, "#88c0d0"),
        SegmentId.DIRECTORY: (_NORD_FG, _NORD_FG, "#a3be8c"),
        SegmentId.GIT: (_NORD_FG, _NORD_FG, "#81a1c1"),
        SegmentId.USAGE: (_NORD_FG, _NORD_FG, "#b48ead"),
        SegmentId.QUOTA: (_NORD_FG, _NORD_FG, "#d08770"),
        SegmentId.COST: (_NORD_FG, _NORD_FG, "#ebcb8b"),
        SegmentId.TIME: (_NORD_FG, _NORD_FG, "#a3be8c"),
        SegmentId.OUTPUT_STYLE: (_NORD_FG, _NORD_FG, "#88c0d0"),
    }),
    powerline=True,
)

_WHITE = "#ffffff"

POWERLINE_DARK_THEME = Theme(
    name="powerline-dark",
    styles=_styles({
        SegmentId.MODEL: (_WHITE, _WHITE, "#2d2d2d"),
        SegmentId.DIRECTORY: (_WHITE, _WHITE, "#8b4513"),
        SegmentId.GIT: (_WHITE, _WHITE, "#404040"),
        SegmentId.USAGE: (_WHITE, _WHITE, "#374151"),
        SegmentId.QUOTA: (_WHITE, _WHITE, "#1f4d3a"),
        SegmentId.COST: (_WHITE, _WHITE, "#282c34"),
        SegmentId.TIME: (_WHITE, _WHITE, "#2d323b"),
        SegmentId.OUTPUT_STYLE: (_WHITE, _WHITE, "#323842"),
    }),
    powerline=True,
)

MINIMAL_THEME = Theme(
    name="minimal",
    styles={segment: SegmentStyle() for segment in SegmentId},
    separator=" · ",
)

THEMES: dict[str, Theme] = {
    theme.name: theme
    for theme in (DEFAULT_THEME, NORD_THEME, POWERLINE_DARK_THEME, MINIMAL_THEME)
}


def get_theme(name: str) -> Theme:
    """Return the built-in theme called *name*.

    Raises KeyError for unknown names.
    """
    key = name.strip().lower().replace("_", "-")
    if key not in THEMES:
        raise KeyError(f"Unknown theme {name!r}. Available: {', '.join(sorted(THEMES))}")
    return THEMES[key]
