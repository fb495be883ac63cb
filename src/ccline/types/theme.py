"""Theme types consumed by the segment renderer."""

from __future__ import annotations

from dataclasses import dataclass, field

from ccline.types.segments import SegmentId


@dataclass(frozen=True, slots=True)
class SegmentStyle:
    """Icon and colors for one segment kind.

    Colors are rich color strings (``"bright_cyan"``, ``"#88c0d0"``,
    ``"color(14)"``); ``None`` leaves the terminal default.
    """

    icon: str = ""
    nerd_icon: str = ""
    icon_color: str | None = None
    text_color: str | None = None
    background: str | None = None
    bold: bool = False


@dataclass(frozen=True, slots=True)
class Theme:
    """Mapping from segment kind to style, plus the separator between segments.

    Powerline themes ignore ``separator`` and draw arrow glyphs colored by
    the neighbouring backgrounds instead.
    """

    name: str
    styles: dict[SegmentId, SegmentStyle] = field(default_factory=dict)
    separator: str = " | "
    separator_color: str | None = None
    powerline: bool = False

    def style_for(self, segment: SegmentId) -> SegmentStyle:
        return self.styles.get(segment, SegmentStyle())
