"""CLI subcommands for ccline (themes, preview, cache)."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import click

from ccline.types.segments import (
    ContextUsage,
    DirectoryInfo,
    GitStatus,
    ModelLabel,
    OutputStyleInfo,
    QuotaStatus,
    SegmentId,
    SegmentValues,
    SessionCost,
    SessionTime,
)

SAMPLE_VALUES: SegmentValues = {
    SegmentId.MODEL: ModelLabel(model_id="claude-sonnet-4-5", display_name="Sonnet 4.5"),
    SegmentId.DIRECTORY: DirectoryInfo(path=Path("/home/user/ccline"), name="ccline"),
    SegmentId.GIT: GitStatus(branch="main", dirty=True, ahead=1),
    SegmentId.USAGE: ContextUsage(tokens=120_000, limit=200_000),
    SegmentId.QUOTA: QuotaStatus(
        daily_spent=Decimal("88.48"), opus_available=True, endpoint_used="main",
    ),
    SegmentId.COST: SessionCost(total_usd=1.27),
    SegmentId.TIME: SessionTime(duration_ms=754_000),
    SegmentId.OUTPUT_STYLE: OutputStyleInfo(name="default"),
}


@click.command()
def themes_cmd() -> None:
    """List built-in themes."""
    from ccline.ui.themes import THEMES

    click.echo(f"{'Theme':<18} {'Style'}")
    click.echo("-" * 30)
    for name, theme in sorted(THEMES.items()):
        kind = "powerline" if theme.powerline else f"separator {theme.separator.strip()!r}"
        click.echo(f"{name:<18} {kind}")


@click.command()
@click.option("--theme", "-t", "theme_name", default=None, help="Preview one theme only")
@click.option("--nerd-font", is_flag=True, default=False, help="Use Nerd Font icons")
@click.option("--plain", is_flag=True, default=False, help="No colors or styling")
def preview_cmd(theme_name: str | None, nerd_font: bool, plain: bool) -> None:
    """Render a sample line with every segment, per theme."""
    from ccline.ui.render import SegmentRenderer
    from ccline.ui.themes import THEMES, get_theme

    if theme_name:
        try:
            themes = [get_theme(theme_name)]
        except KeyError as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1)
    else:
        themes = [THEMES[name] for name in sorted(THEMES)]

    for theme in themes:
        renderer = SegmentRenderer(theme, list(SegmentId), nerd_font=nerd_font)
        click.echo(f"{theme.name}:")
        click.echo(f"  {renderer.render(SAMPLE_VALUES, color=not plain)}", color=True)


@click.group()
def cache_cmd() -> None:
    """Manage the on-disk quota cache."""


@cache_cmd.command("path")
def cache_path() -> None:
    """Show where the quota cache lives."""
    from ccline.core.config import resolve_config
    from ccline.quota.cache import QuotaCache

    click.echo(str(QuotaCache(resolve_config().quota.cache_path).path))


@cache_cmd.command("clear")
def cache_clear() -> None:
    """Delete the quota cache file."""
    from ccline.core.config import resolve_config
    from ccline.quota.cache import QuotaCache

    cache = QuotaCache(resolve_config().quota.cache_path)
    try:
        removed = cache.clear()
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    if removed:
        click.echo(f"Removed {cache.path}")
    else:
        click.echo("No quota cache to remove.")
