"""CLI entry point for ccline."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from ccline.core.config import debug_enabled, resolve_config
from ccline.core.pipeline import StatusPipeline, build_context

logger = logging.getLogger("ccline")


def _configure_logging(debug: bool) -> None:
    """Send diagnostics to stderr only when debugging is requested."""
    if not debug:
        return
    from rich.console import Console
    from rich.logging import RichHandler

    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def _read_payload() -> dict[str, Any]:
    """Read the host's JSON payload from stdin; anything unusable reads as ``{}``."""
    stream = click.get_text_stream("stdin")
    if stream.isatty():
        return {}
    raw = stream.read().strip()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.debug("Ignoring malformed host payload: %s", exc)
        return {}
    return payload if isinstance(payload, dict) else {}


def _minimal_line(payload: dict[str, Any], cwd: str | None) -> str:
    """Directory name only, for when the full pipeline cannot run."""
    workspace = payload.get("workspace")
    current = cwd or (workspace.get("current_dir") if isinstance(workspace, dict) else None)
    path = Path(current) if isinstance(current, str) and current else Path.cwd()
    return path.name or str(path)


@click.group(invoke_without_command=True)
@click.option("--cwd", default=None, help="Working directory (overrides the host payload)")
@click.option("--transcript", default=None, help="Session transcript path (JSONL)")
@click.option("--model", "-m", default=None, help="Model identifier")
@click.option("--theme", "-t", default=None, help="Theme name")
@click.option("--segments", "-s", default=None, help="Comma-separated segment order")
@click.option("--no-quota", is_flag=True, default=False, help="Skip the quota segment")
@click.option("--nerd-font/--no-nerd-font", default=None, help="Use Nerd Font icons")
@click.option("--plain", is_flag=True, default=False, help="No colors or styling")
@click.option("--debug", is_flag=True, default=False, help="Diagnostics on stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    cwd: str | None,
    transcript: str | None,
    model: str | None,
    theme: str | None,
    segments: str | None,
    no_quota: bool,
    nerd_font: bool | None,
    plain: bool,
    debug: bool,
) -> None:
    """ccline -- status line for coding-assistant sessions.

    \b
    Reads the host's JSON payload on stdin and prints one line:
      echo '{"model": {"id": "claude-sonnet-4"}}' | ccline
      ccline --theme powerline-dark --segments model,directory,git
      ccline themes
      ccline preview
    """
    _configure_logging(debug or debug_enabled())
    if ctx.invoked_subcommand is not None:
        return

    payload = _read_payload()
    try:
        config = resolve_config({
            "theme": theme,
            "segments": segments,
            "nerd_font": nerd_font,
            "quota_enabled": False if no_quota else None,
        })
        session = build_context(payload, config, cwd=cwd, transcript_path=transcript, model=model)
        line = asyncio.run(StatusPipeline(config).render(session, color=not plain))
    except Exception as exc:  # noqa: BLE001
        logger.debug("Status pipeline failed: %s", exc, exc_info=True)
        try:
            line = _minimal_line(payload, cwd)
        except OSError:
            sys.exit(1)
    # stdout is a pipe to the host; keep the ANSI styling.
    click.echo(line, color=True)


def _register_subcommands() -> None:
    """Register CLI subcommands."""
    from ccline.cli.commands import cache_cmd, preview_cmd, themes_cmd

    cli.add_command(themes_cmd, "themes")
    cli.add_command(preview_cmd, "preview")
    cli.add_command(cache_cmd, "cache")


_register_subcommands()


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
