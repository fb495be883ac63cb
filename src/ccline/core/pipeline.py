"""StatusPipeline — gathers segment values independently, then renders once."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ccline.core.credentials import CredentialSource, resolve_credential
from ccline.quota.monitor import QuotaMonitor
from ccline.segments.git import GitBackend, SubprocessGit
from ccline.segments.manager import SegmentManager
from ccline.segments.usage import TokenEstimator
from ccline.types.config import StatusConfig
from ccline.types.segments import SegmentId, SegmentValues
from ccline.types.session import SessionContext
from ccline.types.theme import Theme
from ccline.ui.render import SegmentRenderer
from ccline.ui.themes import DEFAULT_THEME, get_theme

logger = logging.getLogger(__name__)


def enabled_segments(config: StatusConfig) -> tuple[SegmentId, ...]:
    """Configured segments, minus quota when the monitor is switched off."""
    if config.quota.enabled:
        return config.segments
    return tuple(s for s in config.segments if s is not SegmentId.QUOTA)


def resolve_theme(name: str) -> Theme:
    """Look up a built-in theme, falling back to the default one."""
    try:
        return get_theme(name)
    except KeyError as exc:
        logger.warning("%s; using default theme", exc.args[0])
        return DEFAULT_THEME


def build_context(
    payload: dict[str, Any],
    config: StatusConfig,
    *,
    cwd: str | Path | None = None,
    transcript_path: str | Path | None = None,
    model: str | None = None,
    credential_sources: Sequence[CredentialSource] | None = None,
) -> SessionContext:
    """Create the session context for one invocation.

    The credential is only looked up when the quota segment will run.
    """
    credential = None
    if SegmentId.QUOTA in enabled_segments(config):
        credential = resolve_credential(credential_sources)
    return SessionContext.from_host_payload(
        payload,
        cwd=cwd,
        transcript_path=transcript_path,
        model=model,
        credential=credential,
    )


class StatusPipeline:
    """Runs the enabled segment collectors and renders the status line.

    Collectors run concurrently and in isolation: a collector that fails
    or finds nothing leaves its slot empty and the renderer skips it.
    """

    def __init__(
        self,
        config: StatusConfig | None = None,
        *,
        manager: SegmentManager | None = None,
        git_backend: GitBackend | None = None,
        quota_monitor: QuotaMonitor | None = None,
        estimator: TokenEstimator | None = None,
        theme: Theme | None = None,
    ) -> None:
        self._config = config or StatusConfig()
        if manager is None:
            manager = SegmentManager()
            manager.register_defaults(
                git_backend=git_backend or SubprocessGit(timeout_sec=self._config.git_timeout),
                quota_monitor=quota_monitor or QuotaMonitor.from_config(self._config.quota),
                estimator=estimator,
                show_sha=self._config.show_sha,
            )
        self._manager = manager
        self._renderer = SegmentRenderer(
            theme or resolve_theme(self._config.theme),
            self.enabled,
            nerd_font=self._config.nerd_font,
        )

    @property
    def config(self) -> StatusConfig:
        return self._config

    @property
    def enabled(self) -> tuple[SegmentId, ...]:
        return enabled_segments(self._config)

    @property
    def renderer(self) -> SegmentRenderer:
        return self._renderer

    async def collect(self, ctx: SessionContext) -> SegmentValues:
        """Gather values for every enabled segment; disabled ones are never run."""
        values = await self._manager.collect_all(self.enabled, ctx)
        missing = [sid.value for sid, value in values.items() if value is None]
        if missing:
            logger.debug("Unavailable segments: %s", ", ".join(missing))
        return values

    async def render(self, ctx: SessionContext, *, color: bool = True) -> str:
        values = await self.collect(ctx)
        return self._renderer.render(values, color=color)
