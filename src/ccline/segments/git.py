"""Git segment — branch, dirty/conflict state and ahead/behind counts."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Protocol, runtime_checkable

from ccline.segments.base import BaseSegment
from ccline.types.segments import GitStatus, SegmentId
from ccline.types.session import SessionContext

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SEC = 2.0
_SHORT_SHA_LEN = 7


@runtime_checkable
class GitBackend(Protocol):
    """Capability interface for querying repository state."""

    async def query_status(self, path: Path) -> GitStatus | None:
        """Return the status of the repository at *path*, or None if unavailable."""
        ...


def parse_porcelain_v2(output: str) -> GitStatus:
    """Parse ``git status --porcelain=v2 --branch`` output.

    A missing ``branch.ab`` header means no upstream, which yields zero
    ahead/behind counts.
    """
    head = ""
    oid: str | None = None
    ahead = behind = 0
    dirty = conflicts = False

    for line in output.splitlines():
        if line.startswith("# branch.head "):
            head = line[len("# branch.head "):].strip()
        elif line.startswith("# branch.oid "):
            value = line[len("# branch.oid "):].strip()
            oid = None if value == "(initial)" else value
        elif line.startswith("# branch.ab "):
            for part in line[len("# branch.ab "):].split():
                if part.startswith("+"):
                    ahead = int(part[1:])
                elif part.startswith("-"):
                    behind = int(part[1:])
        elif line.startswith("#") or line.startswith("!") or not line.strip():
            continue
        else:
            dirty = True
            if line.startswith("u "):
                conflicts = True

    sha = oid[:_SHORT_SHA_LEN] if oid else None
    if head == "(detached)" or not head:
        branch = f":{sha}" if sha else "HEAD"
    else:
        branch = head
    return GitStatus(
        branch=branch,
        dirty=dirty,
        conflicts=conflicts,
        ahead=ahead,
        behind=behind,
        sha=sha,
    )


class SubprocessGit:
    """GitBackend that shells out to the ``git`` binary.

    A single ``status --porcelain=v2 --branch`` call yields branch, dirty
    state, conflicts and upstream divergence.
    """

    def __init__(self, binary: str = "git", timeout_sec: float = _DEFAULT_TIMEOUT_SEC) -> None:
        self._binary = binary
        self._timeout_sec = timeout_sec

    async def query_status(self, path: Path) -> GitStatus | None:
        output = await self._run(
            path, "--no-optional-locks", "status", "--porcelain=v2", "--branch",
        )
        if output is None:
            return None
        return parse_porcelain_v2(output)

    async def _run(self, cwd: Path, *args: str) -> str | None:
        """Run git and return stdout, or None on any failure."""
        proc: asyncio.subprocess.Process | None = None
        try:
            proc = await asyncio.create_subprocess_exec(
                self._binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                cwd=str(cwd),
            )
            try:
                stdout_bytes, _ = await asyncio.wait_for(
                    proc.communicate(), timeout=self._timeout_sec,
                )
            except TimeoutError:
                try:
                    proc.kill()
                    await proc.wait()
                except ProcessLookupError:
                    pass
                logger.debug("git %s timed out after %.1fs in %s", args[-1], self._timeout_sec, cwd)
                return None
        except OSError as exc:
            logger.debug("Failed to start git in %s: %s", cwd, exc)
            return None

        if proc.returncode != 0:
            # 128: not a repository
            logger.debug("git exited with %s in %s", proc.returncode, cwd)
            return None
        return stdout_bytes.decode("utf-8", errors="replace")


class GitSegment(BaseSegment):
    """Shows git state for the working directory."""

    def __init__(self, backend: GitBackend | None = None, *, show_sha: bool = False) -> None:
        self._backend = backend or SubprocessGit()
        self._show_sha = show_sha

    @property
    def id(self) -> SegmentId:
        return SegmentId.GIT

    async def collect(self, ctx: SessionContext) -> GitStatus | None:
        status = await self._backend.query_status(ctx.cwd)
        if status is not None and not self._show_sha and status.sha is not None:
            status = replace(status, sha=None)
        return status
