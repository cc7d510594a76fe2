"""Source-control driver backed by the ``git`` executable.

Every invocation runs through :func:`asyncio.create_subprocess_exec` with a
timeout; a process that overruns is killed and reported as
:class:`~vendorsync.git.errors.GitTimeoutError`. A cancelled command also
kills its process, and a cancelled clone removes its directory.

Remote URLs are built from ``base_url`` and an ``owner/name`` slug. When
credentials are supplied they are embedded in the URL handed to git but
never appear in log lines or error messages, which only mention slugs.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
import typing as typ
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from vendorsync.logging import get_logger, log_debug, log_info

from .driver import WorkingCopy
from .errors import GitCommandError, GitTimeoutError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)

_DEFAULT_TIMEOUT_S = 300.0
_WORKDIR_PREFIX = "vendorsync-"


class SubprocessGitDriver:
    """Run git commands in per-task temporary clones."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        base_url: str = "https://github.com",
        username: str | None = None,
        token: str | None = None,
        timeout_s: float = _DEFAULT_TIMEOUT_S,
        git_executable: str = "git",
        workdir_root: Path | None = None,
    ) -> None:
        """Configure remote location, credentials and limits."""
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._token = token
        self._timeout_s = timeout_s
        self._git = git_executable
        self._workdir_root = workdir_root

    def remote_url(self, repository: str) -> str:
        """Return the clone/push URL for an ``owner/name`` slug."""
        parts = urlsplit(f"{self._base_url}/{repository}.git")
        if not self._token:
            return urlunsplit(parts)
        user = quote(self._username or "x-access-token", safe="")
        netloc = f"{user}:{quote(self._token, safe='')}@{parts.netloc}"
        return urlunsplit(parts._replace(netloc=netloc))

    async def clone(self, repository: str) -> WorkingCopy:
        """Clone ``repository`` into a fresh temporary directory."""
        path = Path(
            await asyncio.to_thread(
                tempfile.mkdtemp, prefix=_WORKDIR_PREFIX, dir=self._workdir_root
            )
        )
        copy = WorkingCopy(path=path, repository=repository)
        log_debug(logger, "Cloning %s into %s", repository, path)
        try:
            await self._run(
                ["clone", self.remote_url(repository), str(path)],
                operation=f"clone {repository}",
                cwd=path.parent,
            )
        except BaseException:
            await self.cleanup(copy)
            raise
        return copy

    async def set_config(self, copy: WorkingCopy, key: str, value: str) -> None:
        """Set ``key`` to ``value`` in the clone's local config."""
        await self._run(
            ["config", key, value], operation=f"config {key}", cwd=copy.path
        )

    async def checkout(self, copy: WorkingCopy, branch: str) -> None:
        """Check out ``branch``."""
        await self._run(
            ["checkout", branch], operation=f"checkout {branch}", cwd=copy.path
        )

    async def create_branch(self, copy: WorkingCopy, branch: str) -> None:
        """Create and check out ``branch``."""
        await self._run(
            ["checkout", "-b", branch],
            operation=f"checkout -b {branch}",
            cwd=copy.path,
        )

    async def apply_patch(
        self, copy: WorkingCopy, patch: str, *, strip_count: int
    ) -> None:
        """Apply ``patch`` with ``git am -3`` reading the mbox from stdin."""
        output = await self._run(
            ["am", "-3", "--ignore-whitespace", f"-p{strip_count}"],
            operation="am",
            cwd=copy.path,
            stdin=patch.encode("utf-8"),
        )
        log_info(logger, "git am in %s: %s", copy.repository, output.strip())

    async def push(self, copy: WorkingCopy, repository: str, branch: str) -> None:
        """Push ``branch`` to ``repository``."""
        await self._run(
            ["push", self.remote_url(repository), branch],
            operation=f"push {branch} to {repository}",
            cwd=copy.path,
        )

    async def cleanup(self, copy: WorkingCopy) -> None:
        """Delete the clone directory."""
        log_debug(logger, "Removing working copy %s", copy.path)
        await asyncio.to_thread(shutil.rmtree, copy.path, ignore_errors=True)

    def _environment(self) -> cabc.Mapping[str, str]:
        env = dict(os.environ)
        # Never block on a credential prompt.
        env["GIT_TERMINAL_PROMPT"] = "0"
        return env

    async def _run(
        self,
        args: list[str],
        *,
        operation: str,
        cwd: Path,
        stdin: bytes | None = None,
    ) -> str:
        stdin_mode = (
            asyncio.subprocess.DEVNULL if stdin is None else asyncio.subprocess.PIPE
        )
        try:
            process = await asyncio.create_subprocess_exec(
                self._git,
                *args,
                cwd=cwd,
                env=self._environment(),
                stdin=stdin_mode,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            raise GitCommandError.not_started(operation, exc) from exc

        try:
            raw_output, _ = await asyncio.wait_for(
                process.communicate(stdin), timeout=self._timeout_s
            )
        except TimeoutError as exc:
            await _reap(process)
            raise GitTimeoutError.timed_out(operation, self._timeout_s) from exc
        except asyncio.CancelledError:
            await _reap(process)
            raise

        output = raw_output.decode("utf-8", errors="replace") if raw_output else ""
        if process.returncode != 0:
            raise GitCommandError.failed(operation, process.returncode or -1, output)
        return output


async def _reap(process: asyncio.subprocess.Process) -> None:
    """Kill ``process`` if it is still running and wait for it to exit."""
    if process.returncode is None:
        process.kill()
        await process.wait()
