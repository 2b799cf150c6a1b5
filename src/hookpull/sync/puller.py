"""Update working copies, one operation per path at a time."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from hookpull.sync.errors import SyncFailure
from hookpull.sync.locks import PathLocks

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class SyncOperation(Protocol):
    """Bring the working copy at ``path`` up to date, raising SyncFailure on error."""

    async def __call__(self, path: str, timeout: float) -> None: ...


class GitPuller:
    """Runs ``git pull`` in a working copy through GitPython.

    The git process is killed by GitPython once ``timeout`` elapses. If the
    awaiting task is cancelled first, the coroutine still waits for the git
    process to exit before re-raising, so a caller holding the path lock
    keeps it until git is gone.
    """

    async def __call__(self, path: str, timeout: float) -> None:
        job = asyncio.ensure_future(asyncio.to_thread(self.pull, path, timeout))
        try:
            await asyncio.shield(job)
        except asyncio.CancelledError:
            with contextlib.suppress(Exception):
                await job
            raise

    def pull(self, path: str, timeout: float) -> str:
        """Blocking pull; returns git's output."""
        try:
            repo = Repo(path, search_parent_directories=True)
        except NoSuchPathError as exc:
            raise SyncFailure(path, "no such path") from exc
        except InvalidGitRepositoryError as exc:
            raise SyncFailure(path, "not a git repository") from exc

        try:
            with repo, repo.git.custom_environment(GIT_TERMINAL_PROMPT="0"):
                return repo.git.pull(kill_after_timeout=timeout)
        except GitCommandError as exc:
            logger.debug("git pull in %s: %s", path, exc)
            raise SyncFailure(path, f"git pull exited with status {exc.status}") from exc
        except OSError as exc:
            raise SyncFailure(path, f"I/O error: {exc}") from exc


@dataclass(frozen=True)
class PullResult:
    """Outcome of one path's update."""

    path: str
    ok: bool
    elapsed: float
    error: str = ""


class UpdateWorker:
    """Applies dispatch items: one sync operation per path, never two at once on a path.

    Paths of one item run concurrently with each other. Each operation is
    bounded by ``timeout`` seconds; failures are logged and never retried.
    """

    def __init__(
        self,
        sync: SyncOperation,
        timeout: float = DEFAULT_TIMEOUT,
        locks: PathLocks | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            sync: Operation that updates one working copy.
            timeout: Seconds allowed per operation (default: 10).
            locks: Path lock registry; a private one is created if omitted.
        """
        self._sync = sync
        self._timeout = timeout
        self._locks = locks if locks is not None else PathLocks()

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def locks(self) -> PathLocks:
        return self._locks

    async def process(self, paths: Sequence[str]) -> list[PullResult]:
        """Update every path of one dispatch item."""
        if not paths:
            logger.warning("Dispatch item has no paths")
            return []
        return list(await asyncio.gather(*(self._pull_path(p) for p in paths)))

    async def _pull_path(self, path: str) -> PullResult:
        async with self._locks.lock_for(path):
            start = time.monotonic()
            try:
                await asyncio.wait_for(self._sync(path, self._timeout), timeout=self._timeout)
            except TimeoutError:
                elapsed = time.monotonic() - start
                error = f"timed out after {self._timeout}s"
                logger.error("[%s] pull %s (%.3fs)", path, error, elapsed)
            except SyncFailure as exc:
                elapsed = time.monotonic() - start
                error = exc.reason
                logger.error("[%s] pull failed in %.3fs: %s", path, elapsed, error)
            except Exception as exc:
                elapsed = time.monotonic() - start
                error = repr(exc)
                logger.exception("[%s] pull failed unexpectedly in %.3fs", path, elapsed)
            else:
                elapsed = time.monotonic() - start
                logger.info("[%s] pull done in %.3fs", path, elapsed)
                return PullResult(path=path, ok=True, elapsed=elapsed)

        return PullResult(path=path, ok=False, elapsed=elapsed, error=error)
