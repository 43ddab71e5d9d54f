"""
Version-control capability interface used by the mirroring core.

The mirroring logic only needs a handful of git operations. They are expressed
as the abstract ``GitBackend`` so the core can be driven by GitPython in
production and by a recording fake in tests.

Every call receives the repository path (or URL) and a ``CommandContext``
explicitly. There is no shared git handle whose working directory gets
reassigned between calls.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from git import Repo
from git.cmd import Git

logger = logging.getLogger(__name__)

ORIGIN = "origin"


class MirrorCancelled(Exception):
    """Raised when a mirror operation is cancelled through its context."""


@dataclass
class CommandContext:
    """
    Per-operation settings threaded through every backend call.

    Attributes:
        timeout: Seconds after which a running git process is killed
                 (None means wait forever)
        cancel_event: Event that, once set, makes the next call raise
                      MirrorCancelled. The CLI sets it on Ctrl-C.
    """

    timeout: Optional[float] = None
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def check(self) -> None:
        """Raise MirrorCancelled if cancellation was requested."""
        if self.cancel_event.is_set():
            raise MirrorCancelled("Mirror operation cancelled")


class GitBackend(ABC):
    """Git operations required to build branch checkouts."""

    @abstractmethod
    def init_repository(self, path: Path, ctx: CommandContext) -> None:
        """Initialize a repository at path (no-op if one already exists)."""

    @abstractmethod
    def list_remotes(self, path: Path, ctx: CommandContext) -> str:
        """Return the configured remote names, one per line."""

    @abstractmethod
    def set_remote_url(
        self, path: Path, name: str, url: str, ctx: CommandContext
    ) -> None:
        """Point an existing remote at a new URL."""

    @abstractmethod
    def add_remote(self, path: Path, name: str, url: str, ctx: CommandContext) -> None:
        """Add a new remote."""

    @abstractmethod
    def fetch(self, path: Path, ctx: CommandContext) -> None:
        """Fetch all remote-tracking refs from origin."""

    @abstractmethod
    def checkout(self, path: Path, branch: str, ctx: CommandContext) -> None:
        """Check out branch, creating a local tracking branch if needed."""

    @abstractmethod
    def list_remote_refs(self, url: str, ctx: CommandContext) -> str:
        """Return raw ``<hash>\\t<ref>`` lines for the remote, without a clone."""


class GitPythonBackend(GitBackend):
    """GitBackend running the git executable through GitPython."""

    @staticmethod
    def _execute_kwargs(ctx: CommandContext) -> dict:
        ctx.check()
        return {"kill_after_timeout": ctx.timeout}

    def init_repository(self, path: Path, ctx: CommandContext) -> None:
        Repo.init(str(path), mkdir=True, **self._execute_kwargs(ctx))

    def list_remotes(self, path: Path, ctx: CommandContext) -> str:
        return Repo(str(path)).git.remote(**self._execute_kwargs(ctx))

    def set_remote_url(
        self, path: Path, name: str, url: str, ctx: CommandContext
    ) -> None:
        Repo(str(path)).git.remote("set-url", name, url, **self._execute_kwargs(ctx))

    def add_remote(self, path: Path, name: str, url: str, ctx: CommandContext) -> None:
        Repo(str(path)).git.remote("add", name, url, **self._execute_kwargs(ctx))

    def fetch(self, path: Path, ctx: CommandContext) -> None:
        Repo(str(path)).git.fetch(ORIGIN, **self._execute_kwargs(ctx))

    def checkout(self, path: Path, branch: str, ctx: CommandContext) -> None:
        Repo(str(path)).git.checkout(branch, **self._execute_kwargs(ctx))

    def list_remote_refs(self, url: str, ctx: CommandContext) -> str:
        return Git().ls_remote("--refs", url, **self._execute_kwargs(ctx))


def has_remote(remotes_output: str, name: str) -> bool:
    """Check whether a remote name appears in ``git remote`` output."""
    return name in (line.strip() for line in remotes_output.splitlines())


def configure_origin(
    backend: GitBackend, path: Path, url: str, ctx: CommandContext
) -> None:
    """
    Make sure the repository at path has an ``origin`` remote pointing at url.

    An existing origin is re-pointed, otherwise one is added, so calling this
    repeatedly never creates a duplicate remote.
    """
    remotes = backend.list_remotes(path, ctx)
    if has_remote(remotes, ORIGIN):
        logger.info(f"Remote '{ORIGIN}' exists in {path}, updating remote URL")
        backend.set_remote_url(path, ORIGIN, url, ctx)
    else:
        logger.info(f"Adding remote '{ORIGIN}' to {path}")
        backend.add_remote(path, ORIGIN, url, ctx)
