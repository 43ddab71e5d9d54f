"""Test doubles and helpers shared by the branchmirror tests."""

import subprocess
from pathlib import Path
from typing import Iterable, Optional

from branchmirror.git.backend import CommandContext, GitBackend


def ls_remote_output(*refs: str) -> str:
    """Build ``git ls-remote`` style output for the given refs."""
    return "".join(f"{i:040x}\t{ref}\n" for i, ref in enumerate(refs, start=1))


class RecordingBackend(GitBackend):
    """In-memory GitBackend that records every call it receives.

    ``checkout`` writes a BRANCH file so tests can see what ended up where.
    """

    def __init__(
        self,
        refs: str = "",
        failing_checkouts: Iterable[str] = (),
        refs_error: Optional[Exception] = None,
    ):
        self.refs = refs
        self.failing_checkouts = set(failing_checkouts)
        self.refs_error = refs_error
        self.calls = []
        self.remotes = {}

    def _record(self, ctx: CommandContext, op: str, *args) -> None:
        ctx.check()
        self.calls.append((op,) + tuple(str(a) for a in args))

    def init_repository(self, path, ctx):
        self._record(ctx, "init", path)
        (Path(path) / ".git").mkdir(parents=True, exist_ok=True)
        self.remotes.setdefault(str(path), {})

    def list_remotes(self, path, ctx):
        self._record(ctx, "list_remotes", path)
        return "\n".join(self.remotes.get(str(path), {}))

    def set_remote_url(self, path, name, url, ctx):
        self._record(ctx, "set_remote_url", path, name, url)
        remotes = self.remotes.setdefault(str(path), {})
        if name not in remotes:
            raise RuntimeError(f"No such remote '{name}'")
        remotes[name] = url

    def add_remote(self, path, name, url, ctx):
        self._record(ctx, "add_remote", path, name, url)
        remotes = self.remotes.setdefault(str(path), {})
        if name in remotes:
            raise RuntimeError(f"remote {name} already exists.")
        remotes[name] = url

    def fetch(self, path, ctx):
        self._record(ctx, "fetch", path)

    def checkout(self, path, branch, ctx):
        self._record(ctx, "checkout", path, branch)
        if branch in self.failing_checkouts:
            raise RuntimeError(
                f"error: pathspec '{branch}' did not match any file(s) known to git"
            )
        (Path(path) / "BRANCH").write_text(branch)
        (Path(path) / ".git" / "HEAD").write_text(f"ref: refs/heads/{branch}\n")

    def list_remote_refs(self, url, ctx):
        self._record(ctx, "list_remote_refs", url)
        if self.refs_error is not None:
            raise self.refs_error
        return self.refs

    def ops(self, op: str) -> list:
        return [call for call in self.calls if call[0] == op]

    def checked_out(self) -> list:
        return [call[2] for call in self.ops("checkout")]


def git(*args: str, cwd: Path) -> str:
    """Run git with a fixed identity and return its stdout."""
    result = subprocess.run(
        [
            "git",
            "-c",
            "user.name=Branch Mirror",
            "-c",
            "user.email=mirror@example.com",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


def create_source_repo(path: Path) -> Path:
    """Create a repository with main, develop and feature/x branches.

    Every branch carries a ``branch.txt`` naming it.
    """
    path.mkdir(parents=True, exist_ok=True)
    git("init", cwd=path)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=path)

    for branch in ("main", "develop", "feature/x"):
        if branch != "main":
            git("checkout", "-b", branch, "main", cwd=path)
        (path / "branch.txt").write_text(branch)
        git("add", "branch.txt", cwd=path)
        git("commit", "-m", f"Content for {branch}", cwd=path)

    git("checkout", "main", cwd=path)
    return path
