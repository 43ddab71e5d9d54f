"""
Materialize a single branch as a standalone repository folder.

A branch folder is built in a hidden staging directory next to its final
location and renamed into place only once the checkout succeeded. The final
folder existing on disk therefore always means a complete checkout, and a
branch that failed half-way is retried on the next run instead of being
mistaken for a finished one.
"""

import logging
import os
import shutil
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from filelock import FileLock

from branchmirror.git.backend import (
    CommandContext,
    GitBackend,
    GitPythonBackend,
    MirrorCancelled,
    configure_origin,
)
from branchmirror.git.refs import checked_out_branch
from branchmirror.naming import disambiguate_folder_name, sanitize_folder_name

logger = logging.getLogger(__name__)


class BranchState(Enum):
    SKIPPED = "skipped"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BranchResult:
    branch: str
    path: Path
    state: BranchState
    error: Optional[str] = None


def lock_path_for(target: Path) -> Path:
    """Lock file guarding the creation of a branch folder."""
    return target.parent / f".{target.name}.lock"


class BranchMaterializer:
    """Creates one checked-out repository folder per branch."""

    def __init__(self, backend: Optional[GitBackend] = None):
        self.backend = backend if backend is not None else GitPythonBackend()

    def materialize(
        self,
        remote_url: str,
        branch_name: str,
        parent_path: Union[str, Path],
        folder_name: Optional[str] = None,
        ctx: Optional[CommandContext] = None,
    ) -> BranchResult:
        """
        Check out branch_name of remote_url into its own folder under parent_path.

        If the folder already exists nothing is done. A folder left by an
        earlier run for a different branch is never reused for this one.
        Failures are logged and
        reported in the result, they never propagate; only cancellation does.

        Args:
            remote_url: URL of the remote repository
            branch_name: Branch to check out
            parent_path: Directory that holds the branch folders
            folder_name: Folder to use instead of the sanitized branch name
            ctx: Timeout and cancellation settings for the git calls

        Returns:
            BranchResult with the terminal state of this branch
        """
        ctx = ctx if ctx is not None else CommandContext()
        target = self._resolve_target(Path(parent_path), branch_name, folder_name)

        if target.exists():
            logger.info(
                f"The subfolder {target} already exists. Skipping branch {branch_name}."
            )
            return BranchResult(branch_name, target, BranchState.SKIPPED)

        lock_path = lock_path_for(target)
        staging = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with FileLock(str(lock_path)):
                # Another process may have finished this branch while we waited
                if target.exists():
                    logger.info(
                        f"The subfolder {target} was created concurrently. "
                        f"Skipping branch {branch_name}."
                    )
                    return BranchResult(branch_name, target, BranchState.SKIPPED)

                token = uuid.uuid4().hex[:8]
                staging = target.parent / f".{target.name}.{token}.partial"
                staging.mkdir()
                logger.debug(f"Building {branch_name} in staging folder {staging}")
                self._build(remote_url, branch_name, staging, ctx)

                os.rename(staging, target)
                staging = None

            # Later holders of this lock find the target and skip
            try:
                lock_path.unlink(missing_ok=True)
            except OSError as e:
                logger.debug(f"Could not remove lock file {lock_path}: {e}")

            logger.info(f"Branch {branch_name} has been checked out into {target}")
            return BranchResult(branch_name, target, BranchState.DONE)

        except MirrorCancelled:
            logger.warning(f"Cloning of branch {branch_name} was cancelled")
            raise
        except Exception as e:
            logger.error(f"Error cloning branch {branch_name}: {e}")
            return BranchResult(branch_name, target, BranchState.FAILED, str(e))
        finally:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)

    @staticmethod
    def _resolve_target(
        parent: Path, branch_name: str, folder_name: Optional[str]
    ) -> Path:
        """
        Pick the folder for branch_name, honouring folders from earlier runs.

        A folder already holding this branch wins. If the preferred folder
        holds a different branch, the branch moves to its disambiguated name.
        """
        plain = sanitize_folder_name(branch_name)
        unique = disambiguate_folder_name(plain, branch_name)
        preferred = folder_name or plain

        for name in dict.fromkeys([preferred, plain, unique]):
            if checked_out_branch(parent / name) == branch_name:
                return parent / name

        owner = checked_out_branch(parent / preferred)
        if owner is not None:
            logger.warning(
                f"Folder '{preferred}' already holds branch '{owner}', "
                f"so branch '{branch_name}' collides with it; using '{unique}' instead"
            )
            return parent / unique
        return parent / preferred

    def _build(
        self, remote_url: str, branch_name: str, path: Path, ctx: CommandContext
    ) -> None:
        logger.info(f"Initializing git repository for branch {branch_name}")
        self.backend.init_repository(path, ctx)

        configure_origin(self.backend, path, remote_url, ctx)

        logger.debug(f"Fetching remote branches for {branch_name}")
        self.backend.fetch(path, ctx)

        logger.info(f"Checking out branch {branch_name}")
        self.backend.checkout(path, branch_name, ctx)
