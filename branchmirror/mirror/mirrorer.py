"""
Mirror a remote repository as one folder per branch.

Layout produced for ``mirror(url, "git-clone", "repo", True)``::

    git-clone/
    └── repo/                 # repository with origin -> url
        ├── main/             # independent checkout of main
        ├── develop/          # independent checkout of develop
        └── feature_login/    # independent checkout of feature/login
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from branchmirror.git.backend import (
    CommandContext,
    GitBackend,
    GitPythonBackend,
    MirrorCancelled,
    configure_origin,
)
from branchmirror.git.refs import parse_remote_branches, select_branches
from branchmirror.mirror.materializer import (
    BranchMaterializer,
    BranchResult,
    BranchState,
)
from branchmirror.naming import assign_folder_names

logger = logging.getLogger(__name__)


@dataclass
class MirrorReport:
    """Outcome of mirroring one repository."""

    url: str
    repo_path: Path
    branches: List[str] = field(default_factory=list)
    results: List[BranchResult] = field(default_factory=list)
    cancelled: bool = False
    error: Optional[str] = None

    def _with_state(self, state: BranchState) -> List[BranchResult]:
        return [r for r in self.results if r.state is state]

    @property
    def done(self) -> List[BranchResult]:
        return self._with_state(BranchState.DONE)

    @property
    def skipped(self) -> List[BranchResult]:
        return self._with_state(BranchState.SKIPPED)

    @property
    def failed(self) -> List[BranchResult]:
        return self._with_state(BranchState.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed and self.error is None and not self.cancelled

    def summary(self) -> str:
        return (
            f"{self.url}: {len(self.done)} cloned, {len(self.skipped)} skipped, "
            f"{len(self.failed)} failed"
        )


class RepositoryMirrorer:
    """Discovers the branches of a remote and materializes the selected ones."""

    def __init__(
        self,
        backend: Optional[GitBackend] = None,
        materializer: Optional[BranchMaterializer] = None,
    ):
        self.backend = backend if backend is not None else GitPythonBackend()
        self.materializer = (
            materializer
            if materializer is not None
            else BranchMaterializer(self.backend)
        )

    def mirror(
        self,
        remote_url: str,
        root_path: Union[str, Path],
        repo_name: str,
        clone_all_branches: bool,
        ctx: Optional[CommandContext] = None,
    ) -> MirrorReport:
        """
        Mirror remote_url into ``<root_path>/<repo_name>``, one folder per branch.

        Errors never propagate: they are logged and recorded in the report.

        Args:
            remote_url: SSH or HTTPS URL of the remote repository
            root_path: Directory holding all mirrored repositories
            repo_name: Folder name for this repository under root_path
            clone_all_branches: Clone every branch when True, otherwise only
                                main (or master)
            ctx: Timeout and cancellation settings for the git calls

        Returns:
            MirrorReport describing what happened to each branch
        """
        ctx = ctx if ctx is not None else CommandContext()
        repo_path = Path(root_path) / repo_name
        report = MirrorReport(url=remote_url, repo_path=repo_path)

        try:
            if not repo_path.exists():
                logger.info(f"The folder {repo_path} does not exist. Creating it...")
                repo_path.mkdir(parents=True, exist_ok=True)

            logger.info(f"Initializing git repository in folder {repo_path}...")
            self.backend.init_repository(repo_path, ctx)
            configure_origin(self.backend, repo_path, remote_url, ctx)

            logger.info("Fetching remote branch information...")
            raw_refs = self.backend.list_remote_refs(remote_url, ctx)
            if not raw_refs:
                logger.warning(
                    "Could not fetch branch information from the remote repository."
                )
                return report

            report.branches = parse_remote_branches(raw_refs)
            if not report.branches:
                logger.warning("No remote branches found.")
                return report

            logger.info(f"Remote branches: {', '.join(report.branches)}")

            selected = select_branches(report.branches, clone_all_branches)
            folders = assign_folder_names(selected)
            for branch in selected:
                ctx.check()
                result = self.materializer.materialize(
                    remote_url, branch, repo_path, folder_name=folders[branch], ctx=ctx
                )
                report.results.append(result)

        except MirrorCancelled:
            logger.warning(f"Mirroring of {remote_url} was cancelled")
            report.cancelled = True
        except Exception as e:
            logger.error(f"Error cloning repository {remote_url}: {e}")
            report.error = str(e)

        return report


def mirror(
    remote_url: str,
    root_path: Union[str, Path],
    repo_name: str,
    clone_all_branches: bool,
    ctx: Optional[CommandContext] = None,
) -> MirrorReport:
    """Mirror a repository with the default GitPython backend."""
    return RepositoryMirrorer().mirror(
        remote_url, root_path, repo_name, clone_all_branches, ctx=ctx
    )
