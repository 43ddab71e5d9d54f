"""Describe the branch folders of a mirrored repository"""

import logging
from pathlib import Path
from typing import List, Union

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from branchmirror.git.backend import ORIGIN

logger = logging.getLogger(__name__)


def describe_mirror(repo_path: Union[str, Path]) -> List[dict]:
    """
    Describe the branch folders found under a mirrored repository folder.

    Hidden entries (the parent's .git, staging folders, lock files) are ignored.

    Args:
        repo_path: Folder created by the mirror for one repository

    Returns:
        List of dictionaries, sorted by folder name, with:
        - folder: Branch folder name
        - branch: Checked-out branch (or "detached" / "unknown")
        - head: Short HEAD commit hash (or "unknown")
        - url: URL of the origin remote (or "unknown")
    """
    repo_path = Path(repo_path)
    if not repo_path.is_dir():
        return []

    results = []
    for folder in sorted(repo_path.iterdir()):
        if folder.name.startswith(".") or not folder.is_dir():
            continue

        info = {
            "folder": folder.name,
            "branch": "unknown",
            "head": "unknown",
            "url": "unknown",
        }

        try:
            repo = Repo(str(folder))
        except (InvalidGitRepositoryError, NoSuchPathError):
            logger.debug(f"{folder} is not a git repository")
            results.append(info)
            continue

        try:
            info["branch"] = (
                "detached" if repo.head.is_detached else repo.active_branch.name
            )
            info["head"] = repo.head.commit.hexsha[:7]
        except (TypeError, ValueError) as e:
            logger.debug(f"Failed to read HEAD of {folder}: {e}")

        if ORIGIN in [remote.name for remote in repo.remotes]:
            info["url"] = repo.remotes[ORIGIN].url

        results.append(info)

    return results
