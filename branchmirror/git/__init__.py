"""
Git operations for branchmirror.

The mirroring core talks to git only through the ``GitBackend`` interface;
``GitPythonBackend`` is the implementation used outside of tests.
"""

from .backend import (
    ORIGIN,
    CommandContext,
    GitBackend,
    GitPythonBackend,
    MirrorCancelled,
    configure_origin,
    has_remote,
)
from .refs import checked_out_branch, parse_remote_branches, select_branches
from .urls import is_valid_remote_url, parse_repo_url, repo_name_from_url

__all__ = [
    "ORIGIN",
    "CommandContext",
    "GitBackend",
    "GitPythonBackend",
    "MirrorCancelled",
    "configure_origin",
    "has_remote",
    "checked_out_branch",
    "parse_remote_branches",
    "select_branches",
    "is_valid_remote_url",
    "parse_repo_url",
    "repo_name_from_url",
]
