"""Parsing of remote ref listings and branch selection"""

import logging
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

HEADS_PREFIX = "refs/heads/"

# Candidates for the primary branch, in order of preference
PRIMARY_BRANCHES = ("main", "master")


def parse_remote_branches(raw: str) -> List[str]:
    """
    Extract branch names from ``git ls-remote`` output.

    Each line has the form ``<hash>\\t<ref>``. Only ``refs/heads/*`` entries are
    kept, with the prefix stripped, in the order the remote reported them.

    Example:
        "abc\\trefs/heads/main\\ndef\\trefs/tags/v1\\n" -> ["main"]
    """
    branches = []
    for line in raw.splitlines():
        fields = line.split("\t")
        if len(fields) < 2:
            continue
        ref = fields[1].strip()
        if ref.startswith(HEADS_PREFIX):
            branches.append(ref[len(HEADS_PREFIX) :])
    return branches


def select_branches(branches: List[str], all_branches: bool) -> List[str]:
    """
    Apply the branch selection policy.

    Args:
        branches: Branch names in remote-reported order
        all_branches: Select every branch when True, otherwise only the
                      primary branch (main, falling back to master)

    Returns:
        The branches to materialize, possibly empty
    """
    if all_branches:
        return list(branches)

    for candidate in PRIMARY_BRANCHES:
        if candidate in branches:
            return [candidate]

    logger.warning(
        f"Neither {' nor '.join(PRIMARY_BRANCHES)} found among remote branches "
        f"({', '.join(branches)}), nothing to clone. "
        "Use the all-branches option to clone every branch."
    )
    return []


def checked_out_branch(path: Union[str, Path]) -> Optional[str]:
    """
    Name of the branch checked out in the repository at path.

    Reads ``.git/HEAD`` directly so it works without invoking git. Returns None
    when path is not a repository or its HEAD is detached.
    """
    head = Path(path) / ".git" / "HEAD"
    try:
        content = head.read_text().strip()
    except OSError:
        return None

    prefix = "ref: " + HEADS_PREFIX
    if not content.startswith(prefix):
        return None
    return content[len(prefix) :]
