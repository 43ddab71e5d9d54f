"""Folder naming for branch checkouts"""

import hashlib
import logging
import re
from typing import Dict, List

logger = logging.getLogger(__name__)

# Characters that are not allowed in a path component on at least one
# of the supported filesystems.
INVALID_PATH_CHARS = re.compile(r'[<>:"/\\|?*]')


def sanitize_folder_name(name: str) -> str:
    """
    Replace characters that are illegal in a folder name with an underscore.

    Examples:
        feature/login -> feature_login
        fix:issue?42  -> fix_issue_42
        main          -> main
    """
    return INVALID_PATH_CHARS.sub("_", name)


def validate_folder_name(name: str) -> str:
    """Check that name can be used as a single folder below the mirror root."""
    name = name.strip()
    if not name:
        raise ValueError("name must not be empty")
    if name in (".", ".."):
        raise ValueError(f"name '{name}' does not name a folder")
    if sanitize_folder_name(name) != name:
        raise ValueError(f"name '{name}' contains characters not allowed in a folder")
    return name


def disambiguate_folder_name(folder: str, branch: str) -> str:
    """Folder used by a branch whose sanitized name is taken by another branch."""
    digest = hashlib.sha1(branch.encode("utf-8")).hexdigest()[:8]
    return f"{folder}__{digest}"


def assign_folder_names(branches: List[str]) -> Dict[str, str]:
    """
    Map each branch to a folder name that is unique within the set.

    The first branch (in the given order) that sanitizes to a given name keeps
    the plain sanitized name. Every later branch colliding with it gets a
    suffix derived from its own name, so the suffix is stable across runs.

    Args:
        branches: Branch names in remote-reported order

    Returns:
        Dictionary of branch name -> folder name
    """
    folders: Dict[str, str] = {}
    owners: Dict[str, str] = {}

    for branch in branches:
        folder = sanitize_folder_name(branch)
        if folder in owners and owners[folder] != branch:
            unique = disambiguate_folder_name(folder, branch)
            logger.warning(
                f"Branch '{branch}' collides with '{owners[folder]}' on folder "
                f"'{folder}', using '{unique}' instead"
            )
            folder = unique
        owners.setdefault(folder, branch)
        folders[branch] = folder

    return folders
