import click

from branchmirror.git.urls import is_valid_remote_url
from branchmirror.naming import validate_folder_name


def validate_remote_url(value: str) -> str:
    """Validate a repository URL typed at a prompt or given as argument."""
    value = (value or "").strip()
    if not is_valid_remote_url(value):
        raise click.BadParameter(
            "Please enter a valid repository URL (SSH or HTTPS), e.g. "
            "git@github.com:owner/repo.git or https://github.com/owner/repo.git"
        )
    return value


def url_callback(ctx, param, value):
    """Click callback validating an optional URL argument."""
    if value is None:
        return value
    return validate_remote_url(value)


def validate_repository_name(value: str) -> str:
    """Validate a repository folder name typed at a prompt or given as option."""
    try:
        return validate_folder_name(value or "")
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def name_callback(ctx, param, value):
    """Click callback validating an optional repository folder name."""
    if value is None:
        return value
    return validate_repository_name(value)
