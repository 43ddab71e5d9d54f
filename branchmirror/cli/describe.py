"""cli commands describing remotes and existing mirrors"""

import sys

import click
from git.exc import GitCommandError
from rich.console import Console
from rich.table import Table

from branchmirror.cli.utils.logging import logger
from branchmirror.cli.utils.validation import url_callback
from branchmirror.config import get_git_timeout
from branchmirror.git import CommandContext, GitPythonBackend, parse_remote_branches
from branchmirror.mirror import describe_mirror


@click.command("branches")
@click.argument("url", callback=url_callback)
def branches(url: str):
    """List the branches of a remote repository."""
    ctx = CommandContext(timeout=get_git_timeout())
    try:
        raw = GitPythonBackend().list_remote_refs(url, ctx)
    except GitCommandError as e:
        logger.error(f"Could not list branches of {url}: {e}")
        sys.exit(1)

    for name in parse_remote_branches(raw):
        click.echo(name)


@click.command("status")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
def status(path: str):
    """Show the branch folders of a mirrored repository."""
    rows = describe_mirror(path)
    if not rows:
        logger.info(f"No branch folders found in {path}")
        return

    table = Table(title=f"Mirror {path}")
    table.add_column("Folder", style="bold", no_wrap=True)
    table.add_column("Branch", no_wrap=True)
    table.add_column("HEAD", no_wrap=True)
    table.add_column("Origin", overflow="fold")
    for row in rows:
        table.add_row(row["folder"], row["branch"], row["head"], row["url"])

    Console().print(table)
