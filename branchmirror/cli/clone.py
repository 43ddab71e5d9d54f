"""cli commands that mirror repositories"""

import signal
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from branchmirror.cli.error_formatting import pretty_print_manifest_error
from branchmirror.cli.utils.logging import logger
from branchmirror.cli.utils.validation import (
    name_callback,
    url_callback,
    validate_remote_url,
    validate_repository_name,
)
from branchmirror.config import get_git_timeout, get_mirror_root
from branchmirror.git import CommandContext, repo_name_from_url
from branchmirror.mirror import MirrorManifest, RepositoryMirrorer


def _command_context(timeout: Optional[float]) -> CommandContext:
    if timeout is None:
        timeout = get_git_timeout()
    return CommandContext(timeout=timeout if timeout else None)


@contextmanager
def cancel_on_interrupt(ctx: CommandContext):
    """
    Turn Ctrl-C into a cancellation of ctx for the duration of the block.

    The first interrupt lets the running branch clean up its staging folder
    and stops the mirror. A second one raises KeyboardInterrupt as usual.
    """

    def _handler(signum, frame):
        if ctx.cancelled:
            raise KeyboardInterrupt
        logger.warning("Interrupted, stopping the mirror (press Ctrl-C again to abort)")
        ctx.cancel()

    # Signal handlers can only be installed from the main thread
    installed = threading.current_thread() is threading.main_thread()
    if installed:
        previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield ctx
    finally:
        if installed:
            signal.signal(signal.SIGINT, previous)


timeout_option = click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    envvar="BRANCHMIRROR_TIMEOUT",
    help="Seconds before a single git command is aborted (0 disables).",
)


@click.command("clone")
@click.argument("url", required=False, callback=url_callback)
@click.option(
    "--root",
    "-r",
    type=click.Path(file_okay=False),
    default=None,
    envvar="BRANCHMIRROR_ROOT",
    help="Parent folder holding all mirrored repositories.",
)
@click.option(
    "--name",
    "-n",
    type=str,
    default=None,
    callback=name_callback,
    help="Folder name for this repository (derived from the URL by default).",
)
@click.option(
    "--all-branches/--main-only",
    "all_branches",
    default=None,
    help="Clone every branch, or only main (falling back to master).",
)
@timeout_option
def clone(
    url: Optional[str],
    root: Optional[str],
    name: Optional[str],
    all_branches: Optional[bool],
    timeout: Optional[float],
):
    """Clone each branch of a repository into its own subfolder.

    Without URL the missing settings are asked for interactively.

    Example:

      branchmirror clone git@github.com:owner/repo.git --all-branches
    """
    interactive = url is None
    if interactive:
        url = click.prompt(
            "Enter the URL of the repository (use SSH or HTTPS)",
            value_proc=validate_remote_url,
        )
        if root is None:
            root = click.prompt(
                "Enter the parent folder where all source code is saved",
                default=str(get_mirror_root()),
            )
        if name is None:
            name = click.prompt(
                "Enter the folder name for the repository",
                default=repo_name_from_url(url),
                value_proc=validate_repository_name,
            )
        if all_branches is None:
            all_branches = click.confirm(
                "Clone all branches? (otherwise only the main branch)",
                default=False,
            )

    root_path = Path(root) if root is not None else get_mirror_root()
    name = name or repo_name_from_url(url)

    with cancel_on_interrupt(_command_context(timeout)) as ctx:
        report = RepositoryMirrorer().mirror(
            url, root_path, name, bool(all_branches), ctx=ctx
        )

    logger.info(report.summary())
    if not report.ok:
        sys.exit(1)


@click.command("batch")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--root",
    "-r",
    type=click.Path(file_okay=False),
    default=None,
    envvar="BRANCHMIRROR_ROOT",
    help="Parent folder, overriding the root given in the manifest.",
)
@timeout_option
def batch(manifest: str, root: Optional[str], timeout: Optional[float]):
    """Mirror every repository listed in a YAML manifest.

    Example manifest:

    \b
      root: ./git-clone
      repositories:
        - url: git@github.com:owner/repo.git
          all_branches: true
    """
    try:
        m = MirrorManifest.from_file(manifest)
    except ValidationError as e:
        logger.error(pretty_print_manifest_error(e, manifest))
        sys.exit(1)
    except (yaml.YAMLError, ValueError, OSError) as e:
        logger.error(f"Failed to read manifest {manifest}: {e}")
        sys.exit(1)

    if not m.repositories:
        logger.info("No repositories listed in manifest")
        return

    if root is not None:
        root_path = Path(root)
    elif m.root:
        root_path = Path(m.root).expanduser()
    else:
        root_path = get_mirror_root()

    mirrorer = RepositoryMirrorer()
    reports = []
    with cancel_on_interrupt(_command_context(timeout)) as ctx:
        for entry in m.repositories:
            reports.append(
                mirrorer.mirror(
                    entry.url, root_path, entry.folder_name, entry.all_branches, ctx=ctx
                )
            )
            if ctx.cancelled:
                break

    for report in reports:
        logger.info(report.summary())

    failed = [r for r in reports if not r.ok]
    if failed:
        logger.warning(f"{len(failed)}/{len(reports)} repositories did not mirror cleanly")
        sys.exit(1)
