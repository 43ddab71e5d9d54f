"""branchmirror CLI"""

import click

from branchmirror import __version__
from branchmirror.cli.clone import batch, clone
from branchmirror.cli.describe import branches, status

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="branchmirror")
@click.pass_context
def cli(ctx):
    """
    Mirror every branch of a git repository into its own folder.
    """
    ctx.ensure_object(dict)


cli.add_command(add_debug_option(clone))
cli.add_command(add_debug_option(batch))
cli.add_command(add_debug_option(branches))
cli.add_command(add_debug_option(status))

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
