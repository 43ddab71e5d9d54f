import click

from .utils.logging import configure_logging


def _set_debug(ctx, param, value: bool) -> bool:
    """Callback function for debug flag"""
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)

    # A --debug given on the group stays on for its subcommands
    debug = bool(value) or root_ctx.obj.get("DEBUG", False)
    root_ctx.obj["DEBUG"] = debug

    configure_logging(debug)
    return debug


def add_debug_option(cmd):
    """Decorator to add debug option to commands and groups"""
    decorator = click.option(
        "--debug/--no-debug",
        is_eager=True,
        expose_value=False,
        callback=_set_debug,
        help="Enable debug mode",
    )

    if isinstance(cmd, click.Command):
        if not any(param.name == "debug" for param in cmd.params):
            decorator(cmd)
        return cmd

    return decorator(cmd)
