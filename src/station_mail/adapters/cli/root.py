"""The ``station-mail`` command group.

``ctx.obj`` arrives as a zero-argument services factory. The group builds
the services, loads the layered configuration for ``--profile``, starts
logging and leaves a :class:`CommandSession` behind for ``send-adif``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import rich_click as click

from station_mail import __init__conf__

from .send_adif import cli_send_adif
from .session import HELP_OPTIONS, CommandSession, set_traceback

if TYPE_CHECKING:
    from station_mail.composition import AppServices


@click.group(help=__init__conf__.title, context_settings=HELP_OPTIONS, invoke_without_command=True)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option("--traceback/--no-traceback", default=False, help="Print the full Python traceback when a command fails")
@click.option(
    "--profile",
    default=None,
    metavar="NAME",
    help="Read configuration from the profile/NAME/ layers (e.g. 'contest', 'portable')",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, profile: str | None) -> None:
    set_traceback(traceback)
    factory = ctx.obj
    if not callable(factory):
        raise RuntimeError("station-mail was started without a services factory")
    services: AppServices = factory()

    try:
        config = services.get_config(profile=profile)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--profile") from exc
    services.init_logging(config)
    ctx.obj = CommandSession(services=services, config=config, profile=profile)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(cli_send_adif)


__all__ = ["cli"]
