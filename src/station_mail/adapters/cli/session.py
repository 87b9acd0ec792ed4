"""State the root group hands to ``send-adif`` for one invocation.

Also owns the traceback switch, which lives in ``lib_cli_exit_tools.config``
so its exception printer sees the same preference as the commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

import lib_cli_exit_tools
import rich_click as click
from lib_layered_config import Config

if TYPE_CHECKING:
    from station_mail.composition import AppServices

HELP_OPTIONS: Final[dict[str, list[str]]] = {"help_option_names": ["-h", "--help"]}


@dataclass(frozen=True, slots=True)
class CommandSession:
    """Services and configuration resolved once by the root group."""

    services: AppServices
    config: Config
    profile: str | None = None


def session_from(ctx: click.Context) -> CommandSession:
    """Return the session attached by the root group.

    Raises:
        RuntimeError: When the command runs outside the ``station-mail`` group.
    """
    session = ctx.find_object(CommandSession)
    if session is None:
        raise RuntimeError("send-adif must be invoked through the station-mail group")
    return session


def set_traceback(enabled: bool) -> None:
    """Switch full, colourised tracebacks on or off.

    Example:
        >>> set_traceback(False)
        >>> lib_cli_exit_tools.config.traceback_force_color
        False
    """
    lib_cli_exit_tools.config.traceback = enabled
    lib_cli_exit_tools.config.traceback_force_color = enabled


__all__ = ["HELP_OPTIONS", "CommandSession", "session_from", "set_traceback"]
