"""Process entry: run the group and turn every outcome into an exit code.

``lib_cli_exit_tools.run_cli`` cannot pass ``ctx.obj``, so the group runs
with ``standalone_mode=False`` and Click's own exits, usage errors and
everything else are resolved here. Unexpected exceptions are printed by
``lib_cli_exit_tools``, truncated unless ``--traceback`` was given.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Final

import click
import lib_cli_exit_tools
import lib_log_rich.runtime

from station_mail import __init__conf__

from .session import set_traceback

if TYPE_CHECKING:
    from station_mail.composition import AppServices

_SHORT_TRACE_CHARS: Final[int] = 500
_FULL_TRACE_CHARS: Final[int] = 10_000


@contextmanager
def _traceback_flags_kept(restore: bool) -> Iterator[None]:
    flags = lib_cli_exit_tools.config
    saved = (flags.traceback, flags.traceback_force_color)
    try:
        yield
    finally:
        if restore:
            flags.traceback, flags.traceback_force_color = saved


def _print_failure(exc: BaseException) -> int:
    """Print the exception being handled and return its exit code."""
    verbose = bool(lib_cli_exit_tools.config.traceback)
    set_traceback(verbose)
    limit = _FULL_TRACE_CHARS if verbose else _SHORT_TRACE_CHARS
    lib_cli_exit_tools.print_exception_message(trace_back=verbose, length_limit=limit)
    return lib_cli_exit_tools.get_system_exit_code(exc)


def _stop_logging() -> None:
    # Worker threads share the runtime; only the main thread may close it.
    if threading.current_thread() is threading.main_thread() and lib_log_rich.runtime.is_initialised():
        lib_log_rich.runtime.shutdown()


def main(
    argv: Sequence[str] | None = None,
    *,
    services_factory: Callable[[], AppServices] | None = None,
    restore_traceback: bool = True,
) -> int:
    """Run ``station-mail`` and return the process exit code.

    Args:
        argv: Arguments without the program name. ``None`` reads ``sys.argv``.
        services_factory: Builds the port implementations; callers pass
            :func:`station_mail.composition.build_production`.
        restore_traceback: Put the traceback flags back afterwards.

    Raises:
        ValueError: If no services factory is given.
    """
    if services_factory is None:
        raise ValueError("services_factory is required; pass build_production from the composition layer")

    from .root import cli

    args = list(argv) if argv is not None else sys.argv[1:]
    with _traceback_flags_kept(restore_traceback):
        try:
            cli.main(args=args, prog_name=__init__conf__.shell_command, obj=services_factory, standalone_mode=False)
        except click.exceptions.Exit as exc:
            return exc.exit_code
        except click.ClickException as exc:
            exc.show()
            return exc.exit_code
        except BaseException as exc:  # SystemExit from send-adif and KeyboardInterrupt included
            return _print_failure(exc)
        finally:
            _stop_logging()
    return 0


__all__ = ["main"]
