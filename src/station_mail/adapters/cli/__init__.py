"""The ``station-mail`` command line: a thin driver around the email service.

Nothing in the core imports this package.
"""

from __future__ import annotations

from .exit_codes import ExitCode
from .main import main
from .root import cli
from .send_adif import cli_send_adif
from .session import CommandSession, session_from, set_traceback

__all__ = [
    "CommandSession",
    "ExitCode",
    "cli",
    "cli_send_adif",
    "main",
    "session_from",
    "set_traceback",
]
