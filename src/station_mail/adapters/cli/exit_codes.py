"""Exit codes returned by the ``station-mail`` CLI.

Values follow sysexits.h and errno conventions so scripts driving the CLI
can tell a bad configuration from a relay outage.

Contents:
    * :class:`ExitCode` - IntEnum of all exit codes used by this application.
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """POSIX-conventional exit codes for CLI error paths.

    * 0-1: generic success / failure
    * 2: ENOENT (records file missing)
    * 22: EINVAL (bad records or arguments)
    * 69: EX_UNAVAILABLE (relay unreachable or rejected the message)
    * 78: EX_CONFIG (email configuration invalid)

    Example:
        >>> int(ExitCode.SMTP_FAILURE)
        69
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    FILE_NOT_FOUND = 2
    INVALID_ARGUMENT = 22
    SMTP_FAILURE = 69
    CONFIG_ERROR = 78


__all__ = ["ExitCode"]
