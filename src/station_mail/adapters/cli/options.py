"""Building blocks of ``send-adif``: relay overrides, record loading,
service wiring and the failure-to-exit-code table.
"""

from __future__ import annotations

import functools
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, Final, NoReturn, cast

import orjson
import rich_click as click

from station_mail.adapters.email import EmailConfig, EmailService
from station_mail.domain.errors import ConfigurationError, DeliveryError, NotInitializedError
from station_mail.domain.models import Record

from .exit_codes import ExitCode
from .session import CommandSession

logger = logging.getLogger(__name__)


def filter_sentinels(**kwargs: Any) -> dict[str, Any]:
    """Drop options the user did not pass (``None`` values).

    Example:
        >>> filter_sentinels(host="relay", port=None)
        {'host': 'relay'}
    """
    return {k: v for k, v in kwargs.items() if v is not None}


def apply_validated_overrides(base_config: EmailConfig, overrides: dict[str, Any]) -> EmailConfig:
    """Apply overrides with full Pydantic validation.

    Merges into a dict and re-validates instead of ``model_copy(update=...)``
    so field validators run on the overridden values.

    Raises:
        pydantic.ValidationError: When overrides contain invalid values.
    """
    if not overrides:
        return base_config
    merged = {**base_config.model_dump(), **overrides}
    return EmailConfig.model_validate(merged)


def smtp_config_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Apply SMTP override options to a Click command.

    Every relay setting from the ``[email]`` section can be overridden for a
    single invocation.
    """
    options = [
        click.option("--host", default=None, help="Override SMTP relay host"),
        click.option("--port", type=int, default=None, help="Override SMTP relay port"),
        click.option("--username", default=None, help="Override SMTP authentication username"),
        click.option("--password", default=None, help="Override SMTP authentication password"),
        click.option("--dial-timeout", type=float, default=None, help="Override connect timeout in seconds"),
        click.option("--retry-count", type=int, default=None, help="Override extra attempts after a failure"),
        click.option("--retry-delay", type=float, default=None, help="Override pause between attempts in seconds"),
        click.option("--enable/--disable", "enabled", default=None, help="Override the email enabled switch"),
    ]
    return functools.reduce(lambda f, opt: opt(f), reversed(options), func)


def load_records(path: Path) -> list[Record]:
    """Read a JSON array of record objects from *path*.

    Raises:
        FileNotFoundError: When *path* does not exist.
        ValueError: When the file is not a JSON array of objects.
    """
    data: object = orjson.loads(path.read_bytes())
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of records")
    records = cast(list[object], data)
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"record #{index} in {path} is not a JSON object")
    return cast(list[Record], records)


def build_email_service(session: CommandSession, overrides: dict[str, Any]) -> EmailService:
    """Wire an EmailService from the command session and option overrides.

    Override validation happens inside the configuration provider, so bad
    values surface as a ``ConfigurationError`` from ``initialize``.
    """
    config = session.config
    loader = session.services.load_email_config_from_dict

    def provide() -> EmailConfig:
        return apply_validated_overrides(loader(config.as_dict()), overrides)

    return EmailService(
        config_provider=provide,
        logger=logging.getLogger("station_mail.email"),
        deliver=session.services.deliver_message,
        compositor=session.services.compose_attachment,
    )


# Checked in order; the first matching row decides the exit code.
_FAILURE_TABLE: Final[tuple[tuple[type[Exception] | tuple[type[Exception], ...], str, ExitCode], ...]] = (
    ((ConfigurationError, NotInitializedError), "Configuration error", ExitCode.CONFIG_ERROR),
    (FileNotFoundError, "Records file not found", ExitCode.FILE_NOT_FOUND),
    (ValueError, "Invalid export parameters", ExitCode.INVALID_ARGUMENT),
    (DeliveryError, "Failed to send email", ExitCode.SMTP_FAILURE),
)


def run_export(operation: Callable[[], bool], *, recipients: list[str] | None) -> None:
    """Run *operation* and report the outcome on the terminal.

    *operation* returns True when a message went out and False when email
    is disabled. Failures are matched against ``_FAILURE_TABLE``; anything
    unmatched exits with ``GENERAL_ERROR`` and a logged traceback, or is
    re-raised when ``DEVELOPMENT_MODE`` is set.

    Raises:
        SystemExit: On any failure.
    """
    try:
        sent = operation()
    except Exception as exc:
        for kinds, summary, code in _FAILURE_TABLE:
            if isinstance(exc, kinds):
                _exit_with(exc, summary, code)
        if os.environ.get("DEVELOPMENT_MODE"):
            raise
        _exit_with(exc, "Unexpected error", ExitCode.GENERAL_ERROR, log_traceback=True)

    if not sent:
        click.echo("\nEmail is disabled in the configuration; nothing was sent.")
        return
    click.echo("\nEmail sent successfully!")
    logger.info("ADIF export mailed", extra={"recipients": recipients})


def _exit_with(exc: Exception, summary: str, code: ExitCode, *, log_traceback: bool = False) -> NoReturn:
    logger.error(
        f"send-adif failed: {summary}",
        extra={"error": str(exc), "error_type": type(exc).__name__, "exit_code": int(code)},
        exc_info=log_traceback,
    )
    click.echo(f"\nError: {summary} - {exc}", err=True)
    raise SystemExit(code)


__all__ = [
    "apply_validated_overrides",
    "build_email_service",
    "filter_sentinels",
    "load_records",
    "run_export",
    "smtp_config_options",
]
