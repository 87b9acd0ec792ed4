"""``send-adif``: mail a JSON file of logbook records as an ADIF attachment."""

from __future__ import annotations

import logging
from pathlib import Path

import lib_log_rich.runtime
import rich_click as click

from .options import (
    build_email_service,
    filter_sentinels,
    load_records,
    run_export,
    smtp_config_options,
)
from .session import HELP_OPTIONS, session_from

logger = logging.getLogger(__name__)


@click.command("send-adif", context_settings=HELP_OPTIONS)
@click.argument("records_file", type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--to",
    "recipients",
    multiple=True,
    required=False,
    help="Recipient email address (can specify multiple; uses config default if not specified)",
)
@click.option(
    "--from", "from_address", default="", help="Override sender address (uses config default if not specified)"
)
@click.option("--subject", default="", help="Email subject line (uses config default if not specified)")
@click.option("--body", default="", help="Plain-text email body (uses config default if not specified)")
@smtp_config_options
@click.pass_context
def cli_send_adif(
    ctx: click.Context,
    records_file: Path,
    recipients: tuple[str, ...],
    from_address: str,
    subject: str,
    body: str,
    host: str | None,
    port: int | None,
    username: str | None,
    password: str | None,
    dial_timeout: float | None,
    retry_count: int | None,
    retry_delay: float | None,
    enabled: bool | None,
) -> None:
    """Email the records in RECORDS_FILE (a JSON array) as an ADIF export."""
    session = session_from(ctx)
    resolved_recipients = list(recipients) if recipients else None
    extra = {"command": "send-adif", "records_file": str(records_file), "recipients": resolved_recipients}

    overrides = filter_sentinels(
        enabled=enabled,
        host=host,
        port=port,
        username=username,
        password=password,
        dial_timeout=dial_timeout,
        retry_count=retry_count,
        retry_delay=retry_delay,
    )

    def operation() -> bool:
        records = load_records(records_file)
        service = build_email_service(session, overrides)
        service.initialize()
        if service.config is not None and not service.config.enabled:
            logger.warning("email service is disabled in the config")
            return False
        message = service.build_export_message(
            records=records,
            from_address=from_address,
            subject=subject,
            body=body,
            recipients=resolved_recipients,
        )
        logger.info("Sending ADIF export", extra={"records": len(records), "recipients": list(message.recipients)})
        service.send(message)
        return True

    with lib_log_rich.runtime.bind(job_id="cli-send-adif", extra=extra):
        run_export(operation, recipients=resolved_recipients)


__all__ = ["cli_send_adif"]
