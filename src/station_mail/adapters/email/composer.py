"""MIME composition of the logbook export message.

Builds a ``multipart/mixed`` message with a quoted-printable plain-text part
and a base64 attachment produced by the attachment compositor. Headers are
written in a fixed order and the whole message is serialised with CRLF line
endings, ready to be streamed as the SMTP ``DATA`` section.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from email import encoders
from email.charset import QP, Charset
from email.errors import MessageError
from email.message import Message
from email.mime.base import MIMEBase
from email.mime.text import MIMEText
from email.policy import SMTP
from email.utils import format_datetime, make_msgid
from typing import TYPE_CHECKING

from station_mail.domain.addresses import split_recipients
from station_mail.domain.errors import CompositionError
from station_mail.domain.models import OutboundMessage, Record

from .config import EmailConfig
from .identity import local_identity

if TYPE_CHECKING:
    from station_mail.application.ports import ComposeAttachment

logger = logging.getLogger(__name__)

ATTACHMENT_SUFFIX = "-export.adi"


def new_boundary() -> str:
    """Return a multipart boundary built from the millisecond clock and 96 random bits."""
    return f"{time.time_ns() // 1_000_000:x}{secrets.token_hex(12)}"


def attachment_filename(moment: datetime) -> str:
    """Return the export filename for *moment*.

    Example:
        >>> attachment_filename(datetime(2026, 10, 18, 7, 5, 9))
        '20261018070509-export.adi'
    """
    return moment.strftime("%Y%m%d%H%M%S") + ATTACHMENT_SUFFIX


def _resolve_recipients(config: EmailConfig, recipients: Sequence[str] | None) -> list[str]:
    if recipients:
        resolved = [address.strip() for address in recipients if address.strip()]
    else:
        resolved = split_recipients(config.to)
    if not resolved:
        raise CompositionError("email TO address cannot be empty")
    return resolved


def _text_part(body: str) -> MIMEText:
    charset = Charset("utf-8")
    charset.body_encoding = QP
    part = MIMEText(body, "plain", charset, policy=SMTP)
    del part["MIME-Version"]
    return part


def _attachment_part(content: str, filename: str) -> MIMEBase:
    part = MIMEBase("application", "octet-stream", policy=SMTP, name=filename)
    part.set_payload(content.encode("utf-8"))
    encoders.encode_base64(part)
    part.add_header("Content-Disposition", "attachment", filename=filename)
    del part["MIME-Version"]
    return part


def _envelope(headers: dict[str, str]) -> Message:
    envelope = Message(policy=SMTP)
    for name, value in headers.items():
        envelope[name] = value
    return envelope


def compose_export_message(
    *,
    config: EmailConfig,
    records: Sequence[Record],
    compositor: ComposeAttachment,
    from_address: str = "",
    subject: str = "",
    body: str = "",
    recipients: Sequence[str] | None = None,
    now: datetime | None = None,
    identity: str | None = None,
) -> OutboundMessage:
    """Compose the export email with the records attached as an ADIF file.

    Explicit arguments win over the configuration defaults; blank strings
    and an empty recipient list fall back to ``from_address``, ``to``,
    ``subject`` and ``body`` from *config*.

    Args:
        config: Email settings providing defaults.
        records: Logbook entries to attach. Must not be empty.
        compositor: Turns *records* into the attachment text.
        from_address: Sender override.
        subject: Subject override.
        body: Plain-text body override.
        recipients: Recipient override; replaces the configured list entirely.
        now: Timestamp for ``Date`` and the attachment name. Defaults to now (UTC).
        identity: Domain part of the ``Message-ID``. Defaults to the local hostname.

    Returns:
        The serialised message together with its resolved sender and recipients.

    Raises:
        CompositionError: When the sender or recipients cannot be resolved,
            *records* is empty, the compositor fails, or encoding fails.
    """
    sender = from_address.strip() or (config.from_address or "")
    if not sender:
        raise CompositionError("email from address cannot be empty")
    tos = _resolve_recipients(config, recipients)
    subject = subject.strip() or config.subject
    body = body.strip() or config.body
    if not records:
        raise CompositionError("record set cannot be empty")

    try:
        attachment_text = compositor(records)
    except ValueError as exc:
        raise CompositionError(f"failed to compose attachment: {exc}") from exc

    moment = now if now is not None else datetime.now(timezone.utc)
    filename = attachment_filename(moment)
    boundary = new_boundary()
    headers = {
        "From": sender,
        "To": ", ".join(tos),
        "Subject": subject,
        "Date": format_datetime(moment.astimezone(timezone.utc)),
        "Message-ID": make_msgid(domain=identity or local_identity()),
        "MIME-Version": "1.0",
        "Content-Type": f'multipart/mixed; boundary="{boundary}"',
    }

    try:
        envelope = _envelope(headers)
        envelope.attach(_text_part(body))
        envelope.attach(_attachment_part(attachment_text, filename))
        payload = envelope.as_bytes()
    except (UnicodeError, LookupError, MessageError) as exc:
        raise CompositionError(f"failed to encode email message: {exc}") from exc

    logger.debug(
        "Composed export message",
        extra={"recipients": tos, "attachment": filename, "records": len(records), "size": len(payload)},
    )
    return OutboundMessage(sender=sender, recipients=tuple(tos), payload=payload)


__all__ = [
    "ATTACHMENT_SUFFIX",
    "attachment_filename",
    "compose_export_message",
    "new_boundary",
]
