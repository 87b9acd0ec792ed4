"""Value objects exchanged between the composer, orchestrator and transport."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

#: A single logbook entry handed to the attachment compositor.
Record = Mapping[str, Any]

#: ``(username, password)`` for SMTP ``AUTH PLAIN``.
SmtpCredentials = tuple[str, str]


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """A framed message ready for one delivery.

    Attributes:
        sender: Envelope sender. Blank means "use the configured default".
        recipients: Envelope recipients in ``RCPT TO`` order.
        payload: Complete RFC 5322 message (headers and body) as bytes.

    Example:
        >>> msg = OutboundMessage(sender="", recipients=("to@example.com",), payload=b"Subject: hi\\r\\n\\r\\nhi")
        >>> msg.recipients
        ('to@example.com',)
    """

    sender: str
    recipients: tuple[str, ...]
    payload: bytes


__all__ = ["OutboundMessage", "Record", "SmtpCredentials"]
