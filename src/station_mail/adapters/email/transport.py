"""SMTP transport negotiation over smtplib.

Provides :func:`deliver_with_tls`, which tries an implicit-TLS connection
first and falls back to a plain connection that must upgrade with STARTTLS.
Plaintext delivery is never attempted.

Contents:
    * :class:`Dialer` - Protocol for opening SMTP connections.
    * :class:`SmtpDialer` - smtplib/ssl implementation used in production.
    * :func:`deliver_with_tls` - One delivery attempt, raising on failure.
"""

from __future__ import annotations

import logging
import smtplib
import ssl
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from station_mail.domain.addresses import split_host_port
from station_mail.domain.errors import DeliveryError, StartTLSRequiredError
from station_mail.domain.models import SmtpCredentials

from .identity import local_identity

logger = logging.getLogger(__name__)

#: Errors raised by smtplib and the socket layer during a session.
SMTP_ERRORS: tuple[type[Exception], ...] = (OSError, smtplib.SMTPException)


class Dialer(Protocol):
    """Opens SMTP connections and supplies the TLS context for upgrades."""

    def implicit_tls(self, host: str, port: int, timeout: float, local_hostname: str) -> smtplib.SMTP: ...

    def plain(self, host: str, port: int, timeout: float, local_hostname: str) -> smtplib.SMTP: ...

    def tls_context(self) -> ssl.SSLContext: ...


@dataclass(frozen=True, slots=True)
class SmtpDialer:
    """Production dialer backed by ``smtplib.SMTP_SSL`` and ``smtplib.SMTP``.

    Both connections verify the server certificate against *host* using the
    context returned by ``context_factory``.
    """

    context_factory: Callable[[], ssl.SSLContext] = ssl.create_default_context

    def implicit_tls(self, host: str, port: int, timeout: float, local_hostname: str) -> smtplib.SMTP:
        return smtplib.SMTP_SSL(
            host,
            port,
            local_hostname=local_hostname,
            timeout=timeout,
            context=self.context_factory(),
        )

    def plain(self, host: str, port: int, timeout: float, local_hostname: str) -> smtplib.SMTP:
        return smtplib.SMTP(host, port, local_hostname=local_hostname, timeout=timeout)

    def tls_context(self) -> ssl.SSLContext:
        return self.context_factory()


def _announce(session: smtplib.SMTP, identity: str) -> None:
    """Send EHLO, falling back to HELO for servers without ESMTP."""
    code, reply = session.ehlo(identity)
    if 200 <= code < 300:
        return
    code, reply = session.helo(identity)
    if not 200 <= code < 300:
        raise smtplib.SMTPHeloError(code, reply)


def _converse(
    session: smtplib.SMTP,
    *,
    dialer: Dialer,
    identity: str,
    already_secured: bool,
    credentials: SmtpCredentials | None,
    sender: str,
    recipients: Sequence[str],
    payload: bytes,
) -> None:
    _announce(session, identity)

    if not already_secured:
        if not session.has_extn("starttls"):
            raise StartTLSRequiredError("smtp server does not support STARTTLS; TLS required")
        session.starttls(context=dialer.tls_context())
        # Capabilities must be queried again on the encrypted channel (RFC 3207).
        _announce(session, identity)

    if credentials is not None:
        session.user, session.password = credentials
        session.auth("PLAIN", session.auth_plain)

    code, reply = session.mail(sender)
    if code != 250:
        raise smtplib.SMTPSenderRefused(code, reply, sender)
    for recipient in recipients:
        code, reply = session.rcpt(recipient)
        if code not in (250, 251):
            raise smtplib.SMTPRecipientsRefused({recipient: (code, reply)})

    code, reply = session.data(payload)
    if code != 250:
        raise smtplib.SMTPDataError(code, reply)


def _quit_quietly(session: smtplib.SMTP, address: str) -> None:
    """Close the session after the relay accepted the message.

    The message is already committed server-side at this point, so a failing
    QUIT must not surface as an error that would trigger a duplicate send.
    """
    try:
        session.quit()
    except SMTP_ERRORS:
        logger.debug("QUIT failed after message was accepted", extra={"addr": address}, exc_info=True)
        session.close()


def _open_session(
    dialer: Dialer,
    *,
    host: str,
    port: int,
    address: str,
    timeout: float,
    identity: str,
) -> tuple[smtplib.SMTP, bool]:
    """Return an open session and whether it is already encrypted."""
    try:
        return dialer.implicit_tls(host, port, timeout, identity), True
    except SMTP_ERRORS as tls_exc:
        logger.debug(
            "Implicit TLS unavailable, trying STARTTLS",
            extra={"addr": address, "error": str(tls_exc)},
        )
        try:
            return dialer.plain(host, port, timeout, identity), False
        except SMTP_ERRORS as exc:
            raise DeliveryError(f"cannot connect to {address}: implicit TLS: {tls_exc}; plain: {exc}") from exc


def deliver_with_tls(
    *,
    address: str,
    credentials: SmtpCredentials | None,
    sender: str,
    recipients: Sequence[str],
    payload: bytes,
    dial_timeout: float,
    dialer: Dialer | None = None,
    identity: str | None = None,
) -> None:
    """Deliver *payload* to *recipients* through the relay at *address*.

    Args:
        address: Relay as ``host:port`` (IPv6 literals bracketed).
        credentials: ``(username, password)`` for ``AUTH PLAIN``, or None.
        sender: Envelope sender for ``MAIL FROM``.
        recipients: Envelope recipients, sent as ``RCPT TO`` in order.
        payload: Framed message streamed as the ``DATA`` section.
        dial_timeout: Connection timeout in seconds.
        dialer: Connection factory. Defaults to :class:`SmtpDialer`.
        identity: EHLO name. Defaults to the sanitized local hostname.

    Raises:
        StartTLSRequiredError: The plain connection does not offer STARTTLS.
        DeliveryError: Connecting failed or the relay rejected a command.

    Side Effects:
        Network I/O. Each call opens and closes its own connection.
    """
    try:
        host, port = split_host_port(address)
    except ValueError as exc:
        raise DeliveryError(f"invalid smtp address {address!r}") from exc
    dialer = dialer if dialer is not None else SmtpDialer()
    identity = identity or local_identity()

    session, already_secured = _open_session(
        dialer, host=host, port=port, address=address, timeout=dial_timeout, identity=identity
    )
    try:
        _converse(
            session,
            dialer=dialer,
            identity=identity,
            already_secured=already_secured,
            credentials=credentials,
            sender=sender,
            recipients=recipients,
            payload=payload,
        )
    except SMTP_ERRORS as exc:
        session.close()
        raise DeliveryError(f"smtp session with {address} failed: {exc}") from exc
    except BaseException:
        session.close()
        raise

    _quit_quietly(session, address)


__all__ = [
    "SMTP_ERRORS",
    "Dialer",
    "SmtpDialer",
    "deliver_with_tls",
]
