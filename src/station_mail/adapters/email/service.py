"""Email service: one-time initialisation, message building and delivery.

:class:`EmailService` owns the configuration-derived policy (dial timeout,
retry count and delay, enabled flag), builds export messages through the
composer and drives the transport with a bounded, constant-delay retry loop.

Collaborators (logger, configuration provider, transport, attachment
compositor) are passed to the constructor; the service never looks them up
globally.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from station_mail.adapters.adif import compose_adif
from station_mail.domain.addresses import join_host_port
from station_mail.domain.enums import LifecycleState
from station_mail.domain.errors import ConfigurationError, DeliveryError, NotInitializedError
from station_mail.domain.models import OutboundMessage, Record, SmtpCredentials

from .composer import compose_export_message
from .config import DEFAULT_DIAL_TIMEOUT, EmailConfig
from .transport import deliver_with_tls
from .validation import validate_email_config

if TYPE_CHECKING:
    from station_mail.application.ports import ComposeAttachment, DeliverMessage

#: Zero-argument callable returning the email settings.
EmailConfigProvider = Callable[[], EmailConfig]

# Keywords that may indicate sensitive data in exception messages
_SENSITIVE_KEYWORDS = frozenset(
    {
        "password",
        "credential",
        "secret",
        "token",
        "login",
    }
)


def _sanitize_exception_message(exc: BaseException) -> str:
    """Sanitize exception message to prevent credential exposure.

    Returns a generic message when the original exception text contains
    keywords suggesting sensitive data. The full exception is preserved in
    the chain for DEBUG-level logging.

    Example:
        >>> class FakeExc(Exception): pass
        >>> _sanitize_exception_message(FakeExc("Connection refused"))
        'Connection refused'
        >>> _sanitize_exception_message(FakeExc("bad password for user"))
        'SMTP error details withheld. Check SMTP configuration.'
    """
    message = str(exc)
    if any(keyword in message.lower() for keyword in _SENSITIVE_KEYWORDS):
        return "SMTP error details withheld. Check SMTP configuration."
    return message


class EmailService:
    """Outbound email delivery with a one-shot initialisation gate.

    Example:
        >>> config = EmailConfig(host="smtp.example.com", from_address="op@example.com", enabled=True)
        >>> sent = []
        >>> service = EmailService(
        ...     config_provider=lambda: config,
        ...     logger=logging.getLogger("doctest"),
        ...     deliver=lambda **kwargs: sent.append(kwargs),
        ... )
        >>> service.initialize()
        >>> service.send(OutboundMessage(sender="", recipients=("dx@example.org",), payload=b"hi"))
        >>> sent[0]["sender"], sent[0]["address"]
        ('op@example.com', 'smtp.example.com:587')
    """

    def __init__(
        self,
        *,
        config_provider: EmailConfigProvider | None,
        logger: logging.Logger | None,
        deliver: DeliverMessage = deliver_with_tls,
        compositor: ComposeAttachment = compose_adif,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config_provider = config_provider
        self._logger = logger
        self._deliver = deliver
        self._compositor = compositor
        self._sleep = sleep

        self._lock = threading.Lock()
        self._state = LifecycleState.UNINITIALIZED
        self._init_error: Exception | None = None
        self._config: EmailConfig | None = None
        self._dial_timeout = DEFAULT_DIAL_TIMEOUT

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def config(self) -> EmailConfig | None:
        """Configuration snapshot, or None before initialisation ran."""
        return self._config

    @property
    def dial_timeout(self) -> float:
        return self._dial_timeout

    def initialize(self) -> None:
        """Run the one-time setup; later and concurrent calls share its outcome.

        The first caller checks the collaborators, fetches and validates the
        configuration and derives the dial timeout. Concurrent callers block
        until it finishes. Any failure is final for this instance: the stored
        configuration is marked disabled and every call re-raises the error.

        Raises:
            ConfigurationError: A collaborator is missing, the provider raised,
                or the configuration fails validation.
        """
        if self._state is LifecycleState.READY:
            return
        with self._lock:
            if self._state is LifecycleState.UNINITIALIZED:
                try:
                    self._setup()
                except Exception as exc:
                    self._init_error = exc
                    self._state = LifecycleState.FAILED
                else:
                    self._state = LifecycleState.READY
            if self._init_error is not None:
                raise self._init_error

    def _setup(self) -> None:
        if self._logger is None:
            raise ConfigurationError("logger service has not been set/injected")
        if self._config_provider is None:
            raise ConfigurationError("application config has not been set/injected")

        try:
            config = self._config_provider()
        except Exception as exc:
            raise ConfigurationError(f"getting email config: {exc}") from exc
        self._config = config

        try:
            validate_email_config(config)
        except ConfigurationError:
            self._config = config.model_copy(update={"enabled": False})
            raise

        self._dial_timeout = config.resolved_dial_timeout()

    def _ready_config(self) -> tuple[EmailConfig, logging.Logger]:
        if self._state is not LifecycleState.READY or self._config is None or self._logger is None:
            raise NotInitializedError("email service is not initialized")
        return self._config, self._logger

    def build_export_message(
        self,
        *,
        records: Sequence[Record],
        from_address: str = "",
        subject: str = "",
        body: str = "",
        recipients: Sequence[str] | None = None,
        now: datetime | None = None,
    ) -> OutboundMessage:
        """Compose an export message using the configured defaults.

        See :func:`~station_mail.adapters.email.composer.compose_export_message`.

        Raises:
            NotInitializedError: Before a successful :meth:`initialize`.
            CompositionError: When the message cannot be composed.
        """
        config, _ = self._ready_config()
        return compose_export_message(
            config=config,
            records=records,
            compositor=self._compositor,
            from_address=from_address,
            subject=subject,
            body=body,
            recipients=recipients,
            now=now,
        )

    def send(self, message: OutboundMessage) -> None:
        """Deliver *message*, retrying failed attempts.

        Makes ``retry_count + 1`` attempts with ``retry_delay`` seconds
        between them. A disabled service logs a warning and returns without
        touching the network.

        Raises:
            NotInitializedError: Before a successful :meth:`initialize`.
            ConfigurationError: No sender on the message or in the configuration.
            ValueError: The message has no recipients.
            DeliveryError: Every attempt failed; the last error is the cause.
        """
        config, log = self._ready_config()
        if not config.enabled:
            log.warning("email service is disabled in the config")
            return

        host = config.host
        sender = message.sender.strip() or (config.from_address or "")
        if not sender:
            raise ConfigurationError("email from address cannot be empty")
        if not message.recipients:
            raise ValueError("email message has no recipients")

        address = join_host_port(host, config.port)
        credentials: SmtpCredentials | None = None
        if config.username:
            credentials = (config.username, config.password or "")

        attempts = max(config.retry_count, 0) + 1
        delay = max(config.retry_delay, 0.0)
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            if attempt > 1 and delay > 0:
                self._sleep(delay)
            try:
                self._deliver(
                    address=address,
                    credentials=credentials,
                    sender=sender,
                    recipients=message.recipients,
                    payload=message.payload,
                    dial_timeout=self._dial_timeout,
                )
            except Exception as exc:
                last_error = exc
                log.error(
                    "email send failed",
                    extra={
                        "host": host,
                        "addr": address,
                        "attempt": attempt,
                        "error": _sanitize_exception_message(exc),
                    },
                )
                log.debug("email send failure detail", exc_info=True)
                continue
            log.info("email sent", extra={"host": host, "addr": address, "attempt": attempt})
            return

        raise DeliveryError(
            f"failed to send email after {attempts} attempt(s): {_sanitize_exception_message(last_error)}"
        ) from last_error


__all__ = ["EmailConfigProvider", "EmailService"]
