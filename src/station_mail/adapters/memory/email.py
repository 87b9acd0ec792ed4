"""In-memory email adapters for testing.

Contents:
    * :class:`DeliverySpy` - Stands in for the SMTP transport and records calls.
    * :func:`load_email_config_from_dict_in_memory` - In-memory config loader.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ...domain.models import SmtpCredentials
from ..email.config import EmailConfig


def _empty_delivery_list() -> list[dict[str, Any]]:
    return []


def _empty_failure_list() -> list[Exception]:
    return []


@dataclass
class DeliverySpy:
    """Captures delivery attempts for test assertions.

    Callable with the ``DeliverMessage`` signature, so it can replace
    ``deliver_with_tls`` wherever a transport is injected. Each attempt is
    recorded before its outcome is decided.

    Attributes:
        deliveries: Keyword arguments of every attempt, in order.
        failures: Exceptions raised by the next attempts, consumed front first.
        raise_exception: When set, every attempt raises it once ``failures`` is empty.

    Example:
        >>> spy = DeliverySpy(failures=[OSError("connection refused")])
        >>> kwargs = dict(address="relay:587", credentials=None, sender="a@b.c",
        ...               recipients=("d@e.f",), payload=b"x", dial_timeout=10.0)
        >>> try:
        ...     spy(**kwargs)
        ... except OSError:
        ...     pass
        >>> spy(**kwargs)
        >>> spy.attempts
        2
    """

    deliveries: list[dict[str, Any]] = field(default_factory=_empty_delivery_list)
    failures: list[Exception] = field(default_factory=_empty_failure_list)
    raise_exception: Exception | None = None

    @property
    def attempts(self) -> int:
        return len(self.deliveries)

    def clear(self) -> None:
        """Reset captured data for next test."""
        self.deliveries.clear()
        self.failures.clear()
        self.raise_exception = None

    def __call__(
        self,
        *,
        address: str,
        credentials: SmtpCredentials | None,
        sender: str,
        recipients: Sequence[str],
        payload: bytes,
        dial_timeout: float,
    ) -> None:
        self.deliveries.append(
            {
                "address": address,
                "credentials": credentials,
                "sender": sender,
                "recipients": tuple(recipients),
                "payload": payload,
                "dial_timeout": dial_timeout,
            }
        )
        if self.failures:
            raise self.failures.pop(0)
        if self.raise_exception is not None:
            raise self.raise_exception


def load_email_config_from_dict_in_memory(
    config_dict: Mapping[str, Any],
) -> EmailConfig:
    """Parse email config from dict using the real Pydantic model."""
    email_raw = config_dict.get("email", {})
    return EmailConfig.model_validate(email_raw if email_raw else {})


__all__ = [
    "DeliverySpy",
    "load_email_config_from_dict_in_memory",
]
