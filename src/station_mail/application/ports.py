"""Seams between the email core and its collaborators.

Every port is a callable Protocol, so plain module-level functions (and the
in-memory doubles in :mod:`station_mail.adapters.memory`) satisfy it
structurally. ``Config`` and ``EmailConfig`` are imported for type checking
only; at runtime this module depends on the domain layer alone.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from ..domain.models import Record, SmtpCredentials

if TYPE_CHECKING:
    from lib_layered_config import Config

    from ..adapters.email.config import EmailConfig


class GetConfig(Protocol):
    """Return the merged layered configuration for an optional profile."""

    def __call__(self, *, profile: str | None = ..., start_dir: str | None = ...) -> Config: ...


class LoadEmailConfigFromDict(Protocol):
    """Turn the ``[email]`` section of a config mapping into an EmailConfig."""

    def __call__(self, config_dict: Mapping[str, Any]) -> EmailConfig: ...


class InitLogging(Protocol):
    def __call__(self, config: Config) -> None: ...


class ComposeAttachment(Protocol):
    """Render a record set as attachment text.

    Implementations raise ``ValueError`` when the records cannot be rendered.
    """

    def __call__(self, records: Sequence[Record]) -> str: ...


class DeliverMessage(Protocol):
    """Deliver one framed message over a freshly negotiated SMTP session.

    Implementations raise on any failure and return ``None`` once the relay
    has accepted the message.
    """

    def __call__(
        self,
        *,
        address: str,
        credentials: SmtpCredentials | None,
        sender: str,
        recipients: Sequence[str],
        payload: bytes,
        dial_timeout: float,
    ) -> None: ...


__all__ = [
    "ComposeAttachment",
    "DeliverMessage",
    "GetConfig",
    "InitLogging",
    "LoadEmailConfigFromDict",
]
