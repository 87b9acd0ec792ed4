"""Outbound SMTP delivery of ADIF logbook exports.

The public surface is the :class:`EmailService` with its configuration
model, the domain errors it raises, and the layered configuration loader.
"""

from __future__ import annotations

from .__init__conf__ import version as __version__
from .adapters.email import EmailConfig, EmailService
from .composition import get_config
from .domain import (
    CompositionError,
    ConfigurationError,
    DeliveryError,
    NotInitializedError,
    OutboundMessage,
    StartTLSRequiredError,
    join_host_port,
    sanitize_hostname,
)

__all__ = [
    "CompositionError",
    "ConfigurationError",
    "DeliveryError",
    "EmailConfig",
    "EmailService",
    "NotInitializedError",
    "OutboundMessage",
    "StartTLSRequiredError",
    "__version__",
    "get_config",
    "join_host_port",
    "sanitize_hostname",
]
