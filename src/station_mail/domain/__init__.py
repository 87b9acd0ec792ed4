"""Domain layer - pure logic with no I/O or framework dependencies.

Contents:
    * :mod:`.addresses` - host/port joining and recipient splitting
    * :mod:`.enums` - LifecycleState
    * :mod:`.errors` - Domain exception types
    * :mod:`.identity` - EHLO identity sanitising
    * :mod:`.models` - Value objects (OutboundMessage)
"""

from __future__ import annotations

from .addresses import join_host_port, split_host_port, split_recipients
from .enums import LifecycleState
from .errors import (
    CompositionError,
    ConfigurationError,
    DeliveryError,
    NotInitializedError,
    StartTLSRequiredError,
)
from .identity import FALLBACK_IDENTITY, sanitize_hostname
from .models import OutboundMessage, Record, SmtpCredentials

__all__ = [
    # Addresses
    "join_host_port",
    "split_host_port",
    "split_recipients",
    # Enums
    "LifecycleState",
    # Errors
    "CompositionError",
    "ConfigurationError",
    "DeliveryError",
    "NotInitializedError",
    "StartTLSRequiredError",
    # Identity
    "FALLBACK_IDENTITY",
    "sanitize_hostname",
    # Models
    "OutboundMessage",
    "Record",
    "SmtpCredentials",
]
