"""Domain error types: instantiation, message preservation and hierarchy."""

from __future__ import annotations

import pytest

from station_mail.domain.errors import (
    CompositionError,
    ConfigurationError,
    DeliveryError,
    NotInitializedError,
    StartTLSRequiredError,
)


@pytest.mark.os_agnostic
def test_configuration_error_preserves_message() -> None:
    """Instantiation stores the message for display."""
    exc = ConfigurationError("email host cannot be empty")
    assert str(exc) == "email host cannot be empty"


@pytest.mark.os_agnostic
def test_delivery_error_preserves_message() -> None:
    """Instantiation stores the SMTP failure detail."""
    exc = DeliveryError("failed to send email after 3 attempt(s): connection refused")
    assert str(exc) == "failed to send email after 3 attempt(s): connection refused"


@pytest.mark.os_agnostic
def test_starttls_required_error_is_delivery_error() -> None:
    """A relay without STARTTLS is reported as a delivery failure."""
    with pytest.raises(DeliveryError, match="STARTTLS"):
        raise StartTLSRequiredError("smtp server does not support STARTTLS; TLS required")


@pytest.mark.os_agnostic
def test_composition_error_is_value_error() -> None:
    """Bad message inputs can be caught as ValueError."""
    with pytest.raises(ValueError, match="record set"):
        raise CompositionError("record set cannot be empty")


@pytest.mark.os_agnostic
def test_not_initialized_error_is_runtime_error() -> None:
    """Calling the service out of order is a RuntimeError."""
    with pytest.raises(RuntimeError, match="not initialized"):
        raise NotInitializedError("email service is not initialized")
