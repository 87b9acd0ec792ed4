"""Domain-specific exceptions for typed error handling at boundaries."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Missing, invalid, or incomplete configuration.

    Raised during service initialisation when the email settings are
    malformed (empty host, port out of range, credentials only half set)
    or when a required collaborator was never wired. The service stays
    disabled afterwards.

    Example:
        >>> from station_mail.domain.errors import ConfigurationError
        >>> err = ConfigurationError("email host cannot be empty")
        >>> str(err)
        'email host cannot be empty'
    """


class NotInitializedError(RuntimeError):
    """The email service was used before a successful ``initialize()``.

    Example:
        >>> err = NotInitializedError("email service is not initialized")
        >>> isinstance(err, RuntimeError)
        True
    """


class CompositionError(ValueError):
    """Building the outbound MIME message failed.

    Covers unresolved sender or recipients, an empty record set, a failing
    attachment compositor and encoding failures. No partial message is
    produced when this is raised.

    Example:
        >>> err = CompositionError("email TO address cannot be empty")
        >>> isinstance(err, ValueError)
        True
    """


class DeliveryError(Exception):
    """Email delivery failed at SMTP level.

    Raised by the orchestrator once every configured attempt has failed.
    The last transport error is attached as ``__cause__``.

    Example:
        >>> err = DeliveryError("failed to send email after 3 attempt(s): timed out")
        >>> str(err)
        'failed to send email after 3 attempt(s): timed out'
    """


class StartTLSRequiredError(DeliveryError):
    """The relay offers neither implicit TLS nor the STARTTLS extension.

    Plaintext delivery is never attempted; this error ends the attempt.
    """


__all__ = [
    "CompositionError",
    "ConfigurationError",
    "DeliveryError",
    "NotInitializedError",
    "StartTLSRequiredError",
]
