"""Email configuration checks run once when the service initialises.

Rules are evaluated in a fixed order and the first violation is raised as a
:class:`~station_mail.domain.errors.ConfigurationError`; violations are never
aggregated.
"""

from __future__ import annotations

from station_mail.domain.addresses import join_host_port, split_host_port
from station_mail.domain.errors import ConfigurationError

from .config import EmailConfig


def validate_email_config(config: EmailConfig) -> None:
    """Check host, port, sender and credential consistency.

    Args:
        config: Email settings to check. Not modified.

    Raises:
        ConfigurationError: Naming the first violated rule.

    Example:
        >>> validate_email_config(EmailConfig(host="2001:db8::1", port=587, from_address="a@example.com"))
        >>> validate_email_config(EmailConfig(host="", from_address="a@example.com"))
        Traceback (most recent call last):
        ...
        station_mail.domain.errors.ConfigurationError: email host cannot be empty
    """
    host = config.host.strip()
    if not host:
        raise ConfigurationError("email host cannot be empty")
    if " " in host:
        raise ConfigurationError("email host cannot contain spaces")
    if not 1 <= config.port <= 65535:
        raise ConfigurationError("email port must be between 1 and 65535")
    try:
        split_host_port(join_host_port(host, config.port))
    except ValueError as exc:
        raise ConfigurationError("invalid host or port for email config") from exc
    if not config.from_address:
        raise ConfigurationError("email from address cannot be empty")
    if config.password and not config.username:
        raise ConfigurationError("email username must be set when password is provided")
    if config.username and not config.password:
        raise ConfigurationError("email password must be set when username is provided")


__all__ = ["validate_email_config"]
