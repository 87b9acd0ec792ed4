"""Email configuration model and loader.

Provides the EmailConfig Pydantic model for immutable email settings and the
loader function to create it from configuration dictionaries.

Only type coercion happens here. The ordered semantic checks (host, port,
sender, credential pairing) live in :mod:`.validation` and run when the
service initialises, so a broken configuration disables the service instead
of failing to load.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_DIAL_TIMEOUT = 10.0
MIN_DIAL_TIMEOUT = 1.0
MAX_DIAL_TIMEOUT = 60.0


class EmailConfig(BaseModel):
    """Immutable email configuration.

    Example:
        >>> config = EmailConfig(
        ...     host="smtp.example.com",
        ...     port=587,
        ...     from_address="noreply@example.com",
        ... )
        >>> config.host
        'smtp.example.com'
        >>> config.enabled
        False
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    host: str = ""
    port: int = 587
    from_address: str | None = None
    username: str | None = None
    password: str | None = None
    to: str = ""
    subject: str = ""
    body: str = ""
    dial_timeout: float = DEFAULT_DIAL_TIMEOUT
    retry_count: int = 0
    retry_delay: float = 0.0

    @field_validator("host", "to", "subject", "body", mode="before")
    @classmethod
    def _coerce_none_to_empty(cls, v: Any) -> Any:
        """Treat a missing string value as empty rather than invalid."""
        if v is None:
            return ""
        return v

    @field_validator("host", mode="after")
    @classmethod
    def _strip_host(cls, v: str) -> str:
        return v.strip()

    @field_validator("from_address", "username", "password", mode="before")
    @classmethod
    def _coerce_empty_string_to_none(cls, v: str | None) -> str | None:
        """Coerce empty or whitespace-only strings to None.

        Treats empty strings from config files as "not configured" rather than
        explicit empty values. This prevents accidental auth attempts with
        empty credentials and ensures consistent "not set" semantics.

        Surrounding whitespace is removed from set values.
        """
        if isinstance(v, str):
            return v.strip() or None
        return v

    def resolved_dial_timeout(self) -> float:
        """Return the dial timeout clamped to ``[1, 60]`` seconds.

        Non-positive values fall back to the 10 second default.

        Example:
            >>> EmailConfig(dial_timeout=0).resolved_dial_timeout()
            10.0
            >>> EmailConfig(dial_timeout=0.2).resolved_dial_timeout()
            1.0
            >>> EmailConfig(dial_timeout=300).resolved_dial_timeout()
            60.0
        """
        if self.dial_timeout <= 0:
            return DEFAULT_DIAL_TIMEOUT
        return min(max(float(self.dial_timeout), MIN_DIAL_TIMEOUT), MAX_DIAL_TIMEOUT)

    def __repr__(self) -> str:
        """Return string representation with password redacted.

        Example:
            >>> config = EmailConfig(host="smtp.example.com", password="secret123")
            >>> "secret123" in repr(config)
            False
            >>> "[REDACTED]" in repr(config)
            True
        """
        fields: list[str] = []
        for name, value in self:
            if name == "password" and value is not None:
                fields.append(f"{name}='[REDACTED]'")
            else:
                fields.append(f"{name}={value!r}")
        return f"EmailConfig({', '.join(fields)})"


def load_email_config_from_dict(config_dict: Mapping[str, Any]) -> EmailConfig:
    """Load EmailConfig from a configuration dictionary.

    Bridges lib_layered_config's dictionary output with the typed
    EmailConfig Pydantic model.

    Args:
        config_dict: Configuration dictionary typically from lib_layered_config.
            Expected to have an 'email' section with email settings.

    Returns:
        Email settings with defaults for missing values.

    Raises:
        pydantic.ValidationError: When a value cannot be coerced to its type.

    Example:
        >>> email_config = load_email_config_from_dict(
        ...     {"email": {"host": "smtp.example.com", "from_address": "test@example.com"}}
        ... )
        >>> email_config.from_address
        'test@example.com'
        >>> email_config.port
        587
    """
    email_section: Any = config_dict.get("email", {})

    # Handle non-dict email section (e.g. "email": "invalid")
    if not isinstance(email_section, Mapping):
        return EmailConfig.model_validate(email_section)

    email_raw: dict[str, Any] = dict(cast(Mapping[str, Any], email_section))
    return EmailConfig.model_validate(email_raw)


__all__ = [
    "DEFAULT_DIAL_TIMEOUT",
    "MAX_DIAL_TIMEOUT",
    "MIN_DIAL_TIMEOUT",
    "EmailConfig",
    "load_email_config_from_dict",
]
