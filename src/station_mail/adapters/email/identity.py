"""Local machine identity for the SMTP greeting and Message-ID."""

from __future__ import annotations

import socket

from station_mail.domain.identity import FALLBACK_IDENTITY, sanitize_hostname


def local_identity() -> str:
    """Return the sanitized local hostname, or ``"localhost"`` when unknown."""
    try:
        raw = socket.gethostname()
    except OSError:
        return FALLBACK_IDENTITY
    return sanitize_hostname(raw)


__all__ = ["local_identity"]
