"""Client identity normalisation for the SMTP greeting."""

from __future__ import annotations

FALLBACK_IDENTITY = "localhost"


def _is_identity_char(char: str) -> bool:
    return char == "-" or (char.isascii() and char.isalnum())


def sanitize_hostname(raw: str | None) -> str:
    """Return an RFC 5321 friendly EHLO name derived from *raw*.

    Keeps ASCII letters, digits and hyphens, replaces every other character
    with a hyphen and trims hyphens from both ends. Falls back to
    ``"localhost"`` when nothing usable remains.

    Example:
        >>> sanitize_hostname("build_box.local")
        'build-box-local'
        >>> sanitize_hostname("--__--")
        'localhost'
        >>> sanitize_hostname("")
        'localhost'
        >>> sanitize_hostname("Müller-PC")
        'M-ller-PC'
    """
    if not raw:
        return FALLBACK_IDENTITY
    cleaned = "".join(char if _is_identity_char(char) else "-" for char in raw).strip("-")
    return cleaned or FALLBACK_IDENTITY


__all__ = ["FALLBACK_IDENTITY", "sanitize_hostname"]
