"""Pure helpers for relay addresses and recipient lists."""

from __future__ import annotations

import re

_RECIPIENT_SEPARATORS = re.compile(r"[,;\s]+")


def join_host_port(host: str, port: int) -> str:
    """Combine *host* and *port* into a ``host:port`` string.

    Hosts containing a colon (IPv6 literals) are wrapped in brackets so the
    result can be split again unambiguously.

    Example:
        >>> join_host_port("smtp.example.com", 587)
        'smtp.example.com:587'
        >>> join_host_port("2001:db8::1", 465)
        '[2001:db8::1]:465'
    """
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def split_host_port(address: str) -> tuple[str, int]:
    """Split a ``host:port`` or ``[v6-literal]:port`` string.

    Raises:
        ValueError: When brackets are unbalanced, the port is missing or not
            numeric, or an unbracketed host contains a colon.

    Example:
        >>> split_host_port("[::1]:25")
        ('::1', 25)
        >>> split_host_port("mail.example.org:587")
        ('mail.example.org', 587)
        >>> split_host_port("::1:25")  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ValueError: too many colons in address '::1:25'
    """
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address {address!r}")
        host, rest = address[1:end], address[end + 1 :]
        if not rest.startswith(":"):
            raise ValueError(f"missing port in address {address!r}")
        port_text = rest[1:]
    else:
        host, separator, port_text = address.rpartition(":")
        if not separator:
            raise ValueError(f"missing port in address {address!r}")
        if ":" in host:
            raise ValueError(f"too many colons in address {address!r}")
    if "[" in host or "]" in host:
        raise ValueError(f"unexpected bracket in address {address!r}")
    if not (port_text.isascii() and port_text.isdigit()):
        raise ValueError(f"invalid port in address {address!r}")
    return host, int(port_text)


def split_recipients(value: str | None) -> list[str]:
    """Split a recipient string on commas, semicolons and whitespace.

    Example:
        >>> split_recipients("a@x.com; b@y.com c@z.com, d@w.com")
        ['a@x.com', 'b@y.com', 'c@z.com', 'd@w.com']
        >>> split_recipients("  ,; ")
        []
    """
    if not value:
        return []
    return [part for part in _RECIPIENT_SEPARATORS.split(value) if part]


__all__ = ["join_host_port", "split_host_port", "split_recipients"]
