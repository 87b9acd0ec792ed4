"""ADIF (Amateur Data Interchange Format) text writer.

Turns a sequence of record mappings into the ``.adi`` flavour of ADIF: a
free-text header closed by ``<EOH>`` followed by one ``<NAME:LEN>value``
run per record closed by ``<EOR>``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone

from station_mail import __init__conf__
from station_mail.domain.models import Record

ADIF_VERSION = "3.1.4"

_FIELD_NAME = re.compile(r"[A-Za-z][A-Za-z0-9_]*")


def _field(name: str, value: str) -> str:
    return f"<{name}:{len(value)}>{value}"


def _render_value(value: object) -> str:
    if isinstance(value, bool):
        return "Y" if value else "N"
    return str(value)


def _render_record(record: Record, index: int) -> str:
    if not isinstance(record, Mapping):
        raise ValueError(f"record {index}: expected a mapping of field names, got {type(record).__name__}")
    tokens: list[str] = []
    for name, value in record.items():
        if not isinstance(name, str) or not _FIELD_NAME.fullmatch(name):
            raise ValueError(f"record {index}: invalid ADIF field name {name!r}")
        if value is None:
            continue
        text = _render_value(value)
        if text == "":
            continue
        tokens.append(_field(name.upper(), text))
    if not tokens:
        raise ValueError(f"record {index}: no fields to export")
    tokens.append("<EOR>")
    return " ".join(tokens)


def _render_header(created: datetime) -> Iterable[str]:
    yield f"{__init__conf__.shell_command} ADIF export"
    yield _field("ADIF_VER", ADIF_VERSION)
    yield _field("PROGRAMID", __init__conf__.shell_command)
    yield _field("PROGRAMVERSION", __init__conf__.version)
    yield _field("CREATED_TIMESTAMP", created.strftime("%Y%m%d %H%M%S"))
    yield "<EOH>"


def compose_adif(records: Sequence[Record], *, now: datetime | None = None) -> str:
    """Render *records* as ADIF text.

    Field names are upper-cased; ``None`` and empty values are skipped and
    booleans become ``Y``/``N``.

    Args:
        records: Logbook entries as ``field name -> value`` mappings.
        now: Creation timestamp for the header. Defaults to the current UTC time.

    Returns:
        The complete ADIF document, newline separated.

    Raises:
        ValueError: When the record set is empty, a record is not a mapping,
            a field name is not a valid ADIF identifier, or a record has no
            exportable fields.

    Example:
        >>> created = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
        >>> text = compose_adif([{"call": "W1AW", "band": "20m"}], now=created)
        >>> text.splitlines()[-1]
        '<CALL:4>W1AW <BAND:3>20m <EOR>'
        >>> "<CREATED_TIMESTAMP:15>20261018 120000" in text
        True
    """
    if not records:
        raise ValueError("no records to export")
    created = now if now is not None else datetime.now(timezone.utc)
    lines = list(_render_header(created))
    lines.append("")
    lines.extend(_render_record(record, index) for index, record in enumerate(records, start=1))
    return "\n".join(lines) + "\n"


__all__ = ["ADIF_VERSION", "compose_adif"]
