"""Fixtures shared by the service, transport and CLI tests."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

import lib_cli_exit_tools
import orjson
import pytest
from click.testing import CliRunner
from dotenv import load_dotenv
from lib_layered_config import Config

if TYPE_CHECKING:
    from station_mail.adapters.email import EmailConfig
    from station_mail.adapters.memory.email import DeliverySpy
    from station_mail.composition import AppServices

# Integration runs against a real relay read their settings from a local .env.
_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE)

_ANSI = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")

_QSOS: tuple[dict[str, Any], ...] = (
    {"call": "DL1ABC", "qso_date": "20261018", "time_on": "0705", "band": "20m", "mode": "SSB"},
    {"call": "JA1XYZ", "qso_date": "20261018", "time_on": "0712", "band": "15m", "mode": "FT8", "rst_sent": "-10"},
)

_READY_EMAIL: dict[str, Any] = {
    "enabled": True,
    "host": "smtp.test.com",
    "port": 587,
    "from_address": "station@test.com",
    "to": "logs@test.com, backup@test.com",
    "subject": "Logbook export",
    "body": "Export attached.",
}


@pytest.fixture
def cli_runner() -> CliRunner:
    """Fresh runner; ``result.stdout`` and ``result.stderr`` stay separate."""
    return CliRunner()


@pytest.fixture
def strip_ansi() -> Callable[[str], str]:
    return lambda text: _ANSI.sub("", text)


@pytest.fixture
def quiet_tracebacks() -> Iterator[None]:
    """Start with tracebacks off and put lib_cli_exit_tools back afterwards."""
    flags = lib_cli_exit_tools.config
    saved = (flags.traceback, flags.traceback_force_color)
    lib_cli_exit_tools.reset_config()
    flags.traceback = False
    flags.traceback_force_color = False
    try:
        yield
    finally:
        flags.traceback, flags.traceback_force_color = saved


@pytest.fixture
def clear_config_cache() -> Iterator[None]:
    # Cleared before only: a monkeypatched loader has no cache_clear.
    from station_mail.adapters.config import loader

    loader.get_config.cache_clear()
    yield


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Two QSOs the ADIF compositor accepts, copied per test."""
    return [dict(record) for record in _QSOS]


@pytest.fixture
def ready_email_config() -> EmailConfig:
    from station_mail.adapters.email import EmailConfig

    return EmailConfig.model_validate(_READY_EMAIL)


@pytest.fixture
def records_file(tmp_path: Path, sample_records: list[dict[str, Any]]) -> Path:
    path = tmp_path / "records.json"
    path.write_bytes(orjson.dumps(sample_records))
    return path


@dataclass
class EmailCliContext:
    """Services factory for ``cli.invoke(obj=...)`` plus the transport double it uses."""

    factory: Callable[[], AppServices]
    spy: DeliverySpy


@pytest.fixture
def email_cli_context(clear_config_cache: None) -> Callable[[dict[str, Any]], EmailCliContext]:
    """Build in-memory services whose configuration holds the given ``[email]`` table.

    Example:
        ctx = email_cli_context({"enabled": True, "host": "smtp.test.com", ...})
        cli_runner.invoke(cli, ["send-adif", str(records_file)], obj=ctx.factory)
        assert ctx.spy.attempts == 1
    """
    from station_mail.adapters.memory.email import DeliverySpy
    from station_mail.composition import build_production, build_testing

    def _create(email_section: dict[str, Any]) -> EmailCliContext:
        spy = DeliverySpy()
        config = Config({"email": email_section}, {})
        services = replace(
            build_testing(spy=spy),
            get_config=lambda **_kwargs: config,
            init_logging=build_production().init_logging,
        )
        return EmailCliContext(factory=lambda: services, spy=spy)

    return _create


@pytest.fixture
def production_with_config(
    clear_config_cache: None,
) -> Callable[..., Callable[[], AppServices]]:
    """Production services reading *data* instead of the layered files.

    When *profiles* is given, every profile the CLI asks for is appended to it.
    """
    from station_mail.composition import build_production

    def _create(data: dict[str, Any], profiles: list[str | None] | None = None) -> Callable[[], AppServices]:
        config = Config(data, {})

        def _get_config(*, profile: str | None = None, **_kwargs: Any) -> Config:
            if profiles is not None:
                profiles.append(profile)
            return config

        services = replace(build_production(), get_config=_get_config)
        return lambda: services

    return _create
