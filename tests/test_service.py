"""EmailService lifecycle and delivery orchestration.

The transport is replaced with :class:`DeliverySpy` and the pause between
attempts with a recording stub, so no test touches the network or sleeps.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

import pytest
from pydantic import ValidationError

from station_mail.adapters.email import EmailConfig, EmailService
from station_mail.adapters.memory import DeliverySpy
from station_mail.domain.enums import LifecycleState
from station_mail.domain.errors import (
    CompositionError,
    ConfigurationError,
    DeliveryError,
    NotInitializedError,
)
from station_mail.domain.models import OutboundMessage, Record

LOGGER = logging.getLogger("tests.email_service")

MESSAGE = OutboundMessage(sender="", recipients=("logs@test.com",), payload=b"payload")


def _service(
    config: EmailConfig | Callable[[], EmailConfig],
    *,
    spy: DeliverySpy | None = None,
    sleeps: list[float] | None = None,
) -> EmailService:
    provider = (lambda: config) if isinstance(config, EmailConfig) else config
    recorded = sleeps if sleeps is not None else []
    return EmailService(
        config_provider=provider,
        logger=LOGGER,
        deliver=spy if spy is not None else DeliverySpy(),
        sleep=recorded.append,
    )


def _ready(ready_email_config: EmailConfig, **updates: Any) -> EmailConfig:
    return ready_email_config.model_copy(update=updates)


# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_initialize_marks_service_ready(ready_email_config: EmailConfig) -> None:
    service = _service(_ready(ready_email_config, dial_timeout=120))

    service.initialize()

    assert service.state is LifecycleState.READY
    assert service.config == _ready(ready_email_config, dial_timeout=120)
    assert service.dial_timeout == 60.0


@pytest.mark.os_agnostic
@pytest.mark.parametrize(("configured", "expected"), [(0, 10.0), (-1, 10.0), (0.1, 1.0), (30, 30.0)])
def test_dial_timeout_is_derived_from_config(
    ready_email_config: EmailConfig, configured: float, expected: float
) -> None:
    service = _service(_ready(ready_email_config, dial_timeout=configured))

    service.initialize()

    assert service.dial_timeout == expected


@pytest.mark.os_agnostic
def test_missing_logger_fails_initialisation(ready_email_config: EmailConfig) -> None:
    service = EmailService(config_provider=lambda: ready_email_config, logger=None)

    with pytest.raises(ConfigurationError, match="logger service has not been set/injected"):
        service.initialize()

    assert service.state is LifecycleState.FAILED


@pytest.mark.os_agnostic
def test_missing_config_provider_fails_initialisation() -> None:
    service = EmailService(config_provider=None, logger=LOGGER)

    with pytest.raises(ConfigurationError, match="application config has not been set/injected"):
        service.initialize()


@pytest.mark.os_agnostic
def test_provider_errors_are_wrapped_as_configuration_errors() -> None:
    def _broken() -> EmailConfig:
        return EmailConfig.model_validate({"port": "submission"})

    service = _service(_broken)

    with pytest.raises(ConfigurationError, match="getting email config") as exc_info:
        service.initialize()

    assert isinstance(exc_info.value.__cause__, ValidationError)


@pytest.mark.os_agnostic
def test_unexpected_provider_error_is_final_and_wrapped() -> None:
    """A provider raising KeyError fails initialisation once and for all."""
    calls: list[int] = []

    def _provider() -> EmailConfig:
        calls.append(1)
        raise KeyError("email")

    service = _service(_provider)

    for _ in range(3):
        with pytest.raises(ConfigurationError, match="getting email config") as exc_info:
            service.initialize()

    assert isinstance(exc_info.value.__cause__, KeyError)
    assert service.state is LifecycleState.FAILED
    assert len(calls) == 1


@pytest.mark.os_agnostic
def test_concurrent_callers_share_an_unexpected_provider_failure() -> None:
    calls: list[int] = []
    errors: list[BaseException] = []
    gate = threading.Barrier(6)

    def _provider() -> EmailConfig:
        calls.append(1)
        raise RuntimeError("backend down")

    service = _service(_provider)

    def _worker() -> None:
        gate.wait()
        try:
            service.initialize()
        except ConfigurationError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_worker) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert len(errors) == 6
    assert all(error is errors[0] for error in errors)


@pytest.mark.os_agnostic
def test_invalid_config_disables_the_service(ready_email_config: EmailConfig) -> None:
    service = _service(_ready(ready_email_config, port=0))

    with pytest.raises(ConfigurationError, match="email port must be between 1 and 65535"):
        service.initialize()

    assert service.state is LifecycleState.FAILED
    assert service.config is not None
    assert service.config.enabled is False


@pytest.mark.os_agnostic
def test_failed_initialisation_is_final(ready_email_config: EmailConfig) -> None:
    """Later calls re-raise the stored error without consulting the provider again."""
    calls: list[int] = []

    def _provider() -> EmailConfig:
        calls.append(1)
        return _ready(ready_email_config, host="")

    service = _service(_provider)

    with pytest.raises(ConfigurationError) as first:
        service.initialize()
    with pytest.raises(ConfigurationError) as second:
        service.initialize()

    assert first.value is second.value
    assert len(calls) == 1


@pytest.mark.os_agnostic
def test_successful_initialisation_runs_once(ready_email_config: EmailConfig) -> None:
    calls: list[int] = []

    def _provider() -> EmailConfig:
        calls.append(1)
        return ready_email_config

    service = _service(_provider)
    service.initialize()
    service.initialize()

    assert len(calls) == 1


@pytest.mark.os_agnostic
def test_concurrent_initialisation_runs_setup_exactly_once(ready_email_config: EmailConfig) -> None:
    calls: list[int] = []
    gate = threading.Event()

    def _slow_provider() -> EmailConfig:
        calls.append(1)
        gate.wait(timeout=5)
        return ready_email_config

    service = _service(_slow_provider)
    errors: list[BaseException] = []

    def _init() -> None:
        try:
            service.initialize()
        except BaseException as exc:  # pragma: no cover - reported below
            errors.append(exc)

    threads = [threading.Thread(target=_init) for _ in range(8)]
    for thread in threads:
        thread.start()
    gate.set()
    for thread in threads:
        thread.join(timeout=10)

    assert errors == []
    assert len(calls) == 1
    assert service.state is LifecycleState.READY


# ---------------------------------------------------------------------------
# Send preconditions
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_send_before_initialize_is_rejected(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy()
    service = _service(ready_email_config, spy=spy)

    with pytest.raises(NotInitializedError, match="email service is not initialized"):
        service.send(MESSAGE)

    assert spy.attempts == 0


@pytest.mark.os_agnostic
def test_send_after_failed_initialize_is_rejected(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy()
    service = _service(_ready(ready_email_config, from_address=None), spy=spy)
    with pytest.raises(ConfigurationError):
        service.initialize()

    with pytest.raises(NotInitializedError):
        service.send(MESSAGE)

    assert spy.attempts == 0


@pytest.mark.os_agnostic
def test_disabled_service_warns_and_succeeds_without_io(
    ready_email_config: EmailConfig, caplog: pytest.LogCaptureFixture
) -> None:
    spy = DeliverySpy()
    service = _service(_ready(ready_email_config, enabled=False), spy=spy)
    service.initialize()

    with caplog.at_level(logging.WARNING, logger=LOGGER.name):
        service.send(MESSAGE)

    assert spy.attempts == 0
    assert "email service is disabled in the config" in caplog.text


@pytest.mark.os_agnostic
def test_message_without_recipients_is_rejected(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy()
    service = _service(ready_email_config, spy=spy)
    service.initialize()

    with pytest.raises(ValueError, match="no recipients"):
        service.send(OutboundMessage(sender="a@test.com", recipients=(), payload=b"x"))

    assert spy.attempts == 0


# ---------------------------------------------------------------------------
# Envelope and address
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_blank_sender_defaults_to_configured_from_address(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy()
    service = _service(ready_email_config, spy=spy)
    service.initialize()

    service.send(OutboundMessage(sender="  ", recipients=("logs@test.com",), payload=b"x"))

    assert spy.deliveries[0]["sender"] == "station@test.com"


@pytest.mark.os_agnostic
def test_message_sender_wins_over_config(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy()
    service = _service(ready_email_config, spy=spy)
    service.initialize()

    service.send(OutboundMessage(sender="op@dx.org", recipients=("logs@test.com",), payload=b"x"))

    assert spy.deliveries[0]["sender"] == "op@dx.org"


@pytest.mark.os_agnostic
def test_delivery_receives_address_credentials_and_timeout(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy()
    config = _ready(ready_email_config, host="2001:db8::25", port=465, username="op", password="pw", dial_timeout=7)
    service = _service(config, spy=spy)
    service.initialize()

    service.send(MESSAGE)

    delivery = spy.deliveries[0]
    assert delivery["address"] == "[2001:db8::25]:465"
    assert delivery["credentials"] == ("op", "pw")
    assert delivery["recipients"] == ("logs@test.com",)
    assert delivery["payload"] == b"payload"
    assert delivery["dial_timeout"] == 7.0


@pytest.mark.os_agnostic
def test_no_username_means_no_credentials(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy()
    service = _service(ready_email_config, spy=spy)
    service.initialize()

    service.send(MESSAGE)

    assert spy.deliveries[0]["credentials"] is None


# ---------------------------------------------------------------------------
# Retries
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
@pytest.mark.parametrize("retry_count", [0, 1, 3])
def test_persistent_failure_makes_retry_count_plus_one_attempts(
    ready_email_config: EmailConfig, retry_count: int
) -> None:
    spy = DeliverySpy(raise_exception=ConnectionRefusedError("connection refused"))
    sleeps: list[float] = []
    service = _service(_ready(ready_email_config, retry_count=retry_count, retry_delay=2.5), spy=spy, sleeps=sleeps)
    service.initialize()

    with pytest.raises(DeliveryError, match=rf"failed to send email after {retry_count + 1} attempt\(s\)") as exc_info:
        service.send(MESSAGE)

    assert spy.attempts == retry_count + 1
    assert sleeps == [2.5] * retry_count
    assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)


@pytest.mark.os_agnostic
def test_success_after_failures_stops_retrying(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy(failures=[OSError("timed out"), OSError("timed out")])
    sleeps: list[float] = []
    service = _service(_ready(ready_email_config, retry_count=5, retry_delay=1), spy=spy, sleeps=sleeps)
    service.initialize()

    service.send(MESSAGE)

    assert spy.attempts == 3
    assert sleeps == [1.0, 1.0]


@pytest.mark.os_agnostic
def test_negative_retry_settings_mean_single_attempt_without_delay(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy(raise_exception=OSError("down"))
    sleeps: list[float] = []
    service = _service(_ready(ready_email_config, retry_count=-3, retry_delay=-1), spy=spy, sleeps=sleeps)
    service.initialize()

    with pytest.raises(DeliveryError, match=r"after 1 attempt\(s\)"):
        service.send(MESSAGE)

    assert spy.attempts == 1
    assert sleeps == []


@pytest.mark.os_agnostic
def test_zero_delay_does_not_sleep(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy(raise_exception=OSError("down"))
    sleeps: list[float] = []
    service = _service(_ready(ready_email_config, retry_count=2), spy=spy, sleeps=sleeps)
    service.initialize()

    with pytest.raises(DeliveryError):
        service.send(MESSAGE)

    assert spy.attempts == 3
    assert sleeps == []


@pytest.mark.os_agnostic
def test_only_the_last_error_is_reported(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy(failures=[OSError("first"), OSError("second")], raise_exception=OSError("last"))
    service = _service(_ready(ready_email_config, retry_count=2), spy=spy)
    service.initialize()

    with pytest.raises(DeliveryError) as exc_info:
        service.send(MESSAGE)

    assert str(exc_info.value).endswith(": last")
    assert "first" not in str(exc_info.value)


@pytest.mark.os_agnostic
def test_sensitive_error_text_is_withheld(ready_email_config: EmailConfig) -> None:
    spy = DeliverySpy(raise_exception=OSError("bad password for op"))
    service = _service(ready_email_config, spy=spy)
    service.initialize()

    with pytest.raises(DeliveryError) as exc_info:
        service.send(MESSAGE)

    assert "password" not in str(exc_info.value)
    assert "withheld" in str(exc_info.value)


@pytest.mark.os_agnostic
def test_each_failed_attempt_is_logged(ready_email_config: EmailConfig, caplog: pytest.LogCaptureFixture) -> None:
    spy = DeliverySpy(failures=[OSError("down")])
    service = _service(_ready(ready_email_config, retry_count=1), spy=spy)
    service.initialize()

    with caplog.at_level(logging.INFO, logger=LOGGER.name):
        service.send(MESSAGE)

    failures = [record for record in caplog.records if record.getMessage() == "email send failed"]
    successes = [record for record in caplog.records if record.getMessage() == "email sent"]
    assert len(failures) == 1
    assert failures[0].levelno == logging.ERROR
    assert failures[0].__dict__["addr"] == "smtp.test.com:587"
    assert failures[0].__dict__["attempt"] == 1
    assert successes[0].__dict__["attempt"] == 2


# ---------------------------------------------------------------------------
# Message building
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_build_before_initialize_is_rejected(ready_email_config: EmailConfig, sample_records: list[Record]) -> None:
    service = _service(ready_email_config)

    with pytest.raises(NotInitializedError):
        service.build_export_message(records=sample_records)


@pytest.mark.os_agnostic
def test_built_message_can_be_sent(ready_email_config: EmailConfig, sample_records: list[Record]) -> None:
    spy = DeliverySpy()
    service = _service(ready_email_config, spy=spy)
    service.initialize()

    message = service.build_export_message(records=sample_records, subject="Field day")
    service.send(message)

    delivery = spy.deliveries[0]
    assert delivery["sender"] == "station@test.com"
    assert delivery["recipients"] == ("logs@test.com", "backup@test.com")
    assert b"Subject: Field day" in delivery["payload"]
    assert b"-export.adi" in delivery["payload"]


@pytest.mark.os_agnostic
def test_build_propagates_composition_errors(ready_email_config: EmailConfig) -> None:
    service = _service(ready_email_config)
    service.initialize()

    with pytest.raises(CompositionError, match="record set cannot be empty"):
        service.build_export_message(records=[])
