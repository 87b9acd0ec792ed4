"""Composition root: the one place adapters are bound to ports.

:func:`build_production` binds the smtplib transport and the layered config
loader; :func:`build_testing` swaps in the in-memory doubles. The ADIF
compositor is pure and shared by both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..adapters.adif import compose_adif
from ..adapters.config.loader import get_config
from ..adapters.email import deliver_with_tls, load_email_config_from_dict
from ..adapters.logging.setup import init_logging

if TYPE_CHECKING:
    from ..adapters.memory.email import DeliverySpy
    from ..application.ports import (
        ComposeAttachment,
        DeliverMessage,
        GetConfig,
        InitLogging,
        LoadEmailConfigFromDict,
    )

    # pyright checks the production adapters against their ports here.
    _assert_get_config: GetConfig = get_config
    _assert_load_email_config_from_dict: LoadEmailConfigFromDict = load_email_config_from_dict
    _assert_init_logging: InitLogging = init_logging
    _assert_deliver_message: DeliverMessage = deliver_with_tls
    _assert_compose_attachment: ComposeAttachment = compose_adif


@dataclass(frozen=True, slots=True)
class AppServices:
    """Port implementations handed to the CLI through ``ctx.obj``."""

    get_config: GetConfig
    load_email_config_from_dict: LoadEmailConfigFromDict
    init_logging: InitLogging
    deliver_message: DeliverMessage
    compose_attachment: ComposeAttachment


def build_production() -> AppServices:
    return AppServices(
        get_config=get_config,
        load_email_config_from_dict=load_email_config_from_dict,
        init_logging=init_logging,
        deliver_message=deliver_with_tls,
        compose_attachment=compose_adif,
    )


def build_testing(*, spy: DeliverySpy | None = None) -> AppServices:
    """Bind the in-memory doubles.

    Args:
        spy: Transport double to wire in. A fresh :class:`DeliverySpy` is
            created when omitted; pass your own to inspect the attempts.
    """
    from ..adapters.memory import (
        DeliverySpy,
        get_config_in_memory,
        init_logging_in_memory,
        load_email_config_from_dict_in_memory,
    )

    return AppServices(
        get_config=get_config_in_memory,
        load_email_config_from_dict=load_email_config_from_dict_in_memory,
        init_logging=init_logging_in_memory,
        deliver_message=spy if spy is not None else DeliverySpy(),
        compose_attachment=compose_adif,
    )


__all__ = [
    "AppServices",
    "build_production",
    "build_testing",
    "get_config",
]
