"""Test doubles for the application ports.

Contents:
    * :mod:`.email` - :class:`DeliverySpy` transport and the config loader
    * :mod:`.runtime` - empty configuration and no-op logging
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .email import DeliverySpy, load_email_config_from_dict_in_memory
from .runtime import get_config_in_memory, init_logging_in_memory

if TYPE_CHECKING:
    from station_mail.application.ports import DeliverMessage, GetConfig, InitLogging, LoadEmailConfigFromDict

    _assert_get_config: GetConfig = get_config_in_memory
    _assert_load_email_config: LoadEmailConfigFromDict = load_email_config_from_dict_in_memory
    _assert_init_logging: InitLogging = init_logging_in_memory
    _assert_deliver: DeliverMessage = DeliverySpy()

__all__ = [
    "DeliverySpy",
    "get_config_in_memory",
    "init_logging_in_memory",
    "load_email_config_from_dict_in_memory",
]
