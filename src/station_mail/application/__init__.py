"""Application layer - port definitions.

Contains the port protocols that define the interfaces for adapter
implementations.

Contents:
    * :mod:`.ports` - Callable Protocol definitions for adapter functions
"""

from __future__ import annotations

from .ports import (
    ComposeAttachment,
    DeliverMessage,
    GetConfig,
    InitLogging,
    LoadEmailConfigFromDict,
)

__all__ = [
    "ComposeAttachment",
    "DeliverMessage",
    "GetConfig",
    "InitLogging",
    "LoadEmailConfigFromDict",
]
