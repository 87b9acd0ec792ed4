"""Lifecycle states of the email service."""

from __future__ import annotations

from enum import Enum


class LifecycleState(str, Enum):
    """Initialisation state of the email service.

    The only allowed transitions are ``UNINITIALIZED -> READY`` and
    ``UNINITIALIZED -> FAILED``; both are final.

    Example:
        >>> LifecycleState.READY.value
        'ready'
        >>> LifecycleState.FAILED == "failed"
        True
    """

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


__all__ = ["LifecycleState"]
