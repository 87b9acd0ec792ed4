"""Layered configuration loading via lib_layered_config."""

from __future__ import annotations

from .loader import get_config, get_default_config_path

__all__ = ["get_config", "get_default_config_path"]
