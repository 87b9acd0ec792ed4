"""In-memory configuration and logging doubles.

Neither touches the filesystem, the environment or the lib_log_rich runtime.
"""

from __future__ import annotations

from lib_layered_config import Config


def get_config_in_memory(*, profile: str | None = None, start_dir: str | None = None) -> Config:
    """Return an empty Config regardless of profile."""
    return Config({}, {})


def init_logging_in_memory(config: Config) -> None:
    pass


__all__ = ["get_config_in_memory", "init_logging_in_memory"]
