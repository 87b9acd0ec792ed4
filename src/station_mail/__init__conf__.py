"""Static package metadata.

Single source for the distribution name, version and console command, plus
the vendor/app/slug triple lib_layered_config uses to find configuration
files on each platform.
"""

from __future__ import annotations

from typing import Final

name: Final[str] = "station_mail"
title: Final[str] = "Outbound SMTP delivery of ADIF logbook exports"
version: Final[str] = "0.3.0"
shell_command: Final[str] = "station-mail"

LAYEREDCONF_VENDOR: Final[str] = "Station-Manager"
LAYEREDCONF_APP: Final[str] = "Station Mail"
LAYEREDCONF_SLUG: Final[str] = "station-mail"

__all__ = [
    "LAYEREDCONF_APP",
    "LAYEREDCONF_SLUG",
    "LAYEREDCONF_VENDOR",
    "name",
    "shell_command",
    "title",
    "version",
]
