"""ADIF adapter - renders logbook records as an ADIF text document.

Contents:
    * :func:`.writer.compose_adif` - Record set to ADIF text
"""

from __future__ import annotations

from .writer import ADIF_VERSION, compose_adif

__all__ = ["ADIF_VERSION", "compose_adif"]
