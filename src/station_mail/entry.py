"""``station-mail`` console script.

Lives outside :mod:`station_mail.adapters` because it is the one spot that
hands the production composition to the CLI driver.
"""

from __future__ import annotations

from .adapters.cli.main import main as cli_main
from .composition import build_production


def main() -> int:
    return cli_main(services_factory=build_production)


__all__ = ["main"]
