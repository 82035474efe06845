"""Shared logging helpers."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    Pass ``force=True`` to reconfigure during tests or from a second entry point.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    # request lines from httpx are noise at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
