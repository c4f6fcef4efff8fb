"""Root logger setup for the netids command line."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Send netids log records to stderr with a timestamped one-line format.

    Does nothing when the root logger already has handlers, unless ``force``
    is set.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
