"""Process-wide logging setup."""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        "%H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level.upper(),
        handlers=[handler],
        force=True,
    )
