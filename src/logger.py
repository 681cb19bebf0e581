"""Console logging setup shared by the scripts."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str | None = None, *, debug: bool = False) -> logging.Logger:
    """Attach one stream handler to ``name`` (root when ``None``) and return the logger."""
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(log_level)
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Quiet per-request lines from the HTTP stack unless debugging.
    logging.getLogger("httpx").setLevel(log_level if debug else logging.WARNING)
    return logger
