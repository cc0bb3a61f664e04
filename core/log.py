"""
Logging helpers for ImageTrimmer.

Modules only ever call ``get_logger(__name__)``. ``configure_logging()`` is
reserved for the application entry point (``main.py``); it attaches a single
stderr handler to the ``imagetrimmer`` logger and never touches the root
logger. No log files are written.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "imagetrimmer"
DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure the ``imagetrimmer`` logger.

    level defaults to the IMAGETRIMMER_LOG_LEVEL env var, or "INFO" if unset.
    With force=True existing handlers are removed first, otherwise a second
    call is a no-op.
    """
    if level is None:
        level = os.environ.get("IMAGETRIMMER_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    else:
        for h in logger.handlers:
            if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
                return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(fmt=fmt or DEFAULT_FMT, datefmt=DEFAULT_DATEFMT))
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return a logger below the ``imagetrimmer`` namespace.

    Module names from the flat layout (``core.geometry``, ``ui.canvas``) are
    prefixed so that configure_logging() reaches them.
    """
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
