"""
Defaults shared by the drivers, and logging setup.

Drivers take these as constructor defaults; pass keyword arguments to
override them per instance.
"""

from __future__ import annotations

import logging
import os
import sys

# Network
NAT_ADDRESS = 255
IDLE_INPUT = -1
DEFAULT_NETWORK_SIZE = 50
PACKET_WIDTH = 3            # (dest, x, y)

# Pipeline
START_SIGNAL = 0

# Logging
LOG_LEVEL_ENV = "INTCODE_LOG_LEVEL"
LOG_FORMAT = "%(levelname)5s %(name)s: %(message)s"


def configure_logging(level: int | str | None = None, stream=None) -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    The level comes from the argument, then the INTCODE_LOG_LEVEL
    environment variable, then WARNING. Calling this again replaces the
    handler rather than stacking another one.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger("intcode")
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)
    return root
