"""Logging setup shared by the potability package.

A single ``potability`` logger writes timestamped lines to stdout.  The
initial level comes from the ``POTABILITY_LOG_LEVEL`` environment
variable (``INFO`` when unset); the command line can change it later
through :func:`set_log_level`.
"""

import logging
import os
import sys

LOG_LEVEL_ENV = "POTABILITY_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"

logger = logging.getLogger("potability")


def set_log_level(level) -> int:
    """Set the package log level from a name (``"debug"``) or a number.

    Returns the numeric level that was applied.
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level!r}")
    else:
        numeric = int(level)
    logger.setLevel(numeric)
    return numeric


if not logger.handlers:
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    set_log_level(os.environ.get(LOG_LEVEL_ENV, "INFO"))
