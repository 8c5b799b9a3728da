# SPDX-FileCopyrightText: 2025 WeCode, Inc.
#
# SPDX-License-Identifier: Apache-2.0

"""Logger setup shared by all sandbox_manager modules."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-4s : %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str, level: str = None) -> logging.Logger:
    """Return a module logger writing to stderr.

    Logs go to stderr so machine-readable command output on stdout
    (e.g. ``list --json``) is never interleaved with log lines.

    Args:
        name: Logger name, usually ``__name__``
        level: Optional level name, defaults to the LOG_LEVEL env var

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    return logger


def set_log_level(level: str, prefix: str = "sandbox_manager") -> None:
    """Apply ``level`` to every logger created under ``prefix``."""
    level = level.upper()
    for name in list(logging.root.manager.loggerDict):
        if name == prefix or name.startswith(f"{prefix}."):
            logging.getLogger(name).setLevel(level)
