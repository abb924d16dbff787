"""Logging setup for the roster package."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Safe to call more than once; the handler is only installed the
    first time. Modules log through logging.getLogger(__name__) and
    propagate up to this logger.
    """
    from roster.config import settings

    logger = logging.getLogger("roster")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level or settings.log_level)
    return logger
