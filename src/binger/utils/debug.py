"""Universal debug/logging utility for Binger.

Provides setup_logger() and a debug() helper for consistent logging.
Debug output is controlled by the BINGER_DEBUG environment variable.
Logs to stderr so that JSON written to stdout stays machine-readable.
"""

import logging
import os
from typing import Optional

DEBUG_ON = os.getenv("BINGER_DEBUG", "0") == "1"

_logger: Optional[logging.Logger] = None


def setup_logger(debug_on: bool | None = None) -> logging.Logger:
    """Configure the ``binger`` logger once and return it.

    Module loggers (``logging.getLogger(__name__)``) inherit its handler.
    """
    global _logger
    if _logger is not None:
        return _logger
    logger = logging.getLogger("binger")
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(levelname)s] %(asctime)s %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        enabled = DEBUG_ON if debug_on is None else debug_on
        logger.setLevel(logging.DEBUG if enabled else logging.INFO)
    _logger = logger
    return logger


def debug(msg: str) -> None:
    """Log a debug message if debugging is enabled."""
    if DEBUG_ON:
        setup_logger().debug(msg)
