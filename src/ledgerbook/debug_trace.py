"""Logging setup and performance tracing for Ledgerbook.

Enable console output by running with ledgerbook-debug. The DEBUG_PERF flag
controls whether performance timing is logged.

Usage:
    from .debug_trace import logger, perf_timer

    logger.debug("Starting operation")

    with perf_timer("refresh_sheet", row_count=120):
        panel.refresh()
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager

# Global flag to enable/disable performance tracing
DEBUG_PERF = True

# Root logger for the application; modules use child loggers via __name__
logger = logging.getLogger("ledgerbook")

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def setup_debug_logging(debug: bool = False) -> None:
    """Configure the application logger.

    In debug mode everything down to DEBUG goes to stdout. Otherwise only
    warnings and above are let through. Calling this more than once is safe;
    the handler is only attached the first time.

    Args:
        debug: True when running from the ledgerbook-debug entry point.
    """
    if debug and sys.stdout is not None:
        logger.setLevel(logging.DEBUG)
        if logger.handlers:
            return
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logger.addHandler(handler)
    else:
        # In non-debug mode, only log warnings and above
        logger.setLevel(logging.WARNING)


@contextmanager
def perf_timer(operation: str, row_count: int | None = None):
    """Context manager for timing operations.

    Args:
        operation: Name of the operation being timed
        row_count: Optional row count for context
    """
    if not DEBUG_PERF:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        if row_count is not None:
            logger.debug(f"PERF: {operation} ({row_count} rows) took {elapsed_ms:.2f}ms")
        else:
            logger.debug(f"PERF: {operation} took {elapsed_ms:.2f}ms")
