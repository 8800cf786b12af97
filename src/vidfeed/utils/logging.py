"""
Logging utilities.
"""

import logging
import sys
import time

logger = logging.getLogger("vidfeed")


def log_timed(msg: str, start_time: float | None = None) -> None:
    """Log timestamped message.

    Args:
        msg: Message to log
        start_time: Start time from time.time(), or None for [START]
    """
    elapsed = f"[{time.time() - start_time:.1f}s]" if start_time else "[START]"
    logger.info(f"{elapsed} {msg}")


def configure_logging(level: int = logging.INFO, fmt: str = "%(name)s: %(message)s") -> None:
    """Send log output to stderr so stdout stays clean for JSON."""
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)
