"""
Utility functions for vidfeed.
"""

from vidfeed.utils.formatting import format_duration, format_progress
from vidfeed.utils.logging import configure_logging, log_timed
from vidfeed.utils.tasks import fire_and_forget, pending_task_count

__all__ = [
    "configure_logging",
    "fire_and_forget",
    "format_duration",
    "format_progress",
    "log_timed",
    "pending_task_count",
]
