"""
Fire-and-forget helpers for persistence calls.

Progress saves, reorders and tag syncs must never block or break playback.
They run as background tasks on the running event loop; failures are
logged and swallowed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from vidfeed.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# Strong references so pending tasks are not garbage collected mid-flight
_background_tasks: set[asyncio.Task] = set()


async def _guarded(coro: Coroutine[Any, Any, Any], operation: str) -> Any:
    try:
        return await coro
    except asyncio.CancelledError:
        raise
    except PersistenceError as e:
        logger.warning(f"{operation} failed: {e.message}")
    except Exception:
        logger.warning(f"{operation} failed", exc_info=True)
    return None


def fire_and_forget(
    coro: Coroutine[Any, Any, Any],
    *,
    operation: str,
) -> asyncio.Task | None:
    """Schedule a coroutine in the background, logging any failure.

    Args:
        coro: Coroutine to run.
        operation: Name used in log messages (e.g., "update_progress").

    Returns:
        The scheduled task, or None if no event loop is running (the
        coroutine is closed without running).
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning(f"No running event loop, dropping {operation}")
        coro.close()
        return None

    task = loop.create_task(_guarded(coro, operation))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def pending_task_count() -> int:
    """Number of background tasks that have not finished yet."""
    return len(_background_tasks)
