"""Tests for the asyncio-backed timer source."""

import asyncio
import logging

import pytest

from vidfeed.navigation.scheduler import AsyncioScheduler, NullTimerHandle


class TestAsyncioScheduler:
    @pytest.mark.asyncio
    async def test_fires_on_running_loop(self):
        fired = asyncio.Event()
        AsyncioScheduler().call_later(0, fired.set)
        await asyncio.wait_for(fired.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_cancelled_timer_does_not_fire(self):
        fired = []
        handle = AsyncioScheduler().call_later(0, lambda: fired.append(1))
        handle.cancel()
        await asyncio.sleep(0.01)
        assert fired == []

    def test_without_running_loop_timer_is_dropped(self, caplog):
        fired = []
        with caplog.at_level(logging.WARNING, logger="vidfeed.navigation.scheduler"):
            handle = AsyncioScheduler().call_later(5, lambda: fired.append(1))
        assert isinstance(handle, NullTimerHandle)
        assert "dropping 5.0s timer" in caplog.text
        handle.cancel()
        assert handle.cancelled
        assert fired == []
