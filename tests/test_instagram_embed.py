"""Tests for Instagram embed script processing."""

import asyncio

import pytest
from conftest import FakeLoader

from vidfeed.embed.instagram import (
    HeadlessScriptLoader,
    InstagramEmbedService,
    build_placeholder_html,
)


class TestEnsureProcessed:
    @pytest.mark.asyncio
    async def test_loads_once_then_processes(self, loader):
        service = InstagramEmbedService(loader)
        assert await service.ensure_processed()
        assert await service.ensure_processed()
        assert loader.load_calls == 1
        assert loader.process_calls == 2

    @pytest.mark.asyncio
    async def test_concurrent_mounts_share_load(self, loader):
        service = InstagramEmbedService(loader)
        results = await asyncio.gather(*(service.ensure_processed() for _ in range(5)))
        assert all(results)
        assert loader.load_calls == 1
        assert loader.process_calls == 5

    @pytest.mark.asyncio
    async def test_already_loaded_skips_load(self):
        loader = FakeLoader(loaded=True)
        assert await InstagramEmbedService(loader).ensure_processed()
        assert loader.load_calls == 0

    @pytest.mark.asyncio
    async def test_load_failure_returns_false_and_retries(self):
        loader = FakeLoader(fail=True)
        service = InstagramEmbedService(loader)
        assert not await service.ensure_processed()
        assert not await service.ensure_processed()
        assert loader.load_calls == 2
        assert loader.process_calls == 0

    @pytest.mark.asyncio
    async def test_headless_never_processes(self):
        service = InstagramEmbedService(HeadlessScriptLoader())
        assert not await service.ensure_processed()
        assert service.process_calls == 0


def test_placeholder_escapes_permalink():
    html = build_placeholder_html('https://www.instagram.com/p/a"b/')
    assert 'data-instgrm-permalink="https://www.instagram.com/p/a&quot;b/"' in html
    assert "View this post on Instagram" in html
