"""
Instagram embed processing.

Instagram has no parametric embed URL. A post is shown by inserting a
``blockquote.instagram-media`` placeholder (or pre-fetched oEmbed HTML)
and letting Instagram's embed script rewrite it into a player. The script
is a one-time global load; after that, its ``process()`` call must run
again after every mount so new placeholders are picked up.

The host environment (a browser bridge, a test fake) is abstracted as an
EmbedScriptLoader so the playback core never inspects globals directly.
"""

from __future__ import annotations

import asyncio
import html
import logging
from typing import Protocol, runtime_checkable

from vidfeed.config import defaults
from vidfeed.exceptions import EmbedUnavailableError

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbedScriptLoader(Protocol):
    """Access to a third-party embed script in the rendering host."""

    def is_loaded(self) -> bool:
        """Return True once the script's global processor is available."""
        ...

    async def load(self) -> None:
        """Inject the script and wait for it to load.

        Raises:
            EmbedUnavailableError: If the script cannot be loaded.
        """
        ...

    def process(self) -> None:
        """Ask the script to render every unprocessed placeholder."""
        ...


class HeadlessScriptLoader:
    """Loader for hosts without a browser runtime.

    Never loads; placeholders stay as plain links. Used when no rendering
    bridge is configured.
    """

    def is_loaded(self) -> bool:
        return False

    async def load(self) -> None:
        raise EmbedUnavailableError(
            "No browser runtime available to run the Instagram embed script",
            script_url=defaults.INSTAGRAM_EMBED_SCRIPT_URL,
        )

    def process(self) -> None:
        return None


class InstagramEmbedService:
    """Idempotent, at-least-once processing of Instagram placeholders.

    Concurrent mounts share one script load; calling ensure_processed()
    redundantly only re-runs the (harmless) process step.
    """

    def __init__(self, loader: EmbedScriptLoader | None = None) -> None:
        self.loader = loader or HeadlessScriptLoader()
        self._load_lock = asyncio.Lock()
        self.process_calls = 0

    async def ensure_processed(self) -> bool:
        """Load the script if needed, then process placeholders.

        Returns:
            True if placeholders were processed, False if the script is
            unavailable (the placeholder remains and the next mount retries).
        """
        if not self.loader.is_loaded():
            async with self._load_lock:
                # Another mount may have finished loading while we waited
                if not self.loader.is_loaded():
                    try:
                        await self.loader.load()
                    except EmbedUnavailableError as e:
                        logger.warning(f"Instagram embed script unavailable: {e}")
                        return False

        if not self.loader.is_loaded():
            return False

        try:
            self.loader.process()
        except EmbedUnavailableError as e:
            logger.warning(f"Instagram embed processing failed: {e}")
            return False
        self.process_calls += 1
        return True


def build_placeholder_html(permalink: str) -> str:
    """Build the blockquote Instagram's embed script turns into a player.

    Args:
        permalink: Post permalink without query string, ending in '/'.
    """
    href = html.escape(permalink, quote=True)
    return (
        f'<blockquote class="instagram-media" data-instgrm-permalink="{href}" '
        f'data-instgrm-version="{defaults.INSTAGRAM_EMBED_VERSION}" '
        'style="background:#000; border:0; margin:1px; max-width:540px; '
        'min-width:326px; padding:0; width:99.375%;">'
        f'<a href="{href}" target="_blank" rel="noreferrer">'
        "View this post on Instagram</a></blockquote>"
    )
