"""
Embed selection for vidfeed.

Turns classified sources into renderable player configurations.
"""

from vidfeed.embed.adapters import (
    can_report_ended,
    fallback_buffer,
    select_adapter,
    select_adapter_for_video,
)
from vidfeed.embed.aspect import effective_aspect_ratio, is_facebook_reel, video_aspect_ratio
from vidfeed.embed.instagram import (
    EmbedScriptLoader,
    HeadlessScriptLoader,
    InstagramEmbedService,
    build_placeholder_html,
)

__all__ = [
    "EmbedScriptLoader",
    "HeadlessScriptLoader",
    "InstagramEmbedService",
    "build_placeholder_html",
    "can_report_ended",
    "effective_aspect_ratio",
    "fallback_buffer",
    "is_facebook_reel",
    "select_adapter",
    "select_adapter_for_video",
    "video_aspect_ratio",
]
