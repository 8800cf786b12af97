"""
Player adapter selection.

Maps a classified VideoSource plus its presentation context to an
EmbedSpec: a parametric iframe for platforms with public embeds, custom
HTML for Instagram, or a generic media element for everything else.

Only YouTube (player variable) and the generic media path can seek to a
resume position. Other embeds play from the start; that is an accepted
limitation of their embed APIs, not an error.
"""

from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import quote, urlencode

from vidfeed.config import defaults
from vidfeed.config.loader import VidfeedConfig, get_config
from vidfeed.embed.aspect import is_vertical as _is_vertical
from vidfeed.embed.instagram import build_placeholder_html
from vidfeed.models.embed import (
    CustomEmbed,
    EmbedContext,
    EmbedSpec,
    GenericMediaEmbed,
    IframeEmbed,
    ScaleHint,
)
from vidfeed.models.saved_video import SavedVideo
from vidfeed.models.video_source import Platform, VideoSource
from vidfeed.urls import classify, clean_permalink

logger = logging.getLogger(__name__)

CROP = ScaleHint(scale=defaults.CROP_SCALE)

AdapterBuilder = Callable[[VideoSource, EmbedContext, str], "EmbedSpec | None"]


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


def _start_seconds(ctx: EmbedContext) -> int:
    return max(0, int(ctx.start_at or 0))


def _youtube(source: VideoSource, ctx: EmbedContext, parent: str) -> IframeEmbed | None:
    if not source.external_id:
        return None
    params = {
        "autoplay": _flag(ctx.should_autoplay),
        "rel": "0",
        "start": str(_start_seconds(ctx)),
        "enablejsapi": "1",
        "playsinline": "1",
        "origin": f"https://{parent}",
    }
    if not ctx.is_active:
        params["mute"] = "1"
    if ctx.is_vertical:
        params["controls"] = "1"
    return IframeEmbed(
        platform=source.kind,
        src=f"{defaults.YOUTUBE_EMBED_BASE}{source.external_id}?{urlencode(params)}",
        allow=defaults.IFRAME_ALLOW_DEFAULT,
        # Only the vertical layout is cropped; horizontal embeds fit exactly
        scale=CROP if ctx.is_vertical else None,
        muted=not ctx.is_active,
        honors_start=True,
    )


def _tiktok(source: VideoSource, ctx: EmbedContext, parent: str) -> IframeEmbed | None:
    if not source.external_id:
        return None
    params = {
        "music_info": "1",
        "description": "1",
        "autoplay": _flag(ctx.should_autoplay),
        "muted": _flag(not ctx.is_active),
    }
    return IframeEmbed(
        platform=source.kind,
        src=f"{defaults.TIKTOK_PLAYER_BASE}{source.external_id}?{urlencode(params)}",
        allow=defaults.IFRAME_ALLOW_DEFAULT,
        allow_fullscreen=False,
        scale=CROP,
        muted=not ctx.is_active,
    )


def _vimeo(source: VideoSource, ctx: EmbedContext, parent: str) -> IframeEmbed | None:
    if not source.external_id:
        return None
    # external_id may already carry "?h=<hash>" for unlisted videos
    sep = "&" if "?" in source.external_id else "?"
    params = {"autoplay": _flag(ctx.should_autoplay)}
    if not ctx.is_active:
        params["muted"] = "1"
    src = (
        f"{defaults.VIMEO_PLAYER_BASE}{source.external_id}{sep}{urlencode(params)}"
        f"#t={_start_seconds(ctx)}s"
    )
    return IframeEmbed(
        platform=source.kind,
        src=src,
        allow=defaults.IFRAME_ALLOW_PLAYER,
        muted=not ctx.is_active,
    )


def _facebook(source: VideoSource, ctx: EmbedContext, parent: str) -> IframeEmbed:
    href = quote(source.canonical_url, safe="")
    src = (
        f"{defaults.FACEBOOK_PLUGIN_URL}?href={href}"
        f"&autoplay={_bool_param(ctx.should_autoplay)}&show_text=false"
    )
    if not ctx.is_active:
        src += "&mute=true"
    return IframeEmbed(
        platform=source.kind,
        src=src,
        allow=defaults.IFRAME_ALLOW_PLAYER,
        scale=CROP,
        muted=not ctx.is_active,
    )


def _pinterest(source: VideoSource, ctx: EmbedContext, parent: str) -> IframeEmbed | None:
    if not source.external_id:
        return None
    return IframeEmbed(
        platform=source.kind,
        src=f"{defaults.PINTEREST_EMBED_URL}?id={source.external_id}",
        allow=defaults.IFRAME_ALLOW_MINIMAL,
        allow_fullscreen=False,
        scale=CROP,
    )


def _twitch(source: VideoSource, ctx: EmbedContext, parent: str) -> IframeEmbed | None:
    if not source.external_id:
        return None
    url = source.canonical_url
    autoplay = _bool_param(ctx.should_autoplay)

    # Clip and VOD ids live in the same field, so the URL decides
    if "/clip/" in url or "clips.twitch.tv" in url:
        params = {"clip": source.external_id, "parent": parent, "autoplay": autoplay}
        src = f"{defaults.TWITCH_CLIPS_EMBED_URL}?{urlencode(params)}"
    else:
        if "/videos/" in url:
            vod = source.external_id
            target = ("video", vod if vod.startswith("v") else f"v{vod}")
        else:
            target = ("channel", source.external_id)
        params = {
            target[0]: target[1],
            "parent": parent,
            "autoplay": autoplay,
            "muted": _bool_param(not ctx.is_active),
        }
        src = f"{defaults.TWITCH_PLAYER_URL}?{urlencode(params)}"

    return IframeEmbed(
        platform=source.kind,
        src=src,
        allow=defaults.IFRAME_ALLOW_PLAYER,
        muted=not ctx.is_active,
    )


def _generic(source: VideoSource, ctx: EmbedContext, parent: str) -> GenericMediaEmbed:
    start = _start_seconds(ctx)
    return GenericMediaEmbed(
        platform=source.kind,
        url=source.canonical_url,
        playing=ctx.should_autoplay,
        muted=not ctx.is_active,
        start_at=float(start) if start else None,
        config={
            "youtube": {
                "playerVars": {"start": start, "autoplay": _flag(ctx.should_autoplay)}
            },
            "twitch": {"options": {"parent": [parent]}},
            "facebook": {
                "attributes": {"data-show-text": "false", "data-show-captions": "false"}
            },
            "file": {
                "attributes": {
                    "style": {"width": "100%", "height": "100%", "objectFit": "contain"}
                }
            },
        },
    )


_IFRAME_BUILDERS: dict[Platform, AdapterBuilder] = {
    Platform.YOUTUBE: _youtube,
    Platform.YOUTUBE_SHORTS: _youtube,
    Platform.TIKTOK: _tiktok,
    Platform.VIMEO: _vimeo,
    Platform.FACEBOOK: _facebook,
    Platform.PINTEREST: _pinterest,
    Platform.TWITCH: _twitch,
}


def select_adapter(
    source: VideoSource,
    ctx: EmbedContext | None = None,
    *,
    embed_html: str | None = None,
    config: VidfeedConfig | None = None,
) -> EmbedSpec:
    """Pick and parameterize the embed strategy for a source.

    Args:
        source: Classified source.
        ctx: Presentation context (defaults to an active, autoplaying,
            horizontal player).
        embed_html: Pre-fetched oEmbed HTML, used for Instagram only.
        config: Settings supplying the default parent domain.

    Returns:
        IframeEmbed, CustomEmbed or GenericMediaEmbed.
    """
    ctx = ctx or EmbedContext()
    parent = ctx.parent_domain or (config or get_config()).parent_domain

    if source.kind is Platform.INSTAGRAM:
        permalink = clean_permalink(source.canonical_url) + "/"
        return CustomEmbed(
            html=embed_html or build_placeholder_html(permalink),
            permalink=permalink,
        )

    builder = _IFRAME_BUILDERS.get(source.kind)
    if builder is not None:
        spec = builder(source, ctx, parent)
        if spec is not None:
            return spec
        logger.debug(f"No embeddable id for {source.kind.value}, using generic player")

    return _generic(source, ctx, parent)


def select_adapter_for_video(
    video: SavedVideo,
    *,
    is_active: bool = True,
    autoplay: bool = True,
    source: VideoSource | None = None,
    parent_domain: str | None = None,
    config: VidfeedConfig | None = None,
) -> EmbedSpec:
    """Build the embed for a saved video, resuming from its saved position."""
    source = source or classify(video.url)
    ctx = EmbedContext(
        is_vertical=_is_vertical(video, source),
        autoplay=autoplay,
        is_active=is_active,
        start_at=video.resume_position or None,
        parent_domain=parent_domain,
    )
    return select_adapter(source, ctx, embed_html=video.embed_html, config=config)


def can_report_ended(spec: EmbedSpec) -> bool:
    """Check if an embed emits an "ended" event the sequencer can react to.

    Iframe and Instagram embeds expose no such signal, so playlists fall
    back to a duration-based timer for them.
    """
    return isinstance(spec, GenericMediaEmbed)


def fallback_buffer(platform: Platform, config: VidfeedConfig | None = None) -> float:
    """Seconds added to a video's duration before forcing auto-advance."""
    config = config or get_config()
    if platform is Platform.PINTEREST:
        return config.pinterest_fallback_buffer_seconds
    return config.fallback_buffer_seconds
