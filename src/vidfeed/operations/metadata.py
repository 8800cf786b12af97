"""
Best-effort metadata for newly saved videos.

Title, thumbnail, author and duration come from the platform's oEmbed
endpoint where one exists, otherwise from scraping the page's meta tags,
JSON-LD and <video poster>. None of these sources has a stable contract,
so every field is an optional hint and fetch_metadata_hints() never
raises: on any failure it returns whatever it found so far.
"""

from __future__ import annotations

import html as html_lib
import json
import logging
import re
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlparse, urlunparse

from bs4 import BeautifulSoup, Tag

from vidfeed.config import defaults
from vidfeed.exceptions import MetadataError
from vidfeed.models.saved_video import AspectRatio
from vidfeed.models.video_source import Platform, VideoSource
from vidfeed.urls import classify, needs_redirect_resolution

logger = logging.getLogger(__name__)

_HTML_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,image/apng,*/*;q=0.8"
)

_OEMBED_ENDPOINTS = {
    Platform.YOUTUBE: "https://www.youtube.com/oembed?url={url}&format=json",
    Platform.YOUTUBE_SHORTS: "https://www.youtube.com/oembed?url={url}&format=json",
    Platform.TIKTOK: "https://www.tiktok.com/oembed?url={url}",
    Platform.VIMEO: "https://vimeo.com/api/oembed.json?url={url}",
    Platform.INSTAGRAM: "https://api.instagram.com/oembed/?url={url}",
    Platform.PINTEREST: "https://www.pinterest.com/oembed.json?url={url}",
    Platform.TWITCH: "https://www.twitch.tv/oembed?url={url}",
}

# Platforms whose page HTML is scraped when oEmbed gave no thumbnail
_SCRAPED_PLATFORMS = frozenset(
    [Platform.FACEBOOK, Platform.INSTAGRAM, Platform.TWITCH, Platform.OTHER]
)

_VERTICAL_MARKERS = ("/shorts/", "/reel/", "/reels/", "fb.watch")

_ISO_DURATION = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")
_TITLE_COUNTER = re.compile(r"^\(\d+\)\s*")
_TITLE_SUFFIX = re.compile(r"\s*-\s*(YouTube|TikTok|Vimeo|Instagram|Facebook|Twitch)\s*$", re.I)
_JSON_THUMBNAIL = re.compile(r"[\"']thumbnail_url[\"']:\s*[\"']([^\"']+)[\"']", re.I)


@dataclass
class MetadataHints:
    """Scraped hints for a video. Empty strings and 0 mean "unknown"."""

    title: str = "Video"
    thumbnail_url: str = ""
    author_name: str = ""
    duration: int = 0
    platform: Platform = Platform.OTHER
    aspect_ratio: AspectRatio = AspectRatio.AUTO
    resolved_url: str = ""
    embed_html: str = ""
    sources: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "thumbnail_url": self.thumbnail_url,
            "author_name": self.author_name,
            "duration": self.duration,
            "platform": self.platform.value,
            "aspect_ratio": self.aspect_ratio.value,
            "resolved_url": self.resolved_url,
            "embed_html": self.embed_html,
            "sources": list(self.sources),
        }


@dataclass
class HttpResponse:
    url: str
    status: int
    body: str


def http_get(url: str, *, headers: dict[str, str] | None = None, timeout: float) -> HttpResponse:
    """GET a URL, following redirects.

    Raises:
        MetadataError: On network errors and non-2xx responses.
    """
    request = urllib.request.Request(url, headers=headers or {}, method="GET")
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:
            charset = resp.headers.get_content_charset() or "utf-8"
            body = resp.read().decode(charset, errors="replace")
            return HttpResponse(url=resp.geturl(), status=resp.status, body=body)
    except urllib.error.HTTPError as e:
        raise MetadataError(f"HTTP {e.code} from {url}", url=url, status=e.code) from e
    except (urllib.error.URLError, TimeoutError, OSError, ValueError) as e:
        raise MetadataError(f"Request to {url} failed: {e}", url=url) from e


def _soup(page: str) -> BeautifulSoup:
    return BeautifulSoup(page or "", "lxml")


def _attr(tag: Any, name: str) -> str | None:
    if isinstance(tag, Tag):
        value = tag.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        if value:
            return str(value).replace("\\u0026", "&")
    return None


def _meta_content(soup: BeautifulSoup, key: str, attr: str = "property") -> str | None:
    """Content of <meta {attr}=key content=...>."""
    return _attr(soup.find("meta", attrs={attr: key}), "content")


def _unescape(value: str) -> str:
    return html_lib.unescape(value).replace("\\u0026", "&")


def resolve_url_redirects(url: str, *, timeout: float = defaults.REDIRECT_TIMEOUT) -> str:
    """Follow a short link (vm.tiktok.com, pin.it, ...) to its target.

    Facebook share links that do not redirect are resolved through the
    page's og:url. Any failure returns the input unchanged.
    """
    if not needs_redirect_resolution(url):
        return url
    try:
        resp = http_get(
            url,
            headers={"User-Agent": defaults.DESKTOP_USER_AGENT, "Accept": _HTML_ACCEPT},
            timeout=timeout,
        )
    except MetadataError as e:
        logger.warning(f"Could not resolve short URL {url}: {e}")
        return url

    if "facebook.com/share/" in url and resp.url == url:
        og_url = _meta_content(_soup(resp.body), "og:url")
        if og_url:
            return og_url
    if resp.url and resp.url != url:
        logger.debug(f"Resolved {url} -> {resp.url}")
        return resp.url
    return url


def oembed_endpoint(source: VideoSource) -> str | None:
    """oEmbed URL for a source, or None if the platform has none."""
    template = _OEMBED_ENDPOINTS.get(source.kind)
    if template is None:
        return None
    return template.format(url=quote(source.canonical_url, safe=""))


def _to_seconds(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def parse_oembed(platform: Platform, data: dict[str, Any]) -> MetadataHints:
    """Map an oEmbed JSON payload onto hints."""
    hints = MetadataHints(platform=platform)
    hints.title = data.get("title") or hints.title
    hints.thumbnail_url = data.get("thumbnail_url") or ""
    hints.author_name = data.get("author_name") or ""
    if platform is Platform.INSTAGRAM:
        hints.embed_html = data.get("html") or ""
    if data.get("duration"):
        hints.duration = _to_seconds(data["duration"])
    if platform is Platform.VIMEO and data.get("video_duration"):
        hints.duration = _to_seconds(data["video_duration"])
    return hints


def parse_iso8601_duration(value: str) -> int:
    """Seconds in an ISO 8601 duration like "PT1M30S" (plain numbers too).

    Returns 0 for anything unparseable.
    """
    if not value:
        return 0
    match = _ISO_DURATION.search(value)
    if match and any(match.groups()):
        hours, minutes, seconds = (int(g or 0) for g in match.groups())
        return hours * 3600 + minutes * 60 + seconds
    return _to_seconds(value)


def _video_object(item: Any) -> dict[str, Any] | None:
    if not isinstance(item, dict):
        return None
    if item.get("@type") == "VideoObject":
        return item
    for node in item.get("@graph") or []:
        if isinstance(node, dict) and node.get("@type") == "VideoObject":
            return node
    return None


def _parse_json_ld(soup: BeautifulSoup, hints: MetadataHints) -> None:
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.get_text())
        except ValueError:
            continue
        for item in data if isinstance(data, list) else [data]:
            video = _video_object(item)
            if video is None:
                continue
            thumbnail = video.get("thumbnailUrl")
            if isinstance(thumbnail, list):
                thumbnail = thumbnail[0] if thumbnail else None
            if thumbnail:
                hints.thumbnail_url = thumbnail
            if video.get("name"):
                hints.title = video["name"]
            if video.get("duration"):
                hints.duration = parse_iso8601_duration(str(video["duration"]))
            hints.sources.append("json-ld")
            break
        if hints.thumbnail_url:
            return


def parse_html_hints(page: str) -> MetadataHints:
    """Scrape hints from a page's HTML.

    Thumbnail sources in order: og:image (or an embedded thumbnail_url),
    twitter:image, JSON-LD VideoObject, <video poster>. The title comes
    from JSON-LD, og:title or <title>.
    """
    hints = MetadataHints()
    soup = _soup(page)

    image = _meta_content(soup, "og:image")
    if image is None:
        match = _JSON_THUMBNAIL.search(page or "")
        image = _unescape(match.group(1)) if match else None
    if image is None:
        image = _meta_content(soup, "twitter:image", attr="name")
    if image:
        hints.thumbnail_url = image
        hints.sources.append("meta")

    if not hints.thumbnail_url:
        _parse_json_ld(soup, hints)

    if not hints.thumbnail_url:
        poster = _attr(soup.find("video", attrs={"poster": True}), "poster")
        if poster:
            hints.thumbnail_url = poster
            hints.sources.append("poster")

    if hints.title == "Video":
        title = _meta_content(soup, "og:title")
        if title is None and soup.title and isinstance(soup.title.string, str):
            title = soup.title.string
        if title and title.strip():
            hints.title = title.strip()

    return hints


def oembed_discovery_url(page: str) -> str | None:
    link = _soup(page).find("link", attrs={"type": "application/json+oembed", "href": True})
    return _attr(link, "href")


def clean_title(title: str) -> str:
    """Drop "(3) " notification counters and " - YouTube" style suffixes."""
    title = _TITLE_COUNTER.sub("", title or "")
    title = _TITLE_SUFFIX.sub("", title)
    return title.strip()


def suggested_aspect_ratio(source: VideoSource, url: str) -> AspectRatio:
    """Aspect ratio to store for a new video (vertical or auto)."""
    if source.kind in (Platform.TIKTOK, Platform.INSTAGRAM, Platform.YOUTUBE_SHORTS):
        return AspectRatio.VERTICAL
    if any(marker in url for marker in _VERTICAL_MARKERS):
        return AspectRatio.VERTICAL
    return AspectRatio.AUTO


def _scrape_url(source: VideoSource, resolved_url: str) -> tuple[str, str]:
    """URL and user agent for scraping; mobile pages expose more meta tags."""
    if source.kind is Platform.FACEBOOK:
        parsed = urlparse(resolved_url)
        return urlunparse(parsed._replace(netloc="m.facebook.com")), defaults.MOBILE_USER_AGENT
    if source.kind is Platform.INSTAGRAM:
        if "/embed/" in resolved_url:
            return resolved_url, defaults.MOBILE_USER_AGENT
        parsed = urlparse(resolved_url)
        path = parsed.path.rstrip("/") + "/embed/"
        return urlunparse(parsed._replace(path=path, query="")), defaults.MOBILE_USER_AGENT
    return resolved_url, defaults.DESKTOP_USER_AGENT


def _fetch_json(url: str, timeout: float) -> dict[str, Any]:
    resp = http_get(url, headers={"User-Agent": defaults.DESKTOP_USER_AGENT}, timeout=timeout)
    try:
        data = json.loads(resp.body)
    except ValueError as e:
        raise MetadataError(f"Invalid JSON from {url}", url=url) from e
    if not isinstance(data, dict):
        raise MetadataError(f"Unexpected JSON from {url}", url=url)
    return data


def _merge_scraped(hints: MetadataHints, scraped: MetadataHints) -> None:
    if scraped.thumbnail_url:
        hints.thumbnail_url = scraped.thumbnail_url
    if hints.title == "Video" and scraped.title != "Video":
        hints.title = scraped.title
    if not hints.duration and scraped.duration:
        hints.duration = scraped.duration
    hints.sources.extend(scraped.sources)


def fetch_metadata_hints(url: str, *, timeout: float = defaults.METADATA_TIMEOUT) -> MetadataHints:
    """Gather metadata hints for a URL. Never raises."""
    resolved = resolve_url_redirects(url)
    source = classify(resolved)
    hints = MetadataHints(
        platform=source.kind,
        aspect_ratio=suggested_aspect_ratio(source, url),
        resolved_url=resolved,
    )

    endpoint = oembed_endpoint(source)
    if endpoint:
        try:
            parsed = parse_oembed(source.kind, _fetch_json(endpoint, timeout))
        except MetadataError as e:
            logger.info(f"oEmbed unavailable for {resolved}: {e}")
        else:
            hints.title = parsed.title
            hints.thumbnail_url = parsed.thumbnail_url
            hints.author_name = parsed.author_name
            hints.duration = parsed.duration
            hints.embed_html = parsed.embed_html
            hints.sources.append("oembed")

    if not hints.thumbnail_url and source.kind in _SCRAPED_PLATFORMS:
        scrape_url, user_agent = _scrape_url(source, resolved)
        try:
            resp = http_get(
                scrape_url,
                headers={
                    "User-Agent": user_agent,
                    "Accept": _HTML_ACCEPT,
                    "Accept-Language": "en-US,en;q=0.9",
                    "Cache-Control": "no-cache",
                },
                timeout=timeout,
            )
        except MetadataError as e:
            logger.info(f"Page scrape failed for {scrape_url}: {e}")
        else:
            scraped = parse_html_hints(resp.body)
            _merge_scraped(hints, scraped)
            if not hints.thumbnail_url:
                discovered = oembed_discovery_url(resp.body)
                if discovered:
                    try:
                        data = parse_oembed(source.kind, _fetch_json(discovered, timeout))
                    except MetadataError as e:
                        logger.debug(f"Discovered oEmbed failed: {e}")
                    else:
                        hints.thumbnail_url = data.thumbnail_url
                        if data.title != "Video":
                            hints.title = data.title
                        hints.sources.append("oembed-discovery")

    if source.kind.is_youtube and source.external_id:
        hints.thumbnail_url = f"https://img.youtube.com/vi/{source.external_id}/maxresdefault.jpg"

    if source.kind is Platform.TWITCH and hints.thumbnail_url:
        hints.thumbnail_url = (
            hints.thumbnail_url.replace("{width}", "640").replace("{height}", "360")
        )

    hints.title = clean_title(hints.title) or "Video"
    return hints


__all__ = [
    "MetadataHints",
    "clean_title",
    "fetch_metadata_hints",
    "needs_redirect_resolution",
    "oembed_endpoint",
    "parse_html_hints",
    "parse_iso8601_duration",
    "parse_oembed",
    "resolve_url_redirects",
    "suggested_aspect_ratio",
]
