"""
URL classification for vidfeed.

Turns an arbitrary user-submitted link into a VideoSource descriptor.
Platforms are detected by hostname substring, checked in the priority
order of CLASSIFIER_RULES (first rule whose hostname test passes and
whose extractor yields a source wins). A rule whose extractor cannot find
an id falls through to the next rule and, eventually, to ``other``.

classify() is pure and never raises.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable
from urllib.parse import parse_qs, urlparse

from vidfeed.models.video_source import Platform, VideoSource

logger = logging.getLogger(__name__)

_HOST_PATTERN = re.compile(r"^[\w.-]+$")
_NUMERIC = re.compile(r"^\d+$")
_TIKTOK_VIDEO = re.compile(r"/video/(\d+)")
_TRAILING_NUMERIC = re.compile(r"/(\d+)$")
_PINTEREST_PIN = re.compile(r"/pin/(\d+)")
_PINTEREST_TRAILING = re.compile(r"/(\d+)/?$")

# Hosts/paths that are short links redirecting to the real video page
_REDIRECTING_MARKERS = (
    "vm.tiktok.com",
    "vt.tiktok.com",
    "tiktok.com/t/",
    "facebook.com/share/",
    "fb.watch/",
    "clips.twitch.tv",
    "pin.it",
)


@dataclass(frozen=True)
class ParsedLink:
    """A normalized URL split into the parts extractors look at."""

    url: str
    host: str
    path: str
    query: dict[str, list[str]]

    @property
    def segments(self) -> list[str]:
        return [p for p in self.path.split("/") if p]


@dataclass(frozen=True)
class ClassifierRule:
    """One row of the classification table."""

    name: str
    hosts: tuple[str, ...]
    extract: Callable[[ParsedLink], VideoSource | None]

    def matches(self, link: ParsedLink) -> bool:
        return any(h in link.host for h in self.hosts)


def _segment_after(path: str, marker: str) -> str:
    """Return the path segment following ``marker`` (e.g. '/shorts/')."""
    tail = path.split(marker, 1)[1] if marker in path else ""
    return tail.split("/", 1)[0]


def _extract_youtube(link: ParsedLink) -> VideoSource | None:
    kind = Platform.YOUTUBE
    if "youtu.be" in link.host:
        video_id = link.segments[0] if link.segments else ""
    elif "/shorts/" in link.path:
        video_id = _segment_after(link.path, "/shorts/")
        kind = Platform.YOUTUBE_SHORTS
    elif "/v/" in link.path:
        video_id = _segment_after(link.path, "/v/")
    elif "/embed/" in link.path:
        video_id = _segment_after(link.path, "/embed/")
    else:
        video_id = (link.query.get("v") or [""])[0]

    # Malformed concatenations like "ID&t=10" end up inside the id
    video_id = video_id.split("&", 1)[0]
    if not video_id:
        return None
    return VideoSource(kind=kind, external_id=video_id, canonical_url=link.url)


def _extract_tiktok(link: ParsedLink) -> VideoSource | None:
    match = _TIKTOK_VIDEO.search(link.path) or _TRAILING_NUMERIC.search(link.path)
    if not match:
        return None
    return VideoSource(
        kind=Platform.TIKTOK, external_id=match.group(1), canonical_url=link.url
    )


def _extract_vimeo(link: ParsedLink) -> VideoSource | None:
    parts = link.segments
    for idx, part in enumerate(parts):
        if _NUMERIC.match(part):
            # Unlisted videos carry a share hash that playback must include
            video_id = f"{part}?h={parts[idx + 1]}" if idx + 1 < len(parts) else part
            return VideoSource(
                kind=Platform.VIMEO, external_id=video_id, canonical_url=link.url
            )
    return None


def _extract_facebook(link: ParsedLink) -> VideoSource | None:
    # The video plugin takes the whole URL, so there is no id to extract
    return VideoSource(kind=Platform.FACEBOOK, canonical_url=link.url)


def _extract_instagram(link: ParsedLink) -> VideoSource | None:
    if "/reel/" in link.path or "/reels/" in link.path:
        subtype = "reel"
    elif "/tv/" in link.path:
        subtype = "tv"
    else:
        subtype = "post"
    segments = link.segments
    return VideoSource(
        kind=Platform.INSTAGRAM,
        external_id=segments[-1] if segments else None,
        subtype=subtype,
        canonical_url=link.url,
    )


def _extract_pinterest(link: ParsedLink) -> VideoSource | None:
    match = _PINTEREST_PIN.search(link.path) or _PINTEREST_TRAILING.search(link.path)
    if not match:
        return None
    return VideoSource(
        kind=Platform.PINTEREST, external_id=match.group(1), canonical_url=link.url
    )


def _extract_twitch(link: ParsedLink) -> VideoSource | None:
    segments = link.segments
    if "/videos/" in link.path:
        video_id = _segment_after(link.path, "/videos/")
    elif "/clip/" in link.path or "clips.twitch.tv" in link.host:
        video_id = segments[-1] if segments else ""
    else:
        # Anything else is treated as a live channel name
        video_id = segments[0] if segments else ""
    if not video_id:
        return None
    return VideoSource(kind=Platform.TWITCH, external_id=video_id, canonical_url=link.url)


# Priority order matters: hostnames are tested by substring
CLASSIFIER_RULES: list[ClassifierRule] = [
    ClassifierRule("YouTube", ("youtube.com", "youtu.be"), _extract_youtube),
    ClassifierRule("TikTok", ("tiktok.com",), _extract_tiktok),
    ClassifierRule("Vimeo", ("vimeo.com",), _extract_vimeo),
    ClassifierRule("Facebook", ("facebook.com", "fb.watch"), _extract_facebook),
    ClassifierRule("Instagram", ("instagram.com",), _extract_instagram),
    ClassifierRule("Pinterest", ("pinterest.com", "pin.it"), _extract_pinterest),
    ClassifierRule("Twitch", ("twitch.tv",), _extract_twitch),
]


def normalize_url(raw_url: str | None) -> str:
    """Trim whitespace and add an https:// scheme when none is present."""
    url = (raw_url or "").strip()
    if url and not url.lower().startswith(("http://", "https://")):
        url = "https://" + url
    return url


def parse_link(raw_url: str | None) -> ParsedLink | None:
    """Normalize and split a URL, or return None if it is not a usable URL."""
    url = normalize_url(raw_url)
    if not url:
        return None
    try:
        parsed = urlparse(url)
        host = parsed.hostname or ""
    except ValueError:
        return None
    if not host or not _HOST_PATTERN.match(host):
        return None
    return ParsedLink(url=url, host=host, path=parsed.path, query=parse_qs(parsed.query))


def classify(raw_url: str | None) -> VideoSource:
    """Classify a raw URL into a normalized VideoSource.

    Args:
        raw_url: Any user-submitted string (may be None, empty, or garbage).

    Returns:
        VideoSource. Unparseable input yields kind ``other`` with the raw
        string as ``canonical_url``; recognized hosts without an extractable
        id yield kind ``other`` with the normalized URL.
    """
    link = parse_link(raw_url)
    if link is None:
        logger.debug(f"Unparseable URL, classifying as other: {raw_url!r}")
        return VideoSource(kind=Platform.OTHER, canonical_url=raw_url or "")

    for rule in CLASSIFIER_RULES:
        if not rule.matches(link):
            continue
        source = rule.extract(link)
        if source is not None:
            return source
        logger.debug(f"{rule.name} host without extractable id: {link.url}")

    return VideoSource(kind=Platform.OTHER, canonical_url=link.url)


def clean_permalink(url: str) -> str:
    """Strip the query string and trailing slash from a permalink."""
    return url.split("?", 1)[0].rstrip("/")


def needs_redirect_resolution(url: str) -> bool:
    """Check if a URL is a short link that must be followed to the real page."""
    return any(marker in url for marker in _REDIRECTING_MARKERS)


def list_supported_platforms() -> list[str]:
    """List the platforms with dedicated classification rules."""
    return [rule.name for rule in CLASSIFIER_RULES]
