"""Tests for URL classification."""

import pytest

from vidfeed.models.video_source import Platform
from vidfeed.urls import (
    CLASSIFIER_RULES,
    classify,
    clean_permalink,
    list_supported_platforms,
    needs_redirect_resolution,
    normalize_url,
    parse_link,
)


class TestYouTube:
    """Tests for YouTube id extraction."""

    def test_short_link(self):
        s = classify("https://youtu.be/abc123")
        assert s.kind is Platform.YOUTUBE
        assert s.external_id == "abc123"

    def test_shorts_with_query(self):
        s = classify("https://www.youtube.com/shorts/xyz789?x=1")
        assert s.kind is Platform.YOUTUBE_SHORTS
        assert s.external_id == "xyz789"

    def test_watch_url(self):
        s = classify("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=120&list=PLxyz")
        assert s.kind is Platform.YOUTUBE
        assert s.external_id == "dQw4w9WgXcQ"

    def test_embed_and_v_paths(self):
        assert classify("https://youtube.com/embed/dQw4w9WgXcQ").external_id == "dQw4w9WgXcQ"
        assert classify("https://youtube.com/v/dQw4w9WgXcQ").external_id == "dQw4w9WgXcQ"

    def test_malformed_concatenation_is_trimmed(self):
        s = classify("https://youtu.be/abc123&t=10")
        assert s.external_id == "abc123"

    def test_no_id_falls_through_to_other(self):
        s = classify("https://www.youtube.com/feed/subscriptions")
        assert s.kind is Platform.OTHER
        assert s.canonical_url == "https://www.youtube.com/feed/subscriptions"


class TestOtherPlatforms:
    """Tests for the non-YouTube rules."""

    def test_tiktok_video(self):
        s = classify("https://www.tiktok.com/@celiatoks/video/7454538602173697313")
        assert s.kind is Platform.TIKTOK
        assert s.external_id == "7454538602173697313"

    def test_tiktok_trailing_numeric(self):
        s = classify("https://www.tiktok.com/embed/7454538602173697313")
        assert s.external_id == "7454538602173697313"

    def test_tiktok_without_id_is_other(self):
        assert classify("https://www.tiktok.com/@celiatoks").kind is Platform.OTHER

    def test_vimeo_plain(self):
        s = classify("https://vimeo.com/12345")
        assert s.kind is Platform.VIMEO
        assert s.external_id == "12345"

    def test_vimeo_share_hash(self):
        s = classify("https://vimeo.com/12345/abcdef")
        assert s.external_id == "12345?h=abcdef"

    def test_vimeo_channel_path(self):
        assert classify("https://vimeo.com/channels/staffpicks/12345").external_id == "12345"

    def test_facebook_has_no_id(self):
        s = classify("https://www.facebook.com/watch/?v=123")
        assert s.kind is Platform.FACEBOOK
        assert s.external_id is None
        assert s.canonical_url == "https://www.facebook.com/watch/?v=123"

    def test_fb_watch(self):
        assert classify("https://fb.watch/abcDEF/").kind is Platform.FACEBOOK

    @pytest.mark.parametrize(
        "url,subtype",
        [
            ("https://www.instagram.com/reel/Cx1AbC/", "reel"),
            ("https://www.instagram.com/tv/Cx1AbC/", "tv"),
            ("https://www.instagram.com/p/Cx1AbC/", "post"),
        ],
    )
    def test_instagram_subtypes(self, url, subtype):
        s = classify(url)
        assert s.kind is Platform.INSTAGRAM
        assert s.subtype == subtype
        assert s.external_id == "Cx1AbC"

    def test_pinterest_pin(self):
        s = classify("https://www.pinterest.com/pin/987654321/")
        assert s.kind is Platform.PINTEREST
        assert s.external_id == "987654321"

    def test_pinterest_short_link_without_id(self):
        assert classify("https://pin.it/aBcD").kind is Platform.OTHER

    def test_twitch_vod(self):
        s = classify("https://www.twitch.tv/videos/2001234567")
        assert s.kind is Platform.TWITCH
        assert s.external_id == "2001234567"

    def test_twitch_clip(self):
        assert classify("https://clips.twitch.tv/FunnyClipSlug").external_id == "FunnyClipSlug"
        assert (
            classify("https://www.twitch.tv/streamer/clip/FunnyClipSlug").external_id
            == "FunnyClipSlug"
        )

    def test_twitch_channel(self):
        assert classify("https://www.twitch.tv/streamer").external_id == "streamer"

    def test_unknown_host(self):
        s = classify("https://example.com/video.mp4")
        assert s.kind is Platform.OTHER
        assert s.canonical_url == "https://example.com/video.mp4"


class TestNormalization:
    """Tests for scheme insertion and graceful failure."""

    def test_scheme_added(self):
        s = classify("  youtu.be/abc123 ")
        assert s.canonical_url == "https://youtu.be/abc123"
        assert s.external_id == "abc123"

    def test_http_scheme_kept(self):
        assert normalize_url("HTTP://example.com") == "HTTP://example.com"

    def test_not_a_url(self):
        s = classify("not a url")
        assert s.kind is Platform.OTHER
        assert s.canonical_url == "not a url"

    @pytest.mark.parametrize("value", [None, "", "   ", "://", "http://", "https://[::1", "\x00"])
    def test_garbage_never_raises(self, value):
        s = classify(value)
        assert s.kind is Platform.OTHER

    def test_parse_link_rejects_spaces(self):
        assert parse_link("not a url") is None


class TestIdempotence:
    """Re-classifying the canonical URL yields the same result."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://youtu.be/abc123",
            "www.youtube.com/shorts/xyz789?x=1",
            "https://vimeo.com/12345/abcdef",
            "https://www.tiktok.com/@u/video/123",
            "https://www.instagram.com/reel/Cx1AbC/?igsh=1",
            "https://www.twitch.tv/videos/2001234567",
            "https://www.pinterest.com/pin/987654321/",
            "https://www.facebook.com/reel/123",
            "example.com/movie.mp4",
            "not a url",
        ],
    )
    def test_classify_canonical(self, url):
        first = classify(url)
        second = classify(first.canonical_url)
        assert (second.kind, second.external_id) == (first.kind, first.external_id)


class TestHelpers:
    """Tests for permalink and short-link helpers."""

    def test_clean_permalink(self):
        assert (
            clean_permalink("https://www.instagram.com/reel/Cx1AbC/?igsh=1")
            == "https://www.instagram.com/reel/Cx1AbC"
        )

    @pytest.mark.parametrize(
        "url",
        [
            "https://vm.tiktok.com/ZMabc/",
            "https://www.tiktok.com/t/ZTabc/",
            "https://www.facebook.com/share/r/abc/",
            "https://fb.watch/abc/",
            "https://pin.it/aBcD",
            "https://clips.twitch.tv/Slug",
        ],
    )
    def test_short_links(self, url):
        assert needs_redirect_resolution(url)

    def test_regular_link_not_short(self):
        assert not needs_redirect_resolution("https://www.youtube.com/watch?v=abc")

    def test_supported_platforms_follow_rule_order(self):
        names = list_supported_platforms()
        assert names == [rule.name for rule in CLASSIFIER_RULES]
        assert names[0] == "YouTube"
