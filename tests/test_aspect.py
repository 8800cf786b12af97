"""Tests for effective aspect ratio resolution."""

import pytest
from conftest import make_video

from vidfeed.embed.aspect import (
    effective_aspect_ratio,
    is_facebook_reel,
    is_vertical,
    video_aspect_ratio,
)
from vidfeed.models.saved_video import AspectRatio
from vidfeed.urls import classify


class TestEffectiveAspectRatio:
    """Platform heuristics for the ``auto`` setting."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.tiktok.com/@u/video/123",
            "https://www.youtube.com/shorts/xyz789",
            "https://www.instagram.com/reel/Cx1AbC/",
            "https://www.facebook.com/reel/123456",
            "https://www.facebook.com/share/r/abc/",
        ],
    )
    def test_vertical_by_default(self, url):
        assert effective_aspect_ratio(classify(url)) is AspectRatio.VERTICAL

    @pytest.mark.parametrize(
        "url",
        [
            "https://youtu.be/abc123",
            "https://vimeo.com/12345",
            "https://www.facebook.com/watch/?v=123",
            "https://www.twitch.tv/videos/1",
            "https://example.com/a.mp4",
        ],
    )
    def test_horizontal_by_default(self, url):
        assert effective_aspect_ratio(classify(url)) is AspectRatio.HORIZONTAL

    def test_stored_value_wins(self):
        source = classify("https://www.tiktok.com/@u/video/123")
        assert effective_aspect_ratio(source, "horizontal") is AspectRatio.HORIZONTAL
        assert effective_aspect_ratio(source, AspectRatio.SQUARE) is AspectRatio.SQUARE

    def test_empty_stored_means_auto(self):
        source = classify("https://youtu.be/abc123")
        assert effective_aspect_ratio(source, "") is AspectRatio.HORIZONTAL


class TestFacebookReel:
    def test_fb_watch_host(self):
        assert is_facebook_reel("https://fb.watch/abc/")

    def test_plain_video(self):
        assert not is_facebook_reel("https://www.facebook.com/page/videos/123/")


class TestSavedVideo:
    def test_video_helpers(self):
        video = make_video(1, "https://www.youtube.com/shorts/xyz789")
        assert video_aspect_ratio(video) is AspectRatio.VERTICAL
        assert is_vertical(video)

    def test_unknown_stored_value_is_auto(self):
        video = make_video(1, "https://youtu.be/abc123", aspect_ratio="cinemascope")
        assert video.aspect_ratio is AspectRatio.AUTO
        assert not is_vertical(video)
