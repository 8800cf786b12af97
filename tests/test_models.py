"""Tests for pydantic models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from vidfeed.exceptions import PlaybackError
from vidfeed.models.embed import EmbedContext, EmbedSpec, GenericMediaEmbed
from vidfeed.models.saved_video import AspectRatio, SavedVideo
from vidfeed.models.session import PlaybackSession
from vidfeed.models.video_source import Platform, VideoSource


class TestSavedVideo:
    def test_duration_coercion(self):
        assert SavedVideo(id=1, url="u", duration="61.9").duration == 61
        assert SavedVideo(id=1, url="u", duration="n/a").duration is None
        assert SavedVideo(id=1, url="u", duration="").duration is None

    def test_known_duration(self):
        assert SavedVideo(id=1, url="u", duration=10).has_known_duration
        assert not SavedVideo(id=1, url="u", duration=0).has_known_duration

    def test_resume_position(self):
        assert SavedVideo(id=1, url="u", last_timestamp=None).resume_position == 0.0
        assert SavedVideo(id=1, url="u", last_timestamp=30).resume_position == 30.0

    def test_aspect_ratio_values(self):
        assert SavedVideo(id=1, url="u", aspect_ratio="square").aspect_ratio is AspectRatio.SQUARE
        assert SavedVideo(id=1, url="u", aspect_ratio=None).aspect_ratio is AspectRatio.AUTO


class TestVideoSource:
    def test_frozen(self):
        source = VideoSource(kind=Platform.VIMEO, external_id="1", canonical_url="https://vimeo.com/1")
        with pytest.raises(ValidationError):
            source.external_id = "2"

    def test_str(self):
        assert str(VideoSource(kind=Platform.TIKTOK, external_id="9")) == "tiktok:9"
        assert str(VideoSource(kind=Platform.OTHER, canonical_url="x")) == "other:x"

    def test_youtube_family(self):
        assert Platform.YOUTUBE_SHORTS.is_youtube
        assert not Platform.VIMEO.is_youtube


class TestEmbedSpec:
    def test_discriminated_by_kind(self):
        spec = TypeAdapter(EmbedSpec).validate_python({"kind": "generic", "url": "https://x.test/a.mp4"})
        assert isinstance(spec, GenericMediaEmbed)

    def test_inactive_never_autoplays(self):
        assert not EmbedContext(autoplay=True, is_active=False).should_autoplay
        assert EmbedContext().should_autoplay


def test_session_to_dict():
    session = PlaybackSession(video_id=3, active_index=1, has_started=True)
    assert session.to_dict() == {
        "video_id": 3,
        "active_index": 1,
        "has_started": True,
        "has_errored": False,
    }


def test_playback_error():
    error = PlaybackError(5, "restricted")
    assert str(error) == "Playback failed for video 5: restricted"
    assert error.to_dict() == {"type": "PlaybackError", "video_id": 5, "reason": "restricted"}
