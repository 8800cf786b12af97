"""
Embed specifications produced by the player adapter selector.

An EmbedSpec is one of three variants, discriminated by ``kind``:

- ``iframe``: a parametric third-party player URL plus iframe permissions
- ``custom``: HTML that must be inserted as-is (Instagram); the caller is
  responsible for running the embed script after mounting it
- ``generic``: a plain media URL for a streaming media element that can
  report progress, pause, ended and error events
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from vidfeed.models.video_source import Platform


class ScaleHint(BaseModel):
    """CSS-style zoom applied to an iframe to crop embed chrome at its edges."""

    model_config = ConfigDict(frozen=True)

    scale: float = 1.0
    origin: str = "center"

    @property
    def css_transform(self) -> str:
        return f"scale({self.scale})"


class EmbedContext(BaseModel):
    """Presentation context a player is mounted in."""

    model_config = ConfigDict(frozen=True)

    is_vertical: bool = False
    autoplay: bool = True
    is_active: bool = True
    start_at: float | None = Field(None, description="Resume position in seconds")
    parent_domain: str | None = Field(
        None, description="Embedding host for Twitch parent= and YouTube origin"
    )

    @property
    def should_autoplay(self) -> bool:
        """Only the active (interactive) player may autoplay."""
        return self.autoplay and self.is_active


class IframeEmbed(BaseModel):
    """Third-party player loaded through an iframe URL."""

    kind: Literal["iframe"] = "iframe"
    platform: Platform
    src: str
    allow: str
    allow_fullscreen: bool = True
    scale: ScaleHint | None = None
    muted: bool = False
    honors_start: bool = False


class CustomEmbed(BaseModel):
    """Pre-rendered embed HTML (Instagram).

    When ``needs_script`` is set the HTML is a placeholder blockquote that
    only turns into a player once the platform's embed script has processed
    it after mount.
    """

    kind: Literal["custom"] = "custom"
    platform: Platform = Platform.INSTAGRAM
    html: str
    permalink: str
    needs_script: bool = True


class GenericMediaEmbed(BaseModel):
    """Streaming media element with progress/pause/ended/error callbacks."""

    kind: Literal["generic"] = "generic"
    platform: Platform = Platform.OTHER
    url: str
    playing: bool = True
    muted: bool = False
    start_at: float | None = None
    config: dict[str, Any] = Field(default_factory=dict)


EmbedSpec = Annotated[
    Union[IframeEmbed, CustomEmbed, GenericMediaEmbed],
    Field(discriminator="kind"),
]
