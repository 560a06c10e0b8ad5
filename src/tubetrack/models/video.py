"""Pydantic models describing YouTube video metadata."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import ConfigDict, Field

from tubetrack.models.base import TubetrackBaseModel


class VideoMeta(TubetrackBaseModel):
    """Transient per-video facts gathered from the YouTube Data API.

    ``transcript`` is only populated by the rich gathering strategy, and only when a caption
    track could be fetched.
    """

    video_id: str = Field(min_length=1, max_length=20)
    title: str = ""
    description: str = ""
    duration_seconds: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    transcript: Optional[str] = None

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript)


class VideoRecord(TubetrackBaseModel):
    """Domain model representing a row in the ``videos`` table."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    id: UUID
    playlist_id: UUID
    yt_id: Optional[str] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = None
    position: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


__all__ = ["VideoMeta", "VideoRecord"]
