"""Pydantic models describing YouTube playlists."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import ConfigDict, Field

from tubetrack.models.base import TubetrackBaseModel
from tubetrack.models.video import VideoMeta


class PlaylistMeta(TubetrackBaseModel):
    """Playlist-level facts returned by the YouTube Data API."""

    playlist_id: str = Field(min_length=1)
    title: str = ""
    description: str = ""
    total_videos: int = Field(default=0, ge=0)
    thumbnail_url: Optional[str] = None


class PlaylistSnapshot(TubetrackBaseModel):
    """Request-local view of a playlist used as prompt input and then discarded."""

    meta: PlaylistMeta
    videos: List[VideoMeta] = Field(default_factory=list)
    transcripts_attempted: bool = False

    @property
    def total_duration_seconds(self) -> int:
        return sum(video.duration_seconds for video in self.videos)

    @property
    def transcripts_found(self) -> int:
        return sum(1 for video in self.videos if video.has_transcript)


class PlaylistRecord(TubetrackBaseModel):
    """Domain model representing a row in the ``playlists`` table.

    The table is owned by the playlist CRUD layer, so unknown columns are ignored.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    id: UUID
    user_id: Optional[UUID] = None
    yt_id: Optional[str] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


__all__ = ["PlaylistMeta", "PlaylistRecord", "PlaylistSnapshot"]
