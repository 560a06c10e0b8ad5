"""Pydantic models representing stored AI summaries."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from tubetrack.models.base import TubetrackBaseModel


class AiSummary(TubetrackBaseModel):
    """Domain model representing a row in the ``ai_summaries`` table.

    A row belongs to exactly one owner: a playlist (a *playlist summary*) or a single video (a
    *video summary*). ``key_points`` and ``tags`` are stored as JSON text columns and decoded
    here on read; :class:`tubetrack.db.summary_repository.SummaryRepository` encodes them again
    on write.
    """

    id: Optional[UUID] = None
    video_id: Optional[UUID] = None
    playlist_id: Optional[UUID] = None
    title: Optional[str] = None
    summary_text: Optional[str] = None
    key_points: List[str] = Field(default_factory=list)
    tags: Dict[str, Any] = Field(default_factory=dict)
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    is_bookmarked: bool = False
    generated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("key_points", mode="before")
    @classmethod
    def _decode_key_points(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            decoded = json.loads(value) if value.strip() else []
            return decoded if isinstance(decoded, list) else [str(decoded)]
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _decode_tags(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            decoded = json.loads(value) if value.strip() else {}
            # Legacy rows stored plain tag lists.
            return decoded if isinstance(decoded, dict) else {"labels": decoded}
        return value

    @field_validator("is_bookmarked", mode="before")
    @classmethod
    def _default_bookmark(cls, value: Any) -> Any:
        return False if value is None else value

    @model_validator(mode="after")
    def _require_single_owner(self) -> "AiSummary":
        if self.video_id is None and self.playlist_id is None:
            raise ValueError("A summary must reference a video or a playlist.")
        if self.video_id is not None and self.playlist_id is not None:
            raise ValueError("A summary cannot reference both a video and a playlist.")
        return self

    @property
    def is_playlist_summary(self) -> bool:
        return self.playlist_id is not None


__all__ = ["AiSummary"]
