"""Models describing generation outcomes passed between services and callers."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from tubetrack.models.base import TubetrackBaseModel
from tubetrack.models.playlist import PlaylistMeta

DEFAULT_TARGET_AUDIENCE = "General learners"


class FailureKind(str, Enum):
    """Categories of generation failures surfaced to callers."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    CONFIGURATION = "configuration"


_HTTP_STATUS_BY_KIND = {
    FailureKind.INVALID_INPUT: 400,
    FailureKind.NOT_FOUND: 404,
    FailureKind.UPSTREAM_UNAVAILABLE: 422,
    FailureKind.CONFIGURATION: 500,
}

_ERROR_TITLE_BY_KIND = {
    FailureKind.INVALID_INPUT: "Invalid request",
    FailureKind.NOT_FOUND: "Not found",
    FailureKind.UPSTREAM_UNAVAILABLE: "Failed to generate summary",
    FailureKind.CONFIGURATION: "Summarization is not configured",
}


class GenerationFailure(TubetrackBaseModel):
    """Tagged error result returned instead of raising past the service boundary."""

    kind: FailureKind
    message: str
    status_code: Optional[int] = None

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS_BY_KIND[self.kind]

    def to_error_body(self) -> Dict[str, str]:
        """Render the uniform ``{error, message}`` envelope."""

        return {"error": _ERROR_TITLE_BY_KIND[self.kind], "message": self.message}


class PlaylistSummaryResult(TubetrackBaseModel):
    """Structured result of one playlist generation run."""

    summary: str
    key_topics: List[str] = Field(default_factory=list)
    target_audience: str = DEFAULT_TARGET_AUDIENCE
    difficulty_level: Optional[str] = None
    total_videos: int = Field(ge=0)
    total_time: str
    estimated_total_likes: str
    confidence: int = Field(ge=0, le=100)
    used_fallback: bool = False

    def summary_tags(self) -> Dict[str, Any]:
        """Return the structured metadata stored in the summary ``tags`` column."""

        return {
            "total_videos": self.total_videos,
            "total_time": self.total_time,
            "estimated_total_likes": self.estimated_total_likes,
            "target_audience": self.target_audience,
            "difficulty_level": self.difficulty_level,
        }


class VideoSummaryResult(TubetrackBaseModel):
    """Structured result of one video generation run."""

    summary: str
    key_points: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    difficulty_level: Optional[str] = None
    duration: str
    has_transcript: bool = False
    confidence: int = Field(ge=0, le=100)
    used_fallback: bool = False

    def summary_tags(self) -> Dict[str, Any]:
        return {
            "labels": self.tags,
            "duration": self.duration,
            "difficulty_level": self.difficulty_level,
            "has_transcript": self.has_transcript,
        }


class PlaylistAnalysis(TubetrackBaseModel):
    """Pre-watch analysis of a public playlist; never persisted."""

    playlist: PlaylistMeta
    video_count: int = Field(ge=0)
    total_duration_seconds: int = Field(ge=0)
    total_duration_formatted: str
    analysis: Dict[str, Any] = Field(default_factory=dict)
    used_fallback: bool = False


__all__ = [
    "DEFAULT_TARGET_AUDIENCE",
    "FailureKind",
    "GenerationFailure",
    "PlaylistAnalysis",
    "PlaylistSummaryResult",
    "VideoSummaryResult",
]
