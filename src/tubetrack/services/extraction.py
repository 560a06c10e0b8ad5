"""Turn free-text model replies into typed generation results.

Model output is untrusted: the first ``{...}`` span is parsed as JSON, each field is accepted only
when it has the expected type, and locally computed statistics fill everything else. When no
JSON object can be parsed the whole reply becomes the summary and the confidence is lowered.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from tubetrack.models.generation import DEFAULT_TARGET_AUDIENCE, PlaylistSummaryResult, VideoSummaryResult
from tubetrack.models.playlist import PlaylistSnapshot
from tubetrack.models.video import VideoMeta
from tubetrack.services.confidence import apply_fallback_penalty
from tubetrack.utils.duration import format_duration, format_number

_JSON_SPAN_PATTERN = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse the span from the first ``{`` to the last ``}``; ``None`` if it is not a JSON object."""

    match = _JSON_SPAN_PATTERN.search(text or "")
    if match is None:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def estimate_total_likes(videos: Sequence[VideoMeta], total_videos: int) -> str:
    """Average non-zero like count of the sample, scaled to the whole playlist."""

    like_counts = [video.like_count for video in videos if video.like_count > 0]
    average = sum(like_counts) // len(like_counts) if like_counts else 0
    return format_number(average * total_videos)


def build_playlist_result(raw_text: str, snapshot: PlaylistSnapshot, confidence: int) -> PlaylistSummaryResult:
    """Merge the model reply over the statistics computed from ``snapshot``."""

    total_videos = snapshot.meta.total_videos
    total_time = format_duration(snapshot.total_duration_seconds)
    estimated_likes = estimate_total_likes(snapshot.videos, total_videos)

    parsed = extract_json_object(raw_text)
    if parsed is None:
        return PlaylistSummaryResult(
            summary=raw_text.strip(),
            key_topics=[],
            target_audience=DEFAULT_TARGET_AUDIENCE,
            total_videos=total_videos,
            total_time=total_time,
            estimated_total_likes=estimated_likes,
            confidence=apply_fallback_penalty(confidence),
            used_fallback=True,
        )

    return PlaylistSummaryResult(
        summary=_text(parsed, "summary") or raw_text.strip(),
        key_topics=_string_list(parsed, "key_topics"),
        target_audience=_text(parsed, "target_audience") or DEFAULT_TARGET_AUDIENCE,
        difficulty_level=_text(parsed, "difficulty_level"),
        total_videos=_count(parsed, "total_videos", default=total_videos),
        total_time=total_time,
        estimated_total_likes=estimated_likes,
        confidence=confidence,
    )


def build_video_result(raw_text: str, video: VideoMeta, confidence: int) -> VideoSummaryResult:
    """Merge the model reply for a single video over its computed facts."""

    duration = format_duration(video.duration_seconds)
    parsed = extract_json_object(raw_text)
    if parsed is None:
        return VideoSummaryResult(
            summary=raw_text.strip(),
            duration=duration,
            has_transcript=video.has_transcript,
            confidence=apply_fallback_penalty(confidence),
            used_fallback=True,
        )

    return VideoSummaryResult(
        summary=_text(parsed, "summary") or raw_text.strip(),
        key_points=_string_list(parsed, "key_points"),
        tags=_string_list(parsed, "tags"),
        difficulty_level=_text(parsed, "difficulty_level"),
        duration=duration,
        has_transcript=video.has_transcript,
        confidence=confidence,
    )


def build_analysis(raw_text: str, fallback: Mapping[str, Any]) -> tuple[Dict[str, Any], bool]:
    """Return the parsed analysis, or ``fallback`` when the reply holds no JSON object."""

    parsed = extract_json_object(raw_text)
    if parsed is None:
        return dict(fallback), True
    return parsed, False


def _text(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _string_list(payload: Mapping[str, Any], key: str) -> List[str]:
    value = payload.get(key)
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _count(payload: Mapping[str, Any], key: str, *, default: int) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return default
    return value


__all__ = [
    "build_analysis",
    "build_playlist_result",
    "build_video_result",
    "estimate_total_likes",
    "extract_json_object",
]
