"""Prompt templates for playlist, video, and pre-watch analysis requests."""

from __future__ import annotations

import json
from typing import List, Sequence

from tubetrack.models.playlist import PlaylistMeta, PlaylistSnapshot
from tubetrack.models.video import VideoMeta
from tubetrack.utils.duration import format_duration

TRANSCRIPT_EXCERPT_CHARS = 500
ANALYSIS_DESCRIPTION_CHARS = 500
ANALYSIS_MAX_VIDEOS = 50

JSON_ONLY_INSTRUCTION = (
    "IMPORTANT: Respond with ONLY a single valid JSON object containing exactly the fields above. "
    "Do not wrap it in markdown or add any text before or after it."
)


def _playlist_header(meta: PlaylistMeta) -> List[str]:
    return [
        f"Playlist: {meta.title}",
        f"Description: {meta.description}",
        f"Total Videos: {meta.total_videos}",
    ]


def _schema_block(fields: dict) -> str:
    return json.dumps(fields, indent=2, ensure_ascii=False)


def build_rich_prompt(snapshot: PlaylistSnapshot) -> str:
    """Prompt embedding titles, descriptions, and transcript excerpts for a small playlist."""

    video_lines: List[str] = []
    for index, video in enumerate(snapshot.videos, start=1):
        entry = [f"{index}. {video.title}"]
        if video.description.strip():
            entry.append(f"   Description: {video.description}")
        if video.transcript:
            entry.append(f"   Transcript: {video.transcript[:TRANSCRIPT_EXCERPT_CHARS]}...")
        video_lines.append("\n".join(entry))

    schema = _schema_block(
        {
            "summary": "A comprehensive 200-word summary based on the actual content from transcripts.",
            "key_topics": ["Topic 1", "Topic 2", "Topic 3", "Topic 4"],
            "target_audience": "Who is this for?",
            "difficulty_level": "Beginner/Intermediate/Advanced",
            "total_videos": snapshot.meta.total_videos,
            "estimated_total_likes": "Based on data",
        }
    )

    lines = [
        "Analyze this YouTube playlist using the provided video transcripts and metadata.",
        "",
        *_playlist_header(snapshot.meta),
        "",
        "Videos:",
        "\n\n".join(video_lines),
        "",
        "Provide a JSON response with this structure:",
        schema,
        "",
        JSON_ONLY_INSTRUCTION,
    ]
    return "\n".join(lines)


def build_metadata_only_prompt(snapshot: PlaylistSnapshot) -> str:
    """Prompt listing only numbered titles for a large playlist."""

    titles = "\n".join(f"{index}. {video.title}" for index, video in enumerate(snapshot.videos, start=1))
    schema = _schema_block(
        {
            "summary": "A concise 150-word summary of what this playlist teaches and who it is for.",
            "key_topics": ["Topic 1", "Topic 2", "Topic 3"],
            "target_audience": "Who is this for?",
            "difficulty_level": "Beginner/Intermediate/Advanced",
            "total_videos": snapshot.meta.total_videos,
            "estimated_total_likes": "Based on data",
        }
    )

    lines = [
        "Analyze this YouTube playlist metadata and provide a concise summary.",
        "",
        *_playlist_header(snapshot.meta),
        "",
        f"First {len(snapshot.videos)} Videos:",
        titles,
        "",
        "Provide a JSON response with this structure:",
        schema,
        "",
        JSON_ONLY_INSTRUCTION,
    ]
    return "\n".join(lines)


def build_video_prompt(video: VideoMeta) -> str:
    """Prompt for a single-video summary."""

    lines = [
        "Summarize this YouTube video for a learner deciding what to take away from it.",
        "",
        f"Title: {video.title}",
        f"Duration: {format_duration(video.duration_seconds)}",
        f"Description: {video.description}",
    ]
    if video.transcript:
        lines.append(f"Transcript excerpt: {video.transcript}")

    lines.extend(
        [
            "",
            "Provide a JSON response with this structure:",
            _schema_block(
                {
                    "summary": "A concise 120-word summary of what the video teaches.",
                    "key_points": ["Point 1", "Point 2", "Point 3"],
                    "tags": ["Tag 1", "Tag 2"],
                    "difficulty_level": "Beginner/Intermediate/Advanced",
                }
            ),
            "",
            JSON_ONLY_INSTRUCTION,
        ]
    )
    return "\n".join(lines)


def build_analysis_prompt(
    meta: PlaylistMeta,
    videos: Sequence[VideoMeta],
    *,
    video_count: int,
    total_duration_formatted: str,
) -> str:
    """Prompt asking for a pre-watch analytical assessment of a public playlist."""

    listed = list(videos)[:ANALYSIS_MAX_VIDEOS]
    video_lines = "\n".join(
        f"{index}. {video.title} ({format_duration(video.duration_seconds)})"
        for index, video in enumerate(listed, start=1)
    )
    schema = _schema_block(
        {
            "overview": "2-3 sentences summarizing what this playlist covers and who it's for",
            "key_insights": ["Important insight 1", "Important insight 2"],
            "learning_path": "Describe the progression/learning path through the videos",
            "time_investment": "Analysis of time commitment required and value proposition",
            "prerequisites": "What background knowledge or prerequisites are needed",
            "best_for": "Who would benefit most from this playlist",
            "considerations": ["Important consideration 1", "Consideration 2"],
            "estimated_completion_time": "Realistic time estimate including breaks",
            "difficulty_level": "Beginner/Intermediate/Advanced",
            "topics_covered": ["Topic 1", "Topic 2"],
        }
    )

    lines = [
        "You are an educational content analyst. Analyze this YouTube playlist and provide a "
        "comprehensive analytical summary that helps someone decide if this playlist is worth "
        "their time BEFORE starting it.",
        "",
        "PLAYLIST INFORMATION:",
        f"Title: {meta.title}",
        f"Total Videos: {video_count}",
        f"Total Duration: {total_duration_formatted}",
        f"Description: {meta.description[:ANALYSIS_DESCRIPTION_CHARS]}",
        "",
        f"VIDEO LIST (first {len(listed)} videos):",
        video_lines,
        "",
        "Provide a detailed analytical summary in JSON format with this structure:",
        schema,
        "",
        "Be analytical, honest, and helpful. Focus on information someone would need to know "
        "BEFORE committing time to watch this playlist.",
        JSON_ONLY_INSTRUCTION,
    ]
    return "\n".join(lines)


__all__ = [
    "JSON_ONLY_INSTRUCTION",
    "build_analysis_prompt",
    "build_metadata_only_prompt",
    "build_rich_prompt",
    "build_video_prompt",
]
