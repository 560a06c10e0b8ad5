"""Validation helpers for YouTube URLs and identifiers."""

from __future__ import annotations

import re
from urllib.parse import urlparse, parse_qs


class InvalidYouTubeURLError(ValueError):
    """Raised when a provided URL is not a valid YouTube video or playlist link."""


_VIDEO_ID_PATTERN = re.compile(r"^[0-9A-Za-z_-]{11}$")
_PLAYLIST_ID_PATTERN = re.compile(r"^[0-9A-Za-z_-]{2,64}$")
_LIST_PARAM_PATTERN = re.compile(r"(?:^|[?&])list=([0-9A-Za-z_-]+)")


def extract_video_id(url: str) -> str:
    """Extract and validate a YouTube video ID from a URL or raw ID string."""

    stripped = url.strip()
    if _VIDEO_ID_PATTERN.fullmatch(stripped):
        return stripped

    parsed = urlparse(stripped)
    if parsed.netloc in {"youtu.be"}:
        candidate = parsed.path.lstrip("/")
        if _VIDEO_ID_PATTERN.fullmatch(candidate):
            return candidate

    if parsed.netloc.endswith("youtube.com"):
        # Handle standard watch URLs and embedded formats.
        if parsed.path == "/watch":
            candidate_list = parse_qs(parsed.query).get("v", [])
            if candidate_list and _VIDEO_ID_PATTERN.fullmatch(candidate_list[0]):
                return candidate_list[0]
        else:
            embedded_match = re.search(r"/embed/([0-9A-Za-z_-]{11})", parsed.path)
            if embedded_match:
                return embedded_match.group(1)

    raise InvalidYouTubeURLError(f"Invalid YouTube URL or video ID: {url!r}")


def extract_playlist_id(url: str) -> str:
    """Extract a playlist ID from a playlist/watch URL, a bare ``list=`` fragment, or a raw ID."""

    stripped = url.strip()
    if not stripped:
        raise InvalidYouTubeURLError("Playlist URL is required.")

    parsed = urlparse(stripped)
    candidate_list = parse_qs(parsed.query).get("list", [])
    if candidate_list and _PLAYLIST_ID_PATTERN.fullmatch(candidate_list[0]):
        return candidate_list[0]

    fragment_match = _LIST_PARAM_PATTERN.search(stripped)
    if fragment_match:
        return fragment_match.group(1)

    if not parsed.scheme and not parsed.netloc and stripped.startswith(("PL", "UU", "OL", "FL", "RD")):
        if _PLAYLIST_ID_PATTERN.fullmatch(stripped):
            return stripped

    raise InvalidYouTubeURLError(
        "Invalid playlist URL. Please provide a valid YouTube playlist URL."
    )


__all__ = ["InvalidYouTubeURLError", "extract_playlist_id", "extract_video_id"]
