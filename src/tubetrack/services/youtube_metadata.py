"""Playlist and video metadata retrieval from the YouTube Data API."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from rich.console import Console

from tubetrack.config.settings import ConfigurationError, Settings, get_settings
from tubetrack.models.playlist import PlaylistMeta
from tubetrack.models.video import VideoMeta
from tubetrack.utils.duration import parse_duration

MAX_PAGE_SIZE = 50
_THUMBNAIL_PREFERENCE = ("high", "medium", "default")


class MetadataFetchError(RuntimeError):
    """Raised when the YouTube Data API answers with a non-success status or cannot be reached."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PlaylistNotFoundError(MetadataFetchError):
    """Raised when a playlist or video ID has no matching upstream resource."""


class YouTubeMetadataService:
    """Thin wrapper over the ``youtube/v3`` discovery client.

    Detail lookups (durations and like counts) are always batched into a single ``videos.list``
    call per page of playlist items.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        youtube: Optional[Any] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._youtube = youtube

    def fetch_playlist_meta(self, playlist_id: str) -> PlaylistMeta:
        """Return playlist-level metadata.

        Raises
        ------
        PlaylistNotFoundError
            If the API returns no items for ``playlist_id``.
        MetadataFetchError
            If the API call fails.
        """

        response = self._execute(
            self._client().playlists().list(part="snippet,contentDetails", id=playlist_id),
            f"playlists.list({playlist_id})",
        )
        items = response.get("items") or []
        if not items:
            raise PlaylistNotFoundError(f"Playlist {playlist_id} not found", status_code=404)

        playlist = items[0]
        snippet = playlist.get("snippet") or {}
        content_details = playlist.get("contentDetails") or {}
        return PlaylistMeta(
            playlist_id=playlist_id,
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            total_videos=int(content_details.get("itemCount") or 0),
            thumbnail_url=_pick_thumbnail(snippet.get("thumbnails")),
        )

    def fetch_videos_rich(self, playlist_id: str, max_items: int) -> List[VideoMeta]:
        """Return up to ``min(max_items, 50)`` videos from a single page, with descriptions."""

        return self._fetch_first_page(playlist_id, min(max_items, MAX_PAGE_SIZE))

    def fetch_videos_metadata_only(self, playlist_id: str, count: int) -> List[VideoMeta]:
        """Return the first ``count`` videos of a playlist."""

        return self._fetch_first_page(playlist_id, min(count, MAX_PAGE_SIZE))

    def fetch_all_videos(self, playlist_id: str) -> List[VideoMeta]:
        """Return every video of a playlist, following ``nextPageToken`` pagination."""

        videos: List[VideoMeta] = []
        for page in self._iter_playlist_item_pages(playlist_id):
            videos.extend(self._hydrate(page))
        self._console.log(f"Fetched {len(videos)} videos for playlist {playlist_id}")
        return videos

    def fetch_video(self, video_id: str) -> VideoMeta:
        """Return metadata for a single video."""

        response = self._execute(
            self._client().videos().list(part="snippet,contentDetails,statistics", id=video_id),
            f"videos.list({video_id})",
        )
        items = response.get("items") or []
        if not items:
            raise PlaylistNotFoundError(f"Video {video_id} not found", status_code=404)

        video = items[0]
        snippet = video.get("snippet") or {}
        return VideoMeta(
            video_id=video_id,
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            duration_seconds=parse_duration((video.get("contentDetails") or {}).get("duration")),
            like_count=_like_count(video),
        )

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    def _fetch_first_page(self, playlist_id: str, max_results: int) -> List[VideoMeta]:
        if max_results <= 0:
            return []
        response = self._execute(
            self._client().playlistItems().list(
                part="snippet,contentDetails",
                playlistId=playlist_id,
                maxResults=max_results,
            ),
            f"playlistItems.list({playlist_id})",
        )
        return self._hydrate(response.get("items") or [])

    def _iter_playlist_item_pages(self, playlist_id: str) -> Iterator[List[Mapping[str, Any]]]:
        page_token: Optional[str] = None
        while True:
            request_kwargs: Dict[str, Any] = {
                "part": "snippet,contentDetails",
                "playlistId": playlist_id,
                "maxResults": MAX_PAGE_SIZE,
            }
            if page_token:
                request_kwargs["pageToken"] = page_token
            response = self._execute(
                self._client().playlistItems().list(**request_kwargs),
                f"playlistItems.list({playlist_id})",
            )
            yield response.get("items") or []
            page_token = response.get("nextPageToken")
            if not page_token:
                return

    def _hydrate(self, items: Sequence[Mapping[str, Any]]) -> List[VideoMeta]:
        """Combine playlist items with one batched ``videos.list`` detail lookup."""

        video_ids = [
            (item.get("contentDetails") or {}).get("videoId")
            for item in items
        ]
        video_ids = [video_id for video_id in video_ids if video_id]
        details = self._fetch_video_details(video_ids)

        videos: List[VideoMeta] = []
        for item in items:
            video_id = (item.get("contentDetails") or {}).get("videoId")
            if not video_id:
                continue
            snippet = item.get("snippet") or {}
            duration_seconds, like_count = details.get(video_id, (0, 0))
            videos.append(
                VideoMeta(
                    video_id=video_id,
                    title=snippet.get("title") or "",
                    description=snippet.get("description") or "",
                    duration_seconds=duration_seconds,
                    like_count=like_count,
                )
            )
        return videos

    def _fetch_video_details(self, video_ids: Sequence[str]) -> Dict[str, tuple[int, int]]:
        if not video_ids:
            return {}

        response = self._execute(
            self._client().videos().list(part="contentDetails,statistics", id=",".join(video_ids)),
            f"videos.list({len(video_ids)} ids)",
        )
        details: Dict[str, tuple[int, int]] = {}
        for video in response.get("items") or []:
            duration_seconds = parse_duration((video.get("contentDetails") or {}).get("duration"))
            details[video["id"]] = (duration_seconds, _like_count(video))
        return details

    def _execute(self, request: Any, label: str) -> Mapping[str, Any]:
        try:
            response = request.execute()
        except HttpError as exc:
            status = getattr(exc.resp, "status", None)
            status_code = int(status) if status is not None else None
            self._console.log(f"[red]YouTube API call failed:[/red] {label} (status={status_code})")
            raise MetadataFetchError(
                f"YouTube API error ({status_code}) during {label}", status_code=status_code
            ) from exc
        except (OSError, httplib2.HttpLib2Error) as exc:
            # Socket timeouts and DNS failures carry no HTTP status.
            self._console.log(f"[red]YouTube API call failed:[/red] {label} ({exc})")
            raise MetadataFetchError(f"YouTube API request failed during {label}: {exc}") from exc
        self._console.log(f"YouTube API call succeeded: {label}")
        return response or {}

    def _client(self) -> Any:
        if self._youtube is None:
            if self._settings.youtube_api_key is None:
                raise ConfigurationError("YOUTUBE_API_KEY is not configured.")
            http = httplib2.Http(timeout=self._settings.http_timeout_seconds)
            self._youtube = build(
                "youtube",
                "v3",
                developerKey=self._settings.youtube_api_key.get_secret_value(),
                http=http,
                cache_discovery=False,
            )
        return self._youtube


def _pick_thumbnail(thumbnails: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not thumbnails:
        return None
    for size in _THUMBNAIL_PREFERENCE:
        entry = thumbnails.get(size)
        if entry and entry.get("url"):
            return entry["url"]
    return None


def _like_count(video: Mapping[str, Any]) -> int:
    statistics = video.get("statistics") or {}
    try:
        return max(0, int(statistics.get("likeCount") or 0))
    except (TypeError, ValueError):
        return 0


__all__ = ["MetadataFetchError", "PlaylistNotFoundError", "YouTubeMetadataService"]
