"""Generate-and-store entry points for playlist and video summaries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from uuid import UUID

from rich.console import Console

from tubetrack.config.settings import ConfigurationError, Settings, get_settings
from tubetrack.db import ConnectionFactory
from tubetrack.db.connection import get_connection
from tubetrack.db.playlist_repository import PlaylistRepository
from tubetrack.db.repositories import RecordNotFoundError
from tubetrack.db.summary_repository import SummaryRepository
from tubetrack.db.video_repository import VideoRepository
from tubetrack.models.generation import FailureKind, GenerationFailure
from tubetrack.models.playlist import PlaylistRecord
from tubetrack.models.summary import AiSummary
from tubetrack.services.confidence import score_confidence
from tubetrack.services.extraction import build_video_result
from tubetrack.services.generation import GenerationError, GenerativeSummarizerClient
from tubetrack.services.playlist_summarizer import PlaylistSummarizerService, failure_from_exception
from tubetrack.services.prompts import build_video_prompt
from tubetrack.services.transcript import TranscriptFetcher, build_transcript_fetcher
from tubetrack.services.youtube_metadata import MetadataFetchError, YouTubeMetadataService

SummaryOutcome = Union[AiSummary, GenerationFailure]


class SummaryGenerationService:
    """Generate a summary and persist it as the owner's single ``ai_summaries`` row.

    Repeated or concurrent calls for the same playlist (or video) update one row; they never
    create a second one. :class:`tubetrack.db.summary_repository.SummaryValidationError`
    propagates to the caller.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        connection_factory: Optional[ConnectionFactory] = None,
        metadata: Optional[YouTubeMetadataService] = None,
        transcripts: Optional[TranscriptFetcher] = None,
        generator: Optional[GenerativeSummarizerClient] = None,
        summarizer: Optional[PlaylistSummarizerService] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        factory = connection_factory or get_connection
        self._playlists = PlaylistRepository(factory)
        self._videos = VideoRepository(factory)
        self._summaries = SummaryRepository(factory)

        self._metadata = metadata or YouTubeMetadataService(settings=self._settings, console=self._console)
        self._owns_transcripts = transcripts is None
        self._transcripts = transcripts or build_transcript_fetcher(self._settings, self._console)
        self._generator = generator or GenerativeSummarizerClient(settings=self._settings, console=self._console)
        self._summarizer = summarizer or PlaylistSummarizerService(
            settings=self._settings,
            console=self._console,
            metadata=self._metadata,
            transcripts=self._transcripts,
            generator=self._generator,
        )

    def generate_for_playlist(self, playlist_id: UUID, *, user_id: Optional[UUID] = None) -> SummaryOutcome:
        """Summarize a stored playlist and upsert its playlist summary.

        Parameters
        ----------
        playlist_id:
            Primary key of the ``playlists`` row.
        user_id:
            When given, the playlist must belong to this user.
        """

        playlist = self._find_playlist(playlist_id, user_id)
        if playlist is None:
            return GenerationFailure(kind=FailureKind.NOT_FOUND, message="Playlist not found", status_code=404)
        if not playlist.yt_id:
            return GenerationFailure(kind=FailureKind.INVALID_INPUT, message="Playlist has no YouTube ID")

        outcome = self._summarizer.summarize(playlist.yt_id)
        if isinstance(outcome, GenerationFailure):
            return outcome

        result = outcome.result
        fields: Dict[str, Any] = {
            "title": f"{playlist.title or outcome.playlist.title} - Playlist Summary",
            "summary_text": result.summary,
            "key_points": result.key_topics,
            "tags": result.summary_tags(),
            "confidence": result.confidence,
            "generated_at": datetime.now(timezone.utc),
        }
        try:
            summary = self._summaries.upsert_for_playlist(playlist.id, fields)
        except RecordNotFoundError:
            return GenerationFailure(kind=FailureKind.NOT_FOUND, message="Playlist not found", status_code=404)

        self._console.log(f"Stored playlist summary {summary.id} for playlist {playlist.id}")
        return summary

    def generate_for_video(self, video_id: UUID, *, user_id: Optional[UUID] = None) -> SummaryOutcome:
        """Summarize a stored video and upsert its video summary."""

        video = self._videos.find_by_id(video_id)
        if video is None or (user_id is not None and self._find_playlist(video.playlist_id, user_id) is None):
            return GenerationFailure(kind=FailureKind.NOT_FOUND, message="Video not found", status_code=404)
        if not video.yt_id:
            return GenerationFailure(kind=FailureKind.INVALID_INPUT, message="Video has no YouTube ID")

        self._console.log(f"Video summary requested for {video.yt_id}")
        try:
            meta = self._metadata.fetch_video(video.yt_id)
            meta = meta.model_copy(update={"transcript": self._transcripts.fetch_transcript(video.yt_id)})
            raw_text = self._generator.generate(build_video_prompt(meta), "video")
        except (MetadataFetchError, GenerationError, ConfigurationError) as exc:
            failure = failure_from_exception(exc, not_found_message="Video not found")
            self._console.log(f"[red]Video summary failed:[/red] {failure.kind.value}: {failure.message}")
            return failure

        confidence = score_confidence(
            videos_sampled=1,
            total_videos=1,
            transcripts_found=1 if meta.has_transcript else 0,
            transcripts_attempted=True,
        )
        result = build_video_result(raw_text, meta, confidence)
        fields: Dict[str, Any] = {
            "title": f"{video.title or meta.title} - Key Concepts",
            "summary_text": result.summary,
            "key_points": result.key_points,
            "tags": result.summary_tags(),
            "confidence": result.confidence,
            "generated_at": datetime.now(timezone.utc),
        }
        try:
            summary = self._summaries.upsert_for_video(video.id, fields)
        except RecordNotFoundError:
            return GenerationFailure(kind=FailureKind.NOT_FOUND, message="Video not found", status_code=404)

        self._console.log(f"Stored video summary {summary.id} for video {video.id} (confidence={result.confidence})")
        return summary

    def close(self) -> None:
        """Release the transcript fetcher when this service created it."""

        if self._owns_transcripts:
            self._transcripts.close()

    def _find_playlist(self, playlist_id: UUID, user_id: Optional[UUID]) -> Optional[PlaylistRecord]:
        if user_id is None:
            return self._playlists.find_by_id(playlist_id)
        return self._playlists.find_for_user(user_id, playlist_id)


__all__ = ["SummaryGenerationService", "SummaryOutcome"]
