"""Playlist summarization pipeline: gather, prompt, generate, extract, score."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from rich.console import Console

from tubetrack.config.settings import ConfigurationError, Settings, get_settings
from tubetrack.models.generation import FailureKind, GenerationFailure, PlaylistSummaryResult
from tubetrack.models.playlist import PlaylistMeta, PlaylistSnapshot
from tubetrack.services.confidence import score_confidence
from tubetrack.services.extraction import build_playlist_result
from tubetrack.services.generation import GenerationError, GenerativeSummarizerClient
from tubetrack.services.prompts import build_metadata_only_prompt, build_rich_prompt
from tubetrack.services.strategy import GatheringStrategy, StrategySelector
from tubetrack.services.transcript import TranscriptFetcher, build_transcript_fetcher
from tubetrack.services.youtube_metadata import MetadataFetchError, PlaylistNotFoundError, YouTubeMetadataService


@dataclass(slots=True)
class PlaylistSummary:
    """Successful outcome of :meth:`PlaylistSummarizerService.summarize`."""

    playlist: PlaylistMeta
    strategy: GatheringStrategy
    videos_sampled: int
    result: PlaylistSummaryResult


def failure_from_exception(exc: Exception, *, not_found_message: str = "Playlist not found") -> GenerationFailure:
    """Map a fetch, generation, or configuration error onto a tagged failure."""

    if isinstance(exc, PlaylistNotFoundError):
        return GenerationFailure(kind=FailureKind.NOT_FOUND, message=not_found_message, status_code=404)
    if isinstance(exc, (MetadataFetchError, GenerationError)):
        return GenerationFailure(
            kind=FailureKind.UPSTREAM_UNAVAILABLE,
            message=str(exc),
            status_code=exc.status_code,
        )
    if isinstance(exc, ConfigurationError):
        return GenerationFailure(kind=FailureKind.CONFIGURATION, message=str(exc))
    raise TypeError(f"Unsupported failure type: {type(exc).__name__}")


class PlaylistSummarizerService:
    """Generate a playlist summary from live YouTube data.

    Every external call happens synchronously inside :meth:`summarize`; the stages run strictly
    in order because each consumes the previous stage's output.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        metadata: Optional[YouTubeMetadataService] = None,
        transcripts: Optional[TranscriptFetcher] = None,
        generator: Optional[GenerativeSummarizerClient] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._metadata = metadata or YouTubeMetadataService(settings=self._settings, console=self._console)
        self._owns_transcripts = transcripts is None
        self._transcripts = transcripts or build_transcript_fetcher(self._settings, self._console)
        self._selector = StrategySelector(self._metadata, self._transcripts, console=self._console)
        self._generator = generator or GenerativeSummarizerClient(settings=self._settings, console=self._console)

    def summarize(self, playlist_id: str) -> Union[PlaylistSummary, GenerationFailure]:
        """Summarize the YouTube playlist ``playlist_id``.

        Fetch and generation failures are returned as :class:`GenerationFailure` rather than
        raised. A reply without parseable JSON still succeeds, with reduced confidence.
        """

        self._console.log(f"Playlist summary requested for {playlist_id}")
        try:
            meta = self._metadata.fetch_playlist_meta(playlist_id)
            snapshot = self._selector.gather(meta)
            strategy = GatheringStrategy.RICH if snapshot.transcripts_attempted else GatheringStrategy.METADATA_ONLY
            prompt = self._build_prompt(snapshot)
            raw_text = self._generator.generate(prompt, strategy.value)
        except (MetadataFetchError, GenerationError, ConfigurationError) as exc:
            failure = failure_from_exception(exc)
            self._console.log(f"[red]Playlist summary failed:[/red] {failure.kind.value}: {failure.message}")
            return failure

        confidence = score_confidence(
            videos_sampled=len(snapshot.videos),
            total_videos=meta.total_videos,
            transcripts_found=snapshot.transcripts_found,
            transcripts_attempted=snapshot.transcripts_attempted,
        )
        result = build_playlist_result(raw_text, snapshot, confidence)
        if result.used_fallback:
            self._console.log("[yellow]Model reply contained no JSON object; using raw text as summary[/yellow]")

        self._console.log(
            f"Playlist summary generated for {playlist_id} "
            f"(strategy={strategy.value}, videos={len(snapshot.videos)}, confidence={result.confidence})"
        )
        return PlaylistSummary(
            playlist=meta,
            strategy=strategy,
            videos_sampled=len(snapshot.videos),
            result=result,
        )

    def close(self) -> None:
        """Release the transcript fetcher when this service created it."""

        if self._owns_transcripts:
            self._transcripts.close()

    @staticmethod
    def _build_prompt(snapshot: PlaylistSnapshot) -> str:
        if snapshot.transcripts_attempted:
            return build_rich_prompt(snapshot)
        return build_metadata_only_prompt(snapshot)


__all__ = ["PlaylistSummarizerService", "PlaylistSummary", "failure_from_exception"]
