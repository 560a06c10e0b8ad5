"""Pre-watch analysis of any public playlist, without storing anything."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from rich.console import Console

from tubetrack.config.settings import ConfigurationError, Settings, get_settings
from tubetrack.models.generation import FailureKind, GenerationFailure, PlaylistAnalysis
from tubetrack.models.playlist import PlaylistMeta
from tubetrack.services.extraction import build_analysis
from tubetrack.services.generation import GenerationError, GenerativeSummarizerClient
from tubetrack.services.playlist_summarizer import failure_from_exception
from tubetrack.services.prompts import build_analysis_prompt
from tubetrack.services.youtube_metadata import MetadataFetchError, YouTubeMetadataService
from tubetrack.utils.duration import format_duration
from tubetrack.utils.validation import InvalidYouTubeURLError, extract_playlist_id

FALLBACK_OVERVIEW_CHARS = 500


class PlaylistAnalysisService:
    """Assess whether a public playlist is worth watching, from its full video list."""

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        metadata: Optional[YouTubeMetadataService] = None,
        generator: Optional[GenerativeSummarizerClient] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._metadata = metadata or YouTubeMetadataService(settings=self._settings, console=self._console)
        self._generator = generator or GenerativeSummarizerClient(settings=self._settings, console=self._console)

    def analyze(self, playlist_url: str) -> Union[PlaylistAnalysis, GenerationFailure]:
        try:
            playlist_id = extract_playlist_id(playlist_url)
        except InvalidYouTubeURLError as exc:
            return GenerationFailure(kind=FailureKind.INVALID_INPUT, message=str(exc), status_code=400)

        self._console.log(f"Public playlist analysis requested for {playlist_id}")
        try:
            meta = self._metadata.fetch_playlist_meta(playlist_id)
            videos = self._metadata.fetch_all_videos(playlist_id)
            total_seconds = sum(video.duration_seconds for video in videos)
            total_formatted = format_duration(total_seconds)
            prompt = build_analysis_prompt(
                meta,
                videos,
                video_count=len(videos),
                total_duration_formatted=total_formatted,
            )
            raw_text = self._generator.generate(prompt, "analytical")
        except (MetadataFetchError, GenerationError, ConfigurationError) as exc:
            failure = failure_from_exception(exc)
            self._console.log(f"[red]Playlist analysis failed:[/red] {failure.kind.value}: {failure.message}")
            return failure

        analysis, used_fallback = build_analysis(
            raw_text,
            _fallback_analysis(raw_text, meta, len(videos), total_formatted),
        )
        if used_fallback:
            self._console.log("[yellow]Model reply contained no JSON object; using fallback analysis[/yellow]")

        return PlaylistAnalysis(
            playlist=meta,
            video_count=len(videos),
            total_duration_seconds=total_seconds,
            total_duration_formatted=total_formatted,
            analysis=analysis,
            used_fallback=used_fallback,
        )


def _fallback_analysis(raw_text: str, meta: PlaylistMeta, video_count: int, total_formatted: str) -> Dict[str, Any]:
    return {
        "overview": raw_text.strip()[:FALLBACK_OVERVIEW_CHARS],
        "key_insights": ["Analysis generated successfully"],
        "learning_path": "Review the video list to understand the progression",
        "time_investment": f"Total duration: {total_formatted}",
        "prerequisites": "Review playlist description for prerequisites",
        "best_for": f"Anyone interested in {meta.title}",
        "considerations": [f"Large playlist with {video_count} videos"],
        "estimated_completion_time": total_formatted,
        "difficulty_level": "Mixed",
        "topics_covered": ["See video titles above"],
    }


__all__ = ["PlaylistAnalysisService"]
