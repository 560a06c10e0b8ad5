"""Choose how much per-video content to gather for a playlist summary."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from rich.console import Console

from tubetrack.models.playlist import PlaylistMeta, PlaylistSnapshot
from tubetrack.services.transcript import TranscriptFetcher
from tubetrack.services.youtube_metadata import YouTubeMetadataService

RICH_STRATEGY_MAX_VIDEOS = 20
METADATA_ONLY_SAMPLE_SIZE = 10


class GatheringStrategy(str, Enum):
    """Data-gathering modes keyed on playlist size."""

    RICH = "rich"
    METADATA_ONLY = "metadata_only"

    @property
    def uses_transcripts(self) -> bool:
        return self is GatheringStrategy.RICH


def select_strategy(total_videos: int) -> GatheringStrategy:
    """Small playlists (fewer than 20 videos) get the rich strategy."""

    if total_videos < RICH_STRATEGY_MAX_VIDEOS:
        return GatheringStrategy.RICH
    return GatheringStrategy.METADATA_ONLY


class StrategySelector:
    """Gather a :class:`PlaylistSnapshot` using the strategy appropriate for its size."""

    def __init__(
        self,
        metadata: YouTubeMetadataService,
        transcripts: TranscriptFetcher,
        *,
        console: Optional[Console] = None,
    ) -> None:
        self._metadata = metadata
        self._transcripts = transcripts
        self._console = console or Console()

    def gather(self, meta: PlaylistMeta) -> PlaylistSnapshot:
        strategy = select_strategy(meta.total_videos)
        self._console.log(
            f"Gathering playlist {meta.playlist_id} with {strategy.value} strategy "
            f"({meta.total_videos} videos)"
        )

        if strategy is GatheringStrategy.METADATA_ONLY:
            videos = self._metadata.fetch_videos_metadata_only(meta.playlist_id, METADATA_ONLY_SAMPLE_SIZE)
            return PlaylistSnapshot(meta=meta, videos=videos, transcripts_attempted=False)

        videos = self._metadata.fetch_videos_rich(meta.playlist_id, meta.total_videos)
        enriched = [
            video.model_copy(update={"transcript": self._transcripts.fetch_transcript(video.video_id)})
            for video in videos
        ]
        found = sum(1 for video in enriched if video.has_transcript)
        self._console.log(f"Transcripts found for {found}/{len(enriched)} videos")
        return PlaylistSnapshot(meta=meta, videos=enriched, transcripts_attempted=True)


__all__ = [
    "GatheringStrategy",
    "METADATA_ONLY_SAMPLE_SIZE",
    "RICH_STRATEGY_MAX_VIDEOS",
    "StrategySelector",
    "select_strategy",
]
