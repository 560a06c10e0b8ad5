"""Best-effort transcript acquisition for prompt enrichment.

Transcripts are optional input: every fetcher here returns ``None`` instead of raising, so a
missing caption track never fails a summary request.
"""

from __future__ import annotations

import html
import re
from types import TracebackType
from typing import Optional, Protocol, Type

import httpx
from rich.console import Console
from youtube_transcript_api import YouTubeTranscriptApi

from tubetrack.config.settings import Settings, TranscriptSource, get_settings
from tubetrack.services import SupportsClose
from tubetrack.utils.validation import InvalidYouTubeURLError, extract_video_id

WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"
_CAPTION_TRACK_PATTERN = re.compile(r'"captionTracks":\[\{"baseUrl":"([^"]+)"')
_CAPTION_TEXT_PATTERN = re.compile(r"<text[^>]*>([^<]+)</text>")


class TranscriptFetcher(SupportsClose, Protocol):
    """Anything that can look up caption text for a YouTube video ID."""

    def fetch_transcript(self, video_id: str) -> Optional[str]:
        """Return caption text, or ``None`` when no transcript is available."""


class DisabledTranscriptFetcher:
    """Fetcher used when transcript enrichment is switched off."""

    def fetch_transcript(self, video_id: str) -> Optional[str]:
        return None

    def close(self) -> None:
        return None


class CaptionPageScraper:
    """Scrape the caption track advertised on the public watch page.

    The watch page embeds a ``captionTracks`` JSON fragment whose first ``baseUrl`` points at a
    timed-text XML document. The page layout is undocumented, so any mismatch is treated as
    "no transcript".
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._settings.http_timeout_seconds,
            follow_redirects=True,
            headers={"Accept-Language": "en-US,en;q=0.8"},
        )
        self._max_chars = int(self._settings.transcript_max_chars)

    def fetch_transcript(self, video_id: str) -> Optional[str]:
        try:
            canonical_id = extract_video_id(video_id)
            page = self._client.get(WATCH_URL_TEMPLATE.format(video_id=canonical_id))
            page.raise_for_status()

            caption_match = _CAPTION_TRACK_PATTERN.search(page.text)
            if caption_match is None:
                self._console.log(f"No caption track advertised for video {video_id}")
                return None
            caption_url = caption_match.group(1).replace("\\u0026", "&")

            captions = self._client.get(caption_url)
            captions.raise_for_status()
            text = html.unescape(" ".join(_CAPTION_TEXT_PATTERN.findall(captions.text)))
        except (httpx.HTTPError, InvalidYouTubeURLError) as exc:
            self._console.log(f"[yellow]Could not fetch transcript for video {video_id}:[/yellow] {exc}")
            return None
        except Exception as exc:  # noqa: BLE001 - scraping failures mean "no transcript"
            self._console.log(f"[yellow]Transcript scrape failed for video {video_id}:[/yellow] {exc}")
            return None

        if not text.strip():
            return None
        return text[: self._max_chars]

    def close(self) -> None:
        """Close the HTTP client unless it was supplied by the caller."""

        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "CaptionPageScraper":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class TranscriptApiFetcher:
    """Fetch captions through ``youtube-transcript-api``."""

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        transcript_api: Optional[YouTubeTranscriptApi] = None,
        languages: tuple[str, ...] = ("en",),
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._transcript_api = transcript_api or YouTubeTranscriptApi()
        self._languages = languages
        self._max_chars = int(self._settings.transcript_max_chars)

    def fetch_transcript(self, video_id: str) -> Optional[str]:
        try:
            fetched = self._transcript_api.fetch(video_id, languages=self._languages)
            segments = fetched.to_raw_data()
        except Exception as exc:  # noqa: BLE001 - every caption failure means "no transcript"
            self._console.log(f"[yellow]Could not fetch transcript for video {video_id}:[/yellow] {exc}")
            return None

        joined = " ".join(str(segment.get("text", "")).strip() for segment in segments)
        text = " ".join(joined.split())
        return text[: self._max_chars] or None

    def close(self) -> None:
        return None


def build_transcript_fetcher(
    settings: Optional[Settings] = None,
    console: Optional[Console] = None,
) -> TranscriptFetcher:
    """Return the fetcher selected by the ``TRANSCRIPT_SOURCE`` setting."""

    settings = settings or get_settings()
    if settings.transcript_source is TranscriptSource.TRANSCRIPT_API:
        return TranscriptApiFetcher(settings=settings, console=console)
    if settings.transcript_source is TranscriptSource.DISABLED:
        return DisabledTranscriptFetcher()
    return CaptionPageScraper(settings=settings, console=console)


__all__ = [
    "CaptionPageScraper",
    "DisabledTranscriptFetcher",
    "TranscriptApiFetcher",
    "TranscriptFetcher",
    "build_transcript_fetcher",
]
