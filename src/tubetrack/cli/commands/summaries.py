"""CLI commands for generating, analyzing, listing, and bookmarking AI summaries."""

from __future__ import annotations

import json
from contextlib import closing
from functools import lru_cache
from typing import Any, Mapping, NoReturn, Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from tubetrack.db.connection import get_connection
from tubetrack.db.migrate import run_migrations
from tubetrack.db.repositories import RecordNotFoundError
from tubetrack.db.summary_repository import SummaryRepository, SummaryValidationError
from tubetrack.models.generation import FailureKind, GenerationFailure
from tubetrack.services.analysis import PlaylistAnalysisService
from tubetrack.services.summaries import SummaryGenerationService


class SummaryExitCode:
    """Mapping of meaningful CLI exit codes."""

    SUCCESS = 0
    INVALID_INPUT = 1
    NOT_FOUND = 2
    UPSTREAM_ERROR = 3
    VALIDATION_ERROR = 4
    CONFIGURATION_ERROR = 5
    UNEXPECTED_ERROR = 6


_EXIT_CODE_BY_KIND = {
    FailureKind.INVALID_INPUT: SummaryExitCode.INVALID_INPUT,
    FailureKind.NOT_FOUND: SummaryExitCode.NOT_FOUND,
    FailureKind.UPSTREAM_UNAVAILABLE: SummaryExitCode.UPSTREAM_ERROR,
    FailureKind.CONFIGURATION: SummaryExitCode.CONFIGURATION_ERROR,
}


def build_summary_service(log_console: Console) -> SummaryGenerationService:
    return SummaryGenerationService(console=log_console)


def build_analysis_service(log_console: Console) -> PlaylistAnalysisService:
    return PlaylistAnalysisService(console=log_console)


def build_summary_repository() -> SummaryRepository:
    return SummaryRepository(get_connection)


def register(app: typer.Typer, console: Console) -> None:
    """Register summary commands on the given Typer application."""

    # Service logs go to stderr so stdout stays machine-readable JSON.
    log_console = Console(stderr=True)

    @lru_cache(maxsize=1)
    def get_analysis_service() -> PlaylistAnalysisService:
        return build_analysis_service(log_console)

    @lru_cache(maxsize=1)
    def get_summary_repository() -> SummaryRepository:
        return build_summary_repository()

    @app.command("summarize-playlist")
    def summarize_playlist(
        playlist_id: UUID = typer.Argument(..., help="Stored playlist UUID"),
        user_id: Optional[UUID] = typer.Option(None, "--user-id", help="Require the playlist to belong to this user"),
    ) -> None:
        """Generate (or regenerate) the AI summary of a stored playlist."""

        try:
            with closing(build_summary_service(log_console)) as service:
                outcome = service.generate_for_playlist(playlist_id, user_id=user_id)
        except SummaryValidationError as exc:
            _fail_validation(exc)
        except Exception as exc:
            _fail_unexpected(exc)

        _emit_outcome(outcome)

    @app.command("summarize-video")
    def summarize_video(
        video_id: UUID = typer.Argument(..., help="Stored video UUID"),
        user_id: Optional[UUID] = typer.Option(None, "--user-id", help="Require the video's playlist to belong to this user"),
    ) -> None:
        """Generate (or regenerate) the AI summary of a single stored video."""

        try:
            with closing(build_summary_service(log_console)) as service:
                outcome = service.generate_for_video(video_id, user_id=user_id)
        except SummaryValidationError as exc:
            _fail_validation(exc)
        except Exception as exc:
            _fail_unexpected(exc)

        _emit_outcome(outcome)

    @app.command("analyze-playlist")
    def analyze_playlist(
        url: str = typer.Argument(..., help="YouTube playlist URL or ID"),
    ) -> None:
        """Assess any public playlist without storing anything."""

        try:
            outcome = get_analysis_service().analyze(url)
        except Exception as exc:
            _fail_unexpected(exc)

        _emit_outcome(outcome)

    @app.command("show-summary")
    def show_summary(
        playlist_id: UUID = typer.Argument(..., help="Stored playlist UUID"),
        json_output: bool = typer.Option(False, "--json", help="Output summaries as JSON"),
    ) -> None:
        """List the playlist summary and its video summaries."""

        summaries = get_summary_repository().list_for_playlist(playlist_id)
        if json_output:
            _echo_json([summary.model_dump(mode="json") for summary in summaries])
            return

        if not summaries:
            console.print(f"[yellow]No summaries stored for playlist {playlist_id}.[/yellow]")
            return

        table = Table(title="AI Summaries")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Scope")
        table.add_column("Title")
        table.add_column("Confidence", justify="right")
        table.add_column("Bookmarked", justify="center")
        for summary in summaries:
            table.add_row(
                str(summary.id),
                "playlist" if summary.is_playlist_summary else "video",
                summary.title or "",
                str(summary.confidence) if summary.confidence is not None else "-",
                "yes" if summary.is_bookmarked else "",
            )
        console.print(table)

    @app.command("bookmark")
    def bookmark(
        summary_id: UUID = typer.Argument(..., help="Summary record UUID"),
        off: bool = typer.Option(False, "--off", help="Remove the bookmark instead of setting it"),
    ) -> None:
        """Bookmark (or un-bookmark) a stored summary."""

        try:
            summary = get_summary_repository().set_bookmarked(summary_id, not off)
        except RecordNotFoundError:
            _echo_json({"error": "Not found", "message": "Summary not found"})
            raise typer.Exit(code=SummaryExitCode.NOT_FOUND) from None

        _echo_json(summary.model_dump(mode="json"))

    @app.command("migrate")
    def migrate() -> None:
        """Apply the bundled SQL migrations."""

        run_migrations(console)


def _emit_outcome(outcome: Any) -> None:
    if isinstance(outcome, GenerationFailure):
        _echo_json(outcome.to_error_body())
        raise typer.Exit(code=_EXIT_CODE_BY_KIND[outcome.kind])
    _echo_json(outcome.model_dump(mode="json"))


def _fail_validation(exc: SummaryValidationError) -> NoReturn:
    _echo_json({"error": "Summary failed validation", "message": "; ".join(exc.messages)})
    raise typer.Exit(code=SummaryExitCode.VALIDATION_ERROR) from exc


def _fail_unexpected(exc: Exception) -> NoReturn:
    _echo_json({"error": "Internal error", "message": str(exc)})
    raise typer.Exit(code=SummaryExitCode.UNEXPECTED_ERROR) from exc


def _echo_json(payload: Mapping[str, Any] | list[Any]) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


__all__ = [
    "SummaryExitCode",
    "build_analysis_service",
    "build_summary_repository",
    "build_summary_service",
    "register",
]
