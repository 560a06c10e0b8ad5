"""Repository for interacting with the `ai_summaries` table."""

from __future__ import annotations

import json
from typing import Any, ClassVar, Dict, List, Mapping
from uuid import UUID

from psycopg2 import IntegrityError
from psycopg2.extras import RealDictCursor
from pydantic import ValidationError

from tubetrack.db import ConnectionFactory
from tubetrack.db.repositories import BaseRepository, RecordNotFoundError, RepositoryError
from tubetrack.models.summary import AiSummary


class SummaryValidationError(RepositoryError):
    """Raised when a summary row fails validation; the surrounding transaction is rolled back."""

    def __init__(self, messages: List[str]) -> None:
        self.messages = messages
        super().__init__("; ".join(messages) or "Summary failed validation.")


class SummaryRepository(BaseRepository[AiSummary]):
    """Data access object encapsulating summary persistence logic."""

    table_name = "ai_summaries"
    model_type = AiSummary
    insert_fields = (
        "video_id",
        "playlist_id",
        "title",
        "summary_text",
        "key_points",
        "tags",
        "confidence",
        "is_bookmarked",
        "generated_at",
    )
    update_fields = (
        "title",
        "summary_text",
        "key_points",
        "tags",
        "confidence",
        "is_bookmarked",
        "generated_at",
    )
    auto_timestamp_field = "updated_at"

    _owner_tables: ClassVar[Dict[str, str]] = {"playlist_id": "playlists", "video_id": "videos"}

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        super().__init__(connection_factory)

    def list_for_playlist(self, playlist_id: UUID) -> list[AiSummary]:
        """Return the playlist summary together with the summaries of its videos."""

        rows = self._fetch_many(
            "SELECT s.* FROM ai_summaries s "
            "LEFT JOIN videos v ON v.id = s.video_id "
            "WHERE s.playlist_id = %(playlist_id)s OR v.playlist_id = %(playlist_id)s "
            "ORDER BY s.generated_at DESC NULLS LAST",
            {"playlist_id": str(playlist_id)},
        )
        return [self.model_type.model_validate(row) for row in rows]

    def set_bookmarked(self, summary_id: UUID, bookmarked: bool) -> AiSummary:
        """Toggle the bookmark flag without touching the generated content."""

        row = self._fetch_one(
            "UPDATE ai_summaries SET is_bookmarked = %(bookmarked)s, updated_at = NOW() "
            "WHERE id = %(id)s RETURNING *",
            {"bookmarked": bookmarked, "id": str(summary_id)},
        )
        return self.model_type.model_validate(row)

    def upsert_for_playlist(self, playlist_id: UUID, fields: Mapping[str, Any]) -> AiSummary:
        """Create or replace the single summary row owned by ``playlist_id``."""

        return self._upsert_for_owner("playlist_id", playlist_id, fields)

    def upsert_for_video(self, video_id: UUID, fields: Mapping[str, Any]) -> AiSummary:
        """Create or replace the single summary row owned by ``video_id``."""

        return self._upsert_for_owner("video_id", video_id, fields)

    def _upsert_for_owner(self, owner_column: str, owner_id: UUID, fields: Mapping[str, Any]) -> AiSummary:
        """Find-or-initialise the owner's summary under a row lock and assign ``fields`` onto it.

        The owner row (playlist or video) is locked with ``FOR UPDATE`` before the existence
        check, so two first-time generations for the same owner serialize here: the second
        transaction blocks until the first commits and then sees, and updates, its row.
        """

        owner_table = self._owner_tables[owner_column]
        params = {"owner_id": self._normalise_identifier(owner_id)}

        try:
            with self._connection() as connection:
                with connection.cursor(cursor_factory=RealDictCursor) as cursor:
                    cursor.execute(f"SELECT id FROM {owner_table} WHERE id = %(owner_id)s FOR UPDATE", params)
                    if cursor.fetchone() is None:
                        raise RecordNotFoundError(f"No {owner_table} row with id {owner_id}.")

                    cursor.execute(
                        f"SELECT * FROM {self.table_name} WHERE {owner_column} = %(owner_id)s "
                        "ORDER BY created_at ASC LIMIT 1 FOR UPDATE",
                        params,
                    )
                    existing = cursor.fetchone()

                    merged: Dict[str, Any] = dict(existing) if existing is not None else {owner_column: owner_id}
                    merged.update(fields)
                    candidate = self.model_type.model_validate(merged)

                    if existing is None:
                        return self._insert_with(cursor, candidate)
                    return self._update_with(cursor, candidate, include_none=True)
        except ValidationError as exc:
            raise SummaryValidationError(_validation_messages(exc)) from exc
        except IntegrityError as exc:
            detail = getattr(getattr(exc, "diag", None), "message_primary", None) or str(exc)
            raise SummaryValidationError([detail]) from exc

    def _transform_value(self, field: str, value: object) -> object:
        if field in {"key_points", "tags"} and value is not None:
            return json.dumps(value)
        return super()._transform_value(field, value)


def _validation_messages(exc: ValidationError) -> List[str]:
    messages: List[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


__all__ = ["SummaryRepository", "SummaryValidationError"]
