"""Repository for reading the `playlists` table owned by the playlist CRUD layer."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from tubetrack.db import ConnectionFactory
from tubetrack.db.repositories import BaseRepository, RecordNotFoundError
from tubetrack.models.playlist import PlaylistRecord


class PlaylistRepository(BaseRepository[PlaylistRecord]):
    """Read access to stored playlists; writes belong to the playlist CRUD layer."""

    table_name = "playlists"
    model_type = PlaylistRecord

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        super().__init__(connection_factory)

    def find_for_user(self, user_id: UUID, playlist_id: UUID) -> Optional[PlaylistRecord]:
        """Return a playlist only when it belongs to the given user."""

        try:
            return self.fetch_one(
                "id = %(id)s AND user_id = %(user_id)s",
                {"id": str(playlist_id), "user_id": str(user_id)},
            )
        except RecordNotFoundError:
            return None


__all__ = ["PlaylistRepository"]
