"""Repository for reading the `videos` table owned by the video CRUD layer."""

from __future__ import annotations

from tubetrack.db import ConnectionFactory
from tubetrack.db.repositories import BaseRepository
from tubetrack.models.video import VideoRecord


class VideoRepository(BaseRepository[VideoRecord]):
    """Read access to stored videos; writes belong to the video CRUD layer."""

    table_name = "videos"
    model_type = VideoRecord

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        super().__init__(connection_factory)


__all__ = ["VideoRepository"]
