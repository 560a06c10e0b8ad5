"""Integration tests for the locked summary upsert against a real Postgres database.

Set ``TUBETRACK_TEST_DATABASE_URL`` to a disposable database to run them.
"""

import os
import threading
from uuid import UUID

import pytest
from psycopg2.extras import RealDictCursor

from tubetrack.db.connection import DatabasePool
from tubetrack.db.migrate import run_migrations
from tubetrack.db.summary_repository import SummaryRepository

DSN = os.environ.get("TUBETRACK_TEST_DATABASE_URL")

pytestmark = [
    pytest.mark.postgres,
    pytest.mark.skipif(not DSN, reason="TUBETRACK_TEST_DATABASE_URL is not set"),
]


@pytest.fixture(scope="module")
def pool():
    run_migrations(dsn=DSN)
    database_pool = DatabasePool(DSN, max_connections=12)
    yield database_pool
    database_pool.close()


@pytest.fixture
def playlist_id(pool) -> UUID:
    with pool.connection() as connection:
        with connection.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute("INSERT INTO playlists (yt_id, title) VALUES ('PLtest', 'Test') RETURNING id")
            created = cursor.fetchone()["id"]
    yield UUID(str(created))
    with pool.connection() as connection:
        with connection.cursor() as cursor:
            cursor.execute("DELETE FROM ai_summaries WHERE playlist_id = %s", (str(created),))
            cursor.execute("DELETE FROM playlists WHERE id = %s", (str(created),))


def _summary_count(pool, playlist_id: UUID) -> int:
    with pool.connection() as connection:
        with connection.cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM ai_summaries WHERE playlist_id = %s", (str(playlist_id),))
            return cursor.fetchone()[0]


def _fields(text: str) -> dict:
    return {"title": "Test - Playlist Summary", "summary_text": text, "key_points": ["t1"], "tags": {}, "confidence": 90}


def test_repeated_generation_updates_one_row(pool, playlist_id):
    repository = SummaryRepository(pool.connection)

    first = repository.upsert_for_playlist(playlist_id, _fields("first"))
    repository.set_bookmarked(first.id, True)
    second = repository.upsert_for_playlist(playlist_id, _fields("second"))

    assert second.id == first.id
    assert second.summary_text == "second"
    assert second.is_bookmarked is True
    assert _summary_count(pool, playlist_id) == 1


def test_concurrent_first_generations_create_one_row(pool, playlist_id):
    repository = SummaryRepository(pool.connection)
    barrier = threading.Barrier(8)
    errors = []

    def worker(index: int) -> None:
        barrier.wait()
        try:
            repository.upsert_for_playlist(playlist_id, _fields(f"run {index}"))
        except Exception as exc:  # noqa: BLE001 - collected for the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert _summary_count(pool, playlist_id) == 1
