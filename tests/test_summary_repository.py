import json
from datetime import datetime, timezone
from uuid import uuid4

import pytest
from psycopg2 import IntegrityError

from conftest import FakeConnection

from tubetrack.db.repositories import RecordNotFoundError
from tubetrack.db.summary_repository import SummaryRepository, SummaryValidationError

GENERATED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _fields(**overrides):
    fields = {
        "title": "Rust Basics - Playlist Summary",
        "summary_text": "X",
        "key_points": ["t1", "t2"],
        "tags": {"total_time": "21m"},
        "confidence": 98,
        "generated_at": GENERATED_AT,
    }
    fields.update(overrides)
    return fields


def _stored_row(**columns):
    row = {
        "id": str(uuid4()),
        "video_id": None,
        "playlist_id": None,
        "title": "Old title",
        "summary_text": "Old",
        "key_points": '["old"]',
        "tags": "{}",
        "confidence": 70,
        "is_bookmarked": False,
        "generated_at": GENERATED_AT,
        "created_at": GENERATED_AT,
        "updated_at": GENERATED_AT,
    }
    row.update(columns)
    return row


def test_first_generation_locks_owner_then_inserts():
    playlist_id = uuid4()
    inserted = _stored_row(playlist_id=str(playlist_id), key_points='["t1", "t2"]', summary_text="X")
    connection = FakeConnection(fetchone_rows=[{"id": str(playlist_id)}, None, inserted])

    summary = SummaryRepository(connection.factory).upsert_for_playlist(playlist_id, _fields())

    queries = connection.queries
    assert queries[0] == "SELECT id FROM playlists WHERE id = %(owner_id)s FOR UPDATE"
    assert queries[1].startswith("SELECT * FROM ai_summaries WHERE playlist_id = %(owner_id)s")
    assert queries[1].endswith("FOR UPDATE")
    assert queries[2].startswith("INSERT INTO ai_summaries")
    payload = connection.statements[2][1]
    assert payload["playlist_id"] == str(playlist_id)
    assert "video_id" not in payload
    assert json.loads(payload["key_points"]) == ["t1", "t2"]
    assert json.loads(payload["tags"]) == {"total_time": "21m"}
    assert summary.key_points == ["t1", "t2"]
    assert connection.commits == 1


def test_regeneration_updates_existing_row_and_keeps_bookmark():
    video_id = uuid4()
    existing = _stored_row(video_id=str(video_id), is_bookmarked=True)
    updated = _stored_row(id=existing["id"], video_id=str(video_id), is_bookmarked=True, summary_text="X")
    connection = FakeConnection(fetchone_rows=[{"id": str(video_id)}, existing, updated])

    summary = SummaryRepository(connection.factory).upsert_for_video(video_id, _fields())

    queries = connection.queries
    assert queries[0] == "SELECT id FROM videos WHERE id = %(owner_id)s FOR UPDATE"
    assert queries[2].startswith("UPDATE ai_summaries SET")
    assert "updated_at = NOW()" in queries[2]
    assert queries[2].endswith("WHERE id = %(id)s RETURNING *")
    payload = connection.statements[2][1]
    assert payload["id"] == existing["id"]
    assert payload["summary_text"] == "X"
    assert payload["is_bookmarked"] is True
    assert "video_id" not in payload
    assert summary.is_bookmarked is True
    assert len(queries) == 3


def test_missing_owner_aborts_before_reading_summaries():
    connection = FakeConnection(fetchone_rows=[None])

    with pytest.raises(RecordNotFoundError):
        SummaryRepository(connection.factory).upsert_for_playlist(uuid4(), _fields())

    assert len(connection.statements) == 1
    assert connection.rollbacks == 1
    assert connection.commits == 0


def test_invalid_summary_rolls_back_without_writing():
    playlist_id = uuid4()
    connection = FakeConnection(fetchone_rows=[{"id": str(playlist_id)}, None])

    with pytest.raises(SummaryValidationError) as excinfo:
        SummaryRepository(connection.factory).upsert_for_playlist(playlist_id, _fields(confidence=150))

    assert any("confidence" in message for message in excinfo.value.messages)
    assert not any(query.startswith("INSERT") for query in connection.queries)
    assert connection.rollbacks == 1


def test_assigning_a_second_owner_is_rejected():
    playlist_id = uuid4()
    connection = FakeConnection(fetchone_rows=[{"id": str(playlist_id)}, None])

    with pytest.raises(SummaryValidationError, match="cannot reference both"):
        SummaryRepository(connection.factory).upsert_for_playlist(playlist_id, _fields(video_id=uuid4()))

    assert connection.rollbacks == 1


def test_constraint_violations_surface_as_validation_errors():
    playlist_id = uuid4()
    connection = FakeConnection(fetchone_rows=[{"id": str(playlist_id)}, None])

    def fail_on_insert(query, params):
        if query.startswith("INSERT"):
            raise IntegrityError("insert or update on table violates foreign key constraint")

    connection.on_execute = fail_on_insert

    with pytest.raises(SummaryValidationError):
        SummaryRepository(connection.factory).upsert_for_playlist(playlist_id, _fields())

    assert connection.rollbacks == 1


def test_set_bookmarked_and_missing_summary():
    summary_id = uuid4()
    row = _stored_row(id=str(summary_id), playlist_id=str(uuid4()), is_bookmarked=True)
    repository = SummaryRepository(FakeConnection(fetchone_rows=[row]).factory)

    assert repository.set_bookmarked(summary_id, True).is_bookmarked is True

    with pytest.raises(RecordNotFoundError):
        SummaryRepository(FakeConnection().factory).set_bookmarked(summary_id, False)


def test_list_for_playlist_includes_video_summaries():
    playlist_id = uuid4()
    rows = [
        _stored_row(playlist_id=str(playlist_id)),
        _stored_row(video_id=str(uuid4())),
    ]
    connection = FakeConnection(fetchall_rows=rows)

    summaries = SummaryRepository(connection.factory).list_for_playlist(playlist_id)

    assert [summary.is_playlist_summary for summary in summaries] == [True, False]
    assert "LEFT JOIN videos" in connection.queries[0]


def test_find_by_id_reads_by_primary_key_and_tolerates_missing_rows():
    summary_id = uuid4()
    row = _stored_row(id=str(summary_id), playlist_id=str(uuid4()))
    connection = FakeConnection(fetchone_rows=[row, None])
    repository = SummaryRepository(connection.factory)

    assert repository.find_by_id(summary_id).id == summary_id
    assert repository.find_by_id(uuid4()) is None
    assert connection.queries[0] == "SELECT * FROM ai_summaries WHERE id = %(id)s"
    assert connection.statements[0][1] == {"id": str(summary_id)}
