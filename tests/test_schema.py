import sqlite3

import pytest

from db.database import CommandError, add_missing_columns, open_database, stored_schema_version
from db.schema import DEFAULT_SETTINGS, SCHEMA_VERSION

EXPECTED_TABLES = {
    "subjects", "entries", "revision_intervals", "revisions", "settings",
    "activity_log", "pomodoro_sessions", "pomodoro_state", "syllabus_items",
    "entry_syllabus_links", "pdf_attachments", "export_history",
}


def _objects(db):
    return db.select(
        "SELECT type, name FROM sqlite_master WHERE name NOT LIKE 'sqlite_%' ORDER BY type, name"
    )


def test_creates_all_tables_and_indexes(db):
    tables = {r["name"] for r in db.select("SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'")}
    assert tables == EXPECTED_TABLES
    indexes = db.select("SELECT name FROM sqlite_master WHERE type = 'index' AND name LIKE 'idx_%'")
    assert len(indexes) == 12


def test_foreign_keys_are_enforced(db):
    assert db.select("PRAGMA foreign_keys") == [{"foreign_keys": 1}]
    with pytest.raises(CommandError, match="FOREIGN KEY constraint failed"):
        db.execute(
            "INSERT INTO entries (subject_id, study_date, study_notes) VALUES (?, ?, ?)",
            [99, "2024-01-01", "orphan"],
        )


def test_seeds_settings_and_pomodoro_state(db):
    settings = {r["key"]: r["value"] for r in db.select("SELECT key, value FROM settings")}
    assert settings == dict(DEFAULT_SETTINGS)
    state = db.select("SELECT * FROM pomodoro_state")
    assert len(state) == 1
    row = state[0]
    assert row["id"] == 1
    assert row["session_type"] == "work"
    assert row["duration_seconds"] == 1500
    assert row["remaining_seconds"] == 1500
    assert row["pomodoro_count"] == 0
    assert row["is_running"] == 0


def test_reinitializing_changes_nothing(tmp_path):
    path = tmp_path / "recallify.db"
    first = open_database(path)
    first.execute("UPDATE settings SET value = ? WHERE key = ?", ["08:30", "notification_time"])
    first.execute("UPDATE pomodoro_state SET remaining_seconds = ? WHERE id = 1", [600])
    objects = _objects(first)
    first.close()

    second = open_database(path)
    try:
        assert _objects(second) == objects
        assert second.select("SELECT COUNT(*) AS n FROM settings") == [{"n": len(DEFAULT_SETTINGS)}]
        assert second.select("SELECT value FROM settings WHERE key = ?", ["notification_time"]) == [{"value": "08:30"}]
        assert second.select("SELECT id, remaining_seconds FROM pomodoro_state") == [{"id": 1, "remaining_seconds": 600}]
        with second.locked() as conn:
            assert stored_schema_version(conn) == SCHEMA_VERSION
            assert add_missing_columns(conn) == []
    finally:
        second.close()


def test_adds_topics_column_to_older_databases(tmp_path):
    path = tmp_path / "old.db"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE subjects (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL);
        CREATE TABLE entries (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            subject_id INTEGER NOT NULL,
            study_date DATE NOT NULL,
            study_notes TEXT NOT NULL,
            morning_recall_notes TEXT,
            FOREIGN KEY (subject_id) REFERENCES subjects(id) ON DELETE CASCADE
        );
        INSERT INTO subjects (name) VALUES ('Chemistry');
        INSERT INTO entries (subject_id, study_date, study_notes) VALUES (1, '2024-03-01', 'acids');
        """
    )
    conn.close()

    db = open_database(path)
    try:
        columns = {r["name"] for r in db.select("PRAGMA table_info(entries)")}
        assert "topics" in columns
        assert db.select("SELECT study_notes, topics FROM entries") == [{"study_notes": "acids", "topics": None}]
        assert db.select("SELECT COUNT(*) AS n FROM pomodoro_state") == [{"n": 1}]
    finally:
        db.close()


def test_added_columns_are_reported_once(tmp_path):
    conn = sqlite3.connect(tmp_path / "partial.db")
    try:
        conn.execute("CREATE TABLE entries (id INTEGER PRIMARY KEY, study_notes TEXT NOT NULL)")
        assert add_missing_columns(conn) == ["entries.topics"]
        assert add_missing_columns(conn) == []
        assert stored_schema_version(conn) == 0
    finally:
        conn.close()


def test_open_fails_on_corrupt_file(tmp_path):
    path = tmp_path / "broken.db"
    path.write_bytes(b"this is not a sqlite database at all" * 100)
    with pytest.raises(sqlite3.DatabaseError):
        open_database(path)


def test_pomodoro_state_stays_a_single_row(db):
    with pytest.raises(CommandError, match="CHECK constraint failed"):
        db.execute(
            "INSERT INTO pomodoro_state (id, duration_seconds, remaining_seconds) VALUES (?, ?, ?)",
            [2, 1500, 1500],
        )
    with pytest.raises(CommandError, match="UNIQUE constraint failed"):
        db.execute(
            "INSERT INTO pomodoro_state (id, duration_seconds, remaining_seconds) VALUES (?, ?, ?)",
            [1, 1500, 1500],
        )
    with pytest.raises(CommandError, match="pomodoro_state row cannot be deleted"):
        db.execute("DELETE FROM pomodoro_state")
    assert db.select("SELECT COUNT(*) AS n FROM pomodoro_state") == [{"n": 1}]


@pytest.mark.parametrize("count", [-1, 5])
def test_pomodoro_count_outside_range_fails(db, count):
    with pytest.raises(CommandError, match="CHECK constraint failed"):
        db.execute("UPDATE pomodoro_state SET pomodoro_count = ? WHERE id = 1", [count])
    assert db.select("SELECT pomodoro_count FROM pomodoro_state") == [{"pomodoro_count": 0}]


def test_pomodoro_count_upper_bound_is_allowed(db):
    assert db.execute("UPDATE pomodoro_state SET pomodoro_count = ? WHERE id = 1", [4])["rowsAffected"] == 1


def test_positive_durations_are_enforced(db):
    subject_id = db.execute("INSERT INTO subjects (name) VALUES (?)", ["Physics"])["lastInsertId"]
    entry_id = db.execute(
        "INSERT INTO entries (subject_id, study_date, study_notes) VALUES (?, ?, ?)",
        [subject_id, "2024-01-01", "kinematics"],
    )["lastInsertId"]
    with pytest.raises(CommandError, match="CHECK constraint failed"):
        db.execute("INSERT INTO revision_intervals (entry_id, interval_days) VALUES (?, ?)", [entry_id, 0])
    with pytest.raises(CommandError, match="CHECK constraint failed"):
        db.execute(
            "INSERT INTO pomodoro_sessions (session_type, duration_minutes) VALUES (?, ?)",
            ["work", 0],
        )
    with pytest.raises(CommandError, match="CHECK constraint failed"):
        db.execute(
            "INSERT INTO pdf_attachments (entry_id, file_name, file_path, file_size, last_viewed_page) VALUES (?, ?, ?, ?, ?)",
            [entry_id, "a.pdf", "/tmp/a.pdf", 10, 0],
        )
