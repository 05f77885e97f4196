import io
import json
import logging
import sqlite3
import tempfile
import threading
import zipfile
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from fastapi import Request

from config import CONFIG_DIR
from .params import to_sql_params
from .rows import column_names, decode_rows, text_factory
from .schema import (
    ADDED_COLUMNS,
    DEFAULT_SETTINGS,
    INDEXES_SQL,
    POMODORO_WORK_SECONDS,
    SCHEMA_SQL,
    SCHEMA_VERSION,
    SEED_POMODORO_STATE_SQL,
)

logger = logging.getLogger(__name__)

DATA_DIR = CONFIG_DIR
DB_PATH = DATA_DIR / "recallify.db"
PDF_DIR = DATA_DIR / "pdfs"
BACKUP_DIR = DATA_DIR / "backups"
BACKUP_KEEP = 7
MEMORY = ":memory:"


class CommandError(Exception):
    """Any failure of a database command; the message is all the caller sees."""


class Database:
    """The single SQLite connection and the lock that serializes access to it.

    ``lock`` may be any object with ``acquire()``/``release()``; it defaults
    to a ``threading.Lock``. Selects take the lock too, so no two commands
    ever run at the same time on the connection.
    """

    def __init__(self, conn: sqlite3.Connection, lock=None, *, strict_params: bool = False):
        self.conn = conn
        self.lock = lock if lock is not None else threading.Lock()
        self.strict_params = strict_params

    @contextmanager
    def locked(self) -> Iterator[sqlite3.Connection]:
        try:
            acquired = self.lock.acquire()
        except RuntimeError as exc:
            raise CommandError(f"database lock unavailable: {exc}") from exc
        if not acquired:
            raise CommandError("database lock unavailable")
        try:
            yield self.conn
        finally:
            self.lock.release()

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> Dict[str, int]:
        """Run one mutating statement; report the last rowid and changed row count."""
        try:
            bound = to_sql_params(params, strict=self.strict_params)
            with self.locked() as conn:
                cursor = conn.execute(sql, bound)
                cursor.close()
                last_id, changes = conn.execute("SELECT last_insert_rowid(), changes()").fetchone()
        # ValueError: rejected structured params, strings sqlite3 cannot encode
        except (sqlite3.Error, sqlite3.Warning, ValueError) as exc:
            logger.warning("execute failed: %s | sql=%s", exc, sql)
            raise CommandError(str(exc)) from exc
        return {"lastInsertId": last_id, "rowsAffected": changes}

    def select(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Run one query and decode every row into a column-name mapping."""
        try:
            bound = to_sql_params(params, strict=self.strict_params)
            with self.locked() as conn:
                cursor = conn.execute(sql, bound)
                try:
                    columns = column_names(cursor.description)
                    rows = cursor.fetchall() if columns else []
                finally:
                    cursor.close()
        except (sqlite3.Error, sqlite3.Warning, ValueError) as exc:
            logger.warning("select failed: %s | sql=%s", exc, sql)
            raise CommandError(str(exc)) from exc
        return decode_rows(columns, rows)

    def close(self) -> None:
        with self.locked() as conn:
            conn.close()


def connect(path: Union[str, Path]) -> sqlite3.Connection:
    """Open an autocommit connection with foreign-key enforcement on."""
    conn = sqlite3.connect(str(path), check_same_thread=False, isolation_level=None)
    conn.text_factory = text_factory
    conn.execute("PRAGMA foreign_keys = ON")
    return conn

def init_schema(conn: sqlite3.Connection) -> None:
    """Create tables, indexes and triggers if absent, migrate, then seed defaults."""
    conn.executescript(SCHEMA_SQL)
    add_missing_columns(conn)
    conn.executescript(INDEXES_SQL)
    seed_defaults(conn)
    stamp_schema_version(conn)

def add_missing_columns(conn: sqlite3.Connection) -> List[str]:
    """Add columns introduced after a table first shipped; returns the ones added as table.column."""
    added = []
    for table, columns in ADDED_COLUMNS.items():
        present = {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}
        for name, ddl in columns:
            if name not in present:
                conn.execute(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}")
                added.append(f"{table}.{name}")
    if added:
        logger.info("migrated older store, added %s", ", ".join(added))
    return added

def seed_defaults(conn: sqlite3.Connection) -> None:
    """Insert default settings and the pomodoro_state row; existing rows are left alone."""
    conn.executemany(
        "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?)",
        DEFAULT_SETTINGS,
    )
    conn.execute(SEED_POMODORO_STATE_SQL)

def stored_schema_version(conn: sqlite3.Connection) -> int:
    """Schema version the Recallify store was last initialized with (0 for a blank file)."""
    (version,) = conn.execute("PRAGMA user_version").fetchone()
    return int(version)

def stamp_schema_version(conn: sqlite3.Connection) -> None:
    # PRAGMA values cannot be bound as parameters
    if stored_schema_version(conn) != SCHEMA_VERSION:
        conn.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)}")

def open_database(
    path: Union[str, Path, None] = None,
    *,
    lock=None,
    strict_params: bool = False,
) -> Database:
    """Open the store and initialize its schema.

    Errors are not caught: a store that cannot be opened or initialized must
    stop startup.
    """
    path = DB_PATH if path is None else path
    if str(path) != MEMORY:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = connect(path)
    try:
        init_schema(conn)
    except sqlite3.Error:
        conn.close()
        raise
    logger.info("database ready at %s (schema version %d)", path, SCHEMA_VERSION)
    return Database(conn, lock, strict_params=strict_params)

def get_db(request: Request) -> Database:
    """FastAPI dependency returning the Database built at startup."""
    return request.app.state.db

def clear_pomodoro_history(db: Database) -> int:
    """Delete all pomodoro sessions and reset the timer row; returns sessions removed."""
    removed = db.execute("DELETE FROM pomodoro_sessions")["rowsAffected"]
    db.execute(
        """
        UPDATE pomodoro_state
        SET session_type = 'work', duration_seconds = ?, remaining_seconds = ?,
            is_running = 0, pomodoro_count = 0, start_timestamp = NULL,
            updated_at = CURRENT_TIMESTAMP
        WHERE id = 1
        """,
        [POMODORO_WORK_SECONDS, POMODORO_WORK_SECONDS],
    )
    logger.info("cleared %d pomodoro sessions", removed)
    return removed

def build_backup_manifest(schema_version: int, attachments: List[str]) -> dict:
    """Describe a Recallify archive: what wrote it, when, and which PDFs ride along."""
    return {
        "app": "recallify",
        "created_at": datetime.now(timezone.utc).isoformat(),
        "schema_version": schema_version,
        "database": "recallify.db",
        "attachments": attachments,
    }

def snapshot_database(db: Database) -> bytes:
    """Copy the live database through the SQLite backup API and return the file bytes."""
    with tempfile.TemporaryDirectory() as tmpdir:
        target_path = Path(tmpdir) / "recallify.db"
        target = sqlite3.connect(str(target_path))
        try:
            with db.locked() as conn:
                conn.backup(target)
        finally:
            target.close()
        return target_path.read_bytes()

def write_backup_archive(db: Database, fileobj, pdf_dir: Optional[Path] = None) -> int:
    """Write manifest, database snapshot and attachments into a zip; returns the member count."""
    pdf_dir = pdf_dir or PDF_DIR
    with db.locked() as conn:
        schema_version = stored_schema_version(conn)
    pdfs = sorted(p for p in pdf_dir.iterdir() if p.is_file()) if pdf_dir.is_dir() else []
    manifest = build_backup_manifest(schema_version, [p.name for p in pdfs])
    with zipfile.ZipFile(fileobj, "w", compression=zipfile.ZIP_DEFLATED) as zipf:
        zipf.writestr("manifest.json", json.dumps(manifest, indent=2))
        zipf.writestr("recallify.db", snapshot_database(db))
        for pdf in pdfs:
            zipf.write(pdf, arcname=f"pdfs/{pdf.name}")
    return 2 + len(pdfs)

def create_backup_archive_bytes(db: Database, pdf_dir: Optional[Path] = None) -> Tuple[bytes, int]:
    """Create a backup zip archive in memory."""
    buffer = io.BytesIO()
    count = write_backup_archive(db, buffer, pdf_dir)
    return buffer.getvalue(), count

def create_backup_archive_file(db: Database, destination: Path, pdf_dir: Optional[Path] = None) -> int:
    """Create a backup zip archive at the given destination."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    with open(destination, "wb") as fh:
        return write_backup_archive(db, fh, pdf_dir)

def record_export(
    db: Database,
    export_type: str,
    file_name: Optional[str],
    file_path: Optional[str],
    record_count: Optional[int],
) -> int:
    result = db.execute(
        "INSERT INTO export_history (export_type, file_name, file_path, record_count) VALUES (?, ?, ?, ?)",
        [export_type, file_name, file_path, record_count],
    )
    return result["lastInsertId"]

def run_daily_backup(
    db: Database,
    backup_dir: Optional[Path] = None,
    pdf_dir: Optional[Path] = None,
    keep: int = BACKUP_KEEP,
) -> Optional[Path]:
    """Create a daily rolling backup of the DB and attachments and prune old archives."""
    backup_dir = backup_dir or BACKUP_DIR
    backup_dir.mkdir(parents=True, exist_ok=True)
    today = date.today()
    existing = sorted(backup_dir.glob("*.zip"), key=lambda path: path.stat().st_mtime, reverse=True)
    if existing:
        latest_date = date.fromtimestamp(existing[0].stat().st_mtime)
        if latest_date == today:
            return None
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S-%f")
    backup_path = backup_dir / f"backup-{timestamp}.zip"
    count = create_backup_archive_file(db, backup_path, pdf_dir)
    record_export(db, "daily_backup", backup_path.name, str(backup_path), count)
    logger.info("daily backup written to %s", backup_path)
    existing = sorted(backup_dir.glob("*.zip"), key=lambda path: path.stat().st_mtime, reverse=True)
    for old_backup in existing[keep:]:
        old_backup.unlink(missing_ok=True)
    return backup_path
