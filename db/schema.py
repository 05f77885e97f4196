# SQL schema for the Recallify database

SCHEMA_VERSION = 2

SCHEMA_SQL = """
-- Subjects
CREATE TABLE IF NOT EXISTS subjects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Study log entries
CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    subject_id INTEGER NOT NULL,
    study_date DATE NOT NULL,
    study_notes TEXT NOT NULL,
    morning_recall_notes TEXT,
    topics TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (subject_id) REFERENCES subjects (id) ON DELETE CASCADE
);

-- Declared review offsets per entry
CREATE TABLE IF NOT EXISTS revision_intervals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id INTEGER NOT NULL,
    interval_days INTEGER NOT NULL CHECK(interval_days > 0),
    FOREIGN KEY (entry_id) REFERENCES entries (id) ON DELETE CASCADE
);

-- Scheduled reviews
CREATE TABLE IF NOT EXISTS revisions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id INTEGER NOT NULL,
    interval_days INTEGER NOT NULL,
    due_date DATE NOT NULL,
    status TEXT NOT NULL CHECK(status IN ('pending', 'completed', 'overdue', 'rescheduled')),
    completed_at TIMESTAMP,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (entry_id) REFERENCES entries (id) ON DELETE CASCADE
);

-- Key/value configuration
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Activity log
CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id INTEGER NOT NULL,
    activity_type TEXT NOT NULL CHECK(activity_type IN ('study', 'revision_completed', 'entry_created')),
    activity_date DATE NOT NULL,
    details TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (entry_id) REFERENCES entries (id) ON DELETE CASCADE
);

-- Syllabus tree (parent_id forms a forest per subject)
CREATE TABLE IF NOT EXISTS syllabus_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    subject_id INTEGER NOT NULL,
    parent_id INTEGER,
    title TEXT NOT NULL,
    description TEXT,
    estimated_hours REAL,
    due_date DATE,
    sort_order INTEGER NOT NULL DEFAULT 0,
    is_completed INTEGER NOT NULL DEFAULT 0 CHECK(is_completed IN (0, 1)),
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (subject_id) REFERENCES subjects (id) ON DELETE CASCADE,
    FOREIGN KEY (parent_id) REFERENCES syllabus_items (id) ON DELETE CASCADE
);

-- Entry/syllabus links
CREATE TABLE IF NOT EXISTS entry_syllabus_links (
    entry_id INTEGER NOT NULL,
    syllabus_item_id INTEGER NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (entry_id, syllabus_item_id),
    FOREIGN KEY (entry_id) REFERENCES entries (id) ON DELETE CASCADE,
    FOREIGN KEY (syllabus_item_id) REFERENCES syllabus_items (id) ON DELETE CASCADE
);

-- Completed pomodoro sessions
CREATE TABLE IF NOT EXISTS pomodoro_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_type TEXT NOT NULL CHECK(session_type IN ('work', 'short_break', 'long_break')),
    duration_minutes INTEGER NOT NULL CHECK(duration_minutes > 0),
    subject_id INTEGER,
    syllabus_item_id INTEGER,
    completed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (subject_id) REFERENCES subjects (id) ON DELETE SET NULL,
    FOREIGN KEY (syllabus_item_id) REFERENCES syllabus_items (id) ON DELETE SET NULL
);

-- Live timer (single row, id = 1)
CREATE TABLE IF NOT EXISTS pomodoro_state (
    id INTEGER PRIMARY KEY CHECK(id = 1),
    session_type TEXT NOT NULL DEFAULT 'work' CHECK(session_type IN ('work', 'short_break', 'long_break')),
    duration_seconds INTEGER NOT NULL,
    remaining_seconds INTEGER NOT NULL,
    is_running INTEGER NOT NULL DEFAULT 0 CHECK(is_running IN (0, 1)),
    pomodoro_count INTEGER NOT NULL DEFAULT 0 CHECK(pomodoro_count BETWEEN 0 AND 4),
    start_timestamp INTEGER,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TRIGGER IF NOT EXISTS pomodoro_state_keep_row BEFORE DELETE ON pomodoro_state BEGIN
    SELECT RAISE(ABORT, 'pomodoro_state row cannot be deleted');
END;

-- PDF attachments
CREATE TABLE IF NOT EXISTS pdf_attachments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id INTEGER NOT NULL,
    file_name TEXT NOT NULL,
    file_path TEXT NOT NULL,
    file_size INTEGER NOT NULL,
    page_count INTEGER,
    last_viewed_page INTEGER NOT NULL DEFAULT 1 CHECK(last_viewed_page >= 1),
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (entry_id) REFERENCES entries (id) ON DELETE CASCADE
);

-- Export log
CREATE TABLE IF NOT EXISTS export_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    export_type TEXT NOT NULL,
    file_name TEXT,
    file_path TEXT,
    record_count INTEGER,
    exported_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

# Indexes on foreign-key and filter columns
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_entries_subject_id ON entries (subject_id);
CREATE INDEX IF NOT EXISTS idx_entries_study_date ON entries (study_date);
CREATE INDEX IF NOT EXISTS idx_revisions_entry_id ON revisions (entry_id);
CREATE INDEX IF NOT EXISTS idx_revisions_due_date ON revisions (due_date);
CREATE INDEX IF NOT EXISTS idx_revisions_status ON revisions (status);
CREATE INDEX IF NOT EXISTS idx_activity_log_entry_id ON activity_log (entry_id);
CREATE INDEX IF NOT EXISTS idx_activity_log_activity_date ON activity_log (activity_date);
CREATE INDEX IF NOT EXISTS idx_pomodoro_sessions_subject_id ON pomodoro_sessions (subject_id);
CREATE INDEX IF NOT EXISTS idx_pomodoro_sessions_completed_at ON pomodoro_sessions (completed_at);
CREATE INDEX IF NOT EXISTS idx_syllabus_items_subject_id ON syllabus_items (subject_id);
CREATE INDEX IF NOT EXISTS idx_syllabus_items_parent_id ON syllabus_items (parent_id);
CREATE INDEX IF NOT EXISTS idx_pdf_attachments_entry_id ON pdf_attachments (entry_id);
"""

DEFAULT_SETTINGS = (
    ("default_intervals", "3,7"),
    ("notification_enabled", "true"),
    ("notification_time", "10:00"),
    ("pomodoro_work_duration", "25"),
    ("pomodoro_short_break", "5"),
    ("pomodoro_long_break_default", "20"),
    ("pomodoro_sound_enabled", "true"),
    ("pomodoro_sound_choice", "gentle_bell"),
    ("dark_mode_enabled", "false"),
)

POMODORO_WORK_SECONDS = 1500

SEED_POMODORO_STATE_SQL = """
INSERT OR IGNORE INTO pomodoro_state
    (id, session_type, duration_seconds, remaining_seconds, pomodoro_count, is_running)
VALUES (1, 'work', 1500, 1500, 0, 0)
"""

# Columns added after their table first shipped: table -> ((column, DDL), ...)
ADDED_COLUMNS = {
    "entries": (("topics", "TEXT"),),
}
