"""
Database schema for director session storage.

Tables:
    sessions  - One row per player session (director state as JSON)
    metadata  - Key-value store for settings

Indexes:
    idx_sessions_updated - Most-recently-played ordering
"""

SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    session_id TEXT PRIMARY KEY,
    state TEXT NOT NULL,
    games INTEGER DEFAULT 0,
    turns INTEGER DEFAULT 0,
    updated_at REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_updated ON sessions(updated_at);

CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""

SCHEMA_VERSION = "1"
