"""
SQLite-backed persistence for director sessions.

A session is stored as the flat JSON document produced by
`FlowDirector.to_dict()`; loading it back yields a director that
continues exactly where the saved one stopped, PRNG position included.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from flow_director.api import FlowDirector
from flow_director.storage.schema import SCHEMA, SCHEMA_VERSION

logger = logging.getLogger(__name__)


class SessionStore:
    """Stores director sessions keyed by session ID."""

    def __init__(self, db_path: str | Path, read_only: bool = False):
        self.db_path = Path(db_path).resolve()
        self.read_only = read_only
        self._closed = False

        if read_only:
            self.conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        else:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(self.db_path))
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")
            self.conn.executescript(SCHEMA)
            self.conn.execute(
                "INSERT OR IGNORE INTO metadata (key, value) VALUES ('schema_version', ?)",
                (SCHEMA_VERSION,),
            )
            self.conn.commit()

    def __enter__(self) -> "SessionStore":
        return self

    def __exit__(self, *_) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def save(self, session_id: str, director: FlowDirector) -> None:
        if self.read_only:
            raise PermissionError(f"Session store {self.db_path} is read-only")

        state = director.to_dict()
        session = state["session"]
        self.conn.execute(
            """
            INSERT INTO sessions (session_id, state, games, turns, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(session_id) DO UPDATE SET
                state = excluded.state,
                games = excluded.games,
                turns = excluded.turns,
                updated_at = excluded.updated_at
            """,
            (session_id, json.dumps(state), session["games"], session["turns"], time.time()),
        )
        self.conn.commit()
        logger.info("Saved session %s (%d games, %d turns)", session_id, session["games"], session["turns"])

    def load(self, session_id: str) -> Optional[FlowDirector]:
        """Rebuild the stored director, or None if the session is unknown."""
        row = self.conn.execute(
            "SELECT state FROM sessions WHERE session_id = ?", (session_id,)
        ).fetchone()
        if row is None:
            return None

        try:
            state = json.loads(row[0])
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupt state for session {session_id!r}") from e

        try:
            director = FlowDirector.from_dict(state)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Corrupt state for session {session_id!r}: {e}") from e
        logger.info("Loaded session %s", session_id)
        return director

    def delete(self, session_id: str) -> bool:
        if self.read_only:
            raise PermissionError(f"Session store {self.db_path} is read-only")
        cur = self.conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
        self.conn.commit()
        return cur.rowcount > 0

    def list_sessions(self) -> List[str]:
        """Session IDs, most recently updated first."""
        rows = self.conn.execute(
            "SELECT session_id FROM sessions ORDER BY updated_at DESC, session_id"
        ).fetchall()
        return [r[0] for r in rows]

    # -------------------------------------------------------------------------
    # Info / lifecycle
    # -------------------------------------------------------------------------

    def get_info(self) -> Dict[str, Any]:
        sessions, games, turns = self.conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(games), 0), COALESCE(SUM(turns), 0) FROM sessions"
        ).fetchone()
        version = self.conn.execute(
            "SELECT value FROM metadata WHERE key = 'schema_version'"
        ).fetchone()
        return {
            "sessions": sessions,
            "total_games": games,
            "total_turns": turns,
            "schema_version": version[0] if version else None,
        }

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.conn.close()
