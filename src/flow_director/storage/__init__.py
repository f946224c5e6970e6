"""
Storage module - persistence of director sessions.

Use `open_store()` or instantiate SessionStore directly.
"""

from __future__ import annotations

from pathlib import Path

from flow_director.storage.session_store import SessionStore


def open_store(base_dir: str | Path = "data", name: str = "sessions.db", **kwargs) -> SessionStore:
    """
    Open (creating if needed) a session store under `base_dir`.

    Args:
        base_dir: Directory holding the database file
        name: Database file name
        **kwargs: Additional arguments (e.g., read_only=True)
    """
    return SessionStore(Path(base_dir) / name, **kwargs)


__all__ = [
    "SessionStore",
    "open_store",
]
