"""
db.py
SQLite helpers for the local key/value store (token + user of each browser's signed-in admin).
Rows are keyed by a per-browser session id, so browsers never see each other's login.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager

import config

DB_FILE = config.DB_FILE


@contextmanager
def get_conn():
    conn = sqlite3.connect(DB_FILE, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def execute(sql: str, params: tuple = ()) -> int:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.lastrowid


def fetch_one(sql: str, params: tuple = ()):
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def init_db() -> None:
    execute(
        """
        CREATE TABLE IF NOT EXISTS browser_auth (
            session_id TEXT NOT NULL,
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            PRIMARY KEY (session_id, key)
        )
        """
    )


def get_value(session_id: str, key: str) -> str | None:
    row = fetch_one("SELECT value FROM browser_auth WHERE session_id = ? AND key = ?", (session_id, key))
    if row:
        return str(row["value"])
    return None


def set_value(session_id: str, key: str, value: str) -> None:
    execute(
        """
        INSERT INTO browser_auth(session_id, key, value) VALUES(?, ?, ?)
        ON CONFLICT(session_id, key) DO UPDATE SET value=excluded.value
        """,
        (session_id, key, value),
    )


def delete_values(session_id: str, *keys: str) -> None:
    with get_conn() as conn:
        conn.executemany(
            "DELETE FROM browser_auth WHERE session_id = ? AND key = ?", [(session_id, k) for k in keys]
        )
