"""Database connection, DDL, and low-level CRUD for morphology-engine."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from morphology_engine.exceptions import DatabaseError

SCHEMA_VERSION = "1.0"

# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

_DDL = """
-- Meta table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE (key)
);

-- Lexicon tables
CREATE TABLE IF NOT EXISTS roots (
    rowid INTEGER PRIMARY KEY,
    root TEXT NOT NULL,
    UNIQUE (root)
);
CREATE INDEX IF NOT EXISTS root_index ON roots (root);

CREATE TABLE IF NOT EXISTS patterns (
    rowid INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    rule TEXT NOT NULL,
    UNIQUE (name)
);
CREATE INDEX IF NOT EXISTS pattern_name_index ON patterns (name);

-- Corpus counts attached to (root, pattern) derivatives
CREATE TABLE IF NOT EXISTS frequencies (
    root_rowid INTEGER NOT NULL REFERENCES roots (rowid) ON DELETE CASCADE,
    pattern_rowid INTEGER NOT NULL REFERENCES patterns (rowid) ON DELETE CASCADE,
    count INTEGER NOT NULL DEFAULT 0,
    UNIQUE (root_rowid, pattern_rowid)
);
CREATE INDEX IF NOT EXISTS frequency_root_index ON frequencies (root_rowid);

-- Edit history
CREATE TABLE IF NOT EXISTS edit_history (
    rowid INTEGER PRIMARY KEY,
    entity_type TEXT NOT NULL CHECK( entity_type IN ('root','pattern','frequency') ),
    entity_id TEXT NOT NULL,
    field_name TEXT,
    operation TEXT NOT NULL CHECK( operation IN ('CREATE', 'UPDATE', 'DELETE') ),
    old_value TEXT,
    new_value TEXT,
    timestamp TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);
CREATE INDEX IF NOT EXISTS edit_history_entity_index ON edit_history (entity_type, entity_id);
CREATE INDEX IF NOT EXISTS edit_history_timestamp_index ON edit_history (timestamp);
"""


def connect(db_path: str | Path = ":memory:") -> sqlite3.Connection:
    """Open a database connection with engine PRAGMA settings.

    The connection is shared between threads; the engine's writer lock
    serialises every statement issued on it.
    """
    db_path_str = str(db_path)
    try:
        conn = sqlite3.connect(db_path_str, check_same_thread=False)
    except sqlite3.Error as e:
        raise DatabaseError(f"Cannot open database {db_path_str!r}: {e}") from e
    conn.execute("PRAGMA foreign_keys = ON")
    if db_path_str != ":memory:":
        conn.execute("PRAGMA journal_mode = WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize all tables if they don't exist. Set schema version."""
    conn.executescript(_DDL)
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) VALUES ('schema_version', ?)",
        (SCHEMA_VERSION,),
    )
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) "
        "VALUES ('created_at', strftime('%Y-%m-%dT%H:%M:%f', 'now'))",
    )
    conn.commit()


def check_schema_version(conn: sqlite3.Connection) -> None:
    """Verify the database schema version is compatible."""
    try:
        row = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        # meta table doesn't exist - uninitialized DB
        return
    if row is None:
        return
    version = row[0]
    if version != SCHEMA_VERSION:
        raise DatabaseError(
            f"Incompatible schema version: {version} "
            f"(expected {SCHEMA_VERSION})"
        )


# ---------------------------------------------------------------------------
# Root helpers
# ---------------------------------------------------------------------------

def get_root_rowid(conn: sqlite3.Connection, root: str) -> int | None:
    """Get the rowid for a root, or None."""
    row = conn.execute(
        "SELECT rowid FROM roots WHERE root = ?",
        (root,),
    ).fetchone()
    return row[0] if row else None


def insert_root(conn: sqlite3.Connection, root: str) -> int:
    cur = conn.execute("INSERT INTO roots (root) VALUES (?)", (root,))
    return cur.lastrowid


def delete_root(conn: sqlite3.Connection, rowid: int) -> None:
    conn.execute("DELETE FROM roots WHERE rowid = ?", (rowid,))


def all_roots(conn: sqlite3.Connection) -> list[str]:
    """All roots in stable lexicographic order."""
    rows = conn.execute("SELECT root FROM roots ORDER BY root").fetchall()
    return [r["root"] for r in rows]


# ---------------------------------------------------------------------------
# Pattern helpers
# ---------------------------------------------------------------------------

def get_pattern_row(conn: sqlite3.Connection, name: str) -> sqlite3.Row | None:
    """Get a full pattern row by name."""
    return conn.execute(
        "SELECT rowid, * FROM patterns WHERE name = ?",
        (name,),
    ).fetchone()


def insert_pattern(conn: sqlite3.Connection, name: str, rule: str) -> int:
    cur = conn.execute(
        "INSERT INTO patterns (name, rule) VALUES (?, ?)",
        (name, rule),
    )
    return cur.lastrowid


def update_pattern_rule(conn: sqlite3.Connection, rowid: int, rule: str) -> None:
    conn.execute("UPDATE patterns SET rule = ? WHERE rowid = ?", (rule, rowid))


def delete_pattern(conn: sqlite3.Connection, rowid: int) -> None:
    conn.execute("DELETE FROM patterns WHERE rowid = ?", (rowid,))


def all_patterns(conn: sqlite3.Connection) -> list[tuple[str, str]]:
    """All (name, rule) pairs in insertion order."""
    rows = conn.execute(
        "SELECT name, rule FROM patterns ORDER BY rowid"
    ).fetchall()
    return [(r["name"], r["rule"]) for r in rows]


# ---------------------------------------------------------------------------
# Frequency helpers
# ---------------------------------------------------------------------------

def get_frequency(
    conn: sqlite3.Connection, root_rowid: int, pattern_rowid: int
) -> int | None:
    row = conn.execute(
        "SELECT count FROM frequencies WHERE root_rowid = ? AND pattern_rowid = ?",
        (root_rowid, pattern_rowid),
    ).fetchone()
    return row[0] if row else None


def set_frequency(
    conn: sqlite3.Connection, root_rowid: int, pattern_rowid: int, count: int
) -> None:
    conn.execute(
        "INSERT INTO frequencies (root_rowid, pattern_rowid, count) "
        "VALUES (?, ?, ?) "
        "ON CONFLICT (root_rowid, pattern_rowid) DO UPDATE SET count = excluded.count",
        (root_rowid, pattern_rowid, count),
    )


def all_frequencies(conn: sqlite3.Connection) -> dict[tuple[str, str], int]:
    """Recorded counts keyed by (root, pattern name)."""
    rows = conn.execute(
        "SELECT r.root, p.name, f.count FROM frequencies f "
        "JOIN roots r ON f.root_rowid = r.rowid "
        "JOIN patterns p ON f.pattern_rowid = p.rowid"
    ).fetchall()
    return {(r["root"], r["name"]): r["count"] for r in rows}
