"""Database connection, DDL, and low-level CRUD for glossary-editor."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from glossary_editor.exceptions import DatabaseError
from glossary_editor.models import CategoryModel, LearningPathModel, TermModel

SCHEMA_VERSION = "1.0"

# ---------------------------------------------------------------------------
# JSON column converter
# ---------------------------------------------------------------------------

def _convert_json(data: bytes) -> Any:
    if data is None or data == b"":
        return None
    return json.loads(data)


sqlite3.register_converter("JSON", _convert_json)


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

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    icon TEXT,
    UNIQUE (name)
);

-- AUTOINCREMENT keeps term ids from being reused after deletes
CREATE TABLE IF NOT EXISTS terms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    term TEXT NOT NULL,
    category TEXT NOT NULL,
    definition TEXT NOT NULL,
    aliases JSON,
    related JSON,
    tags JSON,
    refs JSON,
    learningpaths JSON
);
CREATE INDEX IF NOT EXISTS term_category_index ON terms (category);

CREATE TABLE IF NOT EXISTS learning_paths (
    rowid INTEGER PRIMARY KEY,
    id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    icon TEXT,
    categories JSON,
    UNIQUE (id)
);
"""

# Term field name -> column name. ``references`` is an SQL keyword.
TERM_COLUMNS: dict[str, str] = {
    "term": "term",
    "category": "category",
    "definition": "definition",
    "aliases": "aliases",
    "related": "related",
    "tags": "tags",
    "references": "refs",
    "learningpaths": "learningpaths",
}

_JSON_FIELDS = frozenset({"aliases", "related", "tags", "references", "learningpaths"})


def connect(db_path: str | Path = ":memory:") -> sqlite3.Connection:
    """Open a database connection with editor PRAGMA settings."""
    db_path_str = str(db_path)
    conn = sqlite3.connect(
        db_path_str,
        detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        check_same_thread=False,
    )
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


def _encode(field_name: str, value: Any) -> Any:
    if field_name in _JSON_FIELDS:
        if field_name == "learningpaths":
            return json.dumps(dict(value or {}))
        return json.dumps(list(value or []))
    return value


# ---------------------------------------------------------------------------
# Category CRUD helpers
# ---------------------------------------------------------------------------

def insert_category(
    conn: sqlite3.Connection,
    name: str,
    description: str,
    icon: str | None = None,
    *,
    category_id: int | None = None,
) -> int:
    """Insert a category, returning its id."""
    cur = conn.execute(
        "INSERT INTO categories (id, name, description, icon) VALUES (?, ?, ?, ?)",
        (category_id, name, description, icon),
    )
    return cur.lastrowid


def get_category_row(conn: sqlite3.Connection, name: str) -> sqlite3.Row | None:
    """Get a full category row by name."""
    return conn.execute(
        "SELECT * FROM categories WHERE name = ?",
        (name,),
    ).fetchone()


def update_category_columns(
    conn: sqlite3.Connection,
    name: str,
    fields: dict[str, Any],
) -> None:
    for column, value in fields.items():
        conn.execute(
            f"UPDATE categories SET {column} = ? WHERE name = ?",
            (value, name),
        )


def rename_category_rows(conn: sqlite3.Connection, old: str, new: str) -> int:
    """Rename a category and every term using it; returns terms touched."""
    conn.execute("UPDATE categories SET name = ? WHERE name = ?", (new, old))
    cur = conn.execute("UPDATE terms SET category = ? WHERE category = ?", (new, old))
    return cur.rowcount


def list_category_rows(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    return conn.execute("SELECT * FROM categories ORDER BY id").fetchall()


def row_to_category(row: sqlite3.Row) -> CategoryModel:
    return CategoryModel(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        icon=row["icon"],
    )


# ---------------------------------------------------------------------------
# Term CRUD helpers
# ---------------------------------------------------------------------------

def insert_term(
    conn: sqlite3.Connection,
    fields: dict[str, Any],
    *,
    term_id: int | None = None,
) -> int:
    """Insert a term from a field dict, returning its id.

    Omitted optional fields are stored as empty lists / mappings.
    """
    names = list(TERM_COLUMNS)
    columns = ", ".join(TERM_COLUMNS[n] for n in names)
    placeholders = ", ".join("?" for _ in names)
    values = [_encode(n, fields.get(n)) for n in names]
    cur = conn.execute(
        f"INSERT INTO terms (id, {columns}) VALUES (?, {placeholders})",
        [term_id, *values],
    )
    return cur.lastrowid


def update_term_columns(
    conn: sqlite3.Connection,
    term_id: int,
    fields: dict[str, Any],
) -> None:
    """Overwrite the given term fields; other columns are untouched."""
    for name, value in fields.items():
        conn.execute(
            f"UPDATE terms SET {TERM_COLUMNS[name]} = ? WHERE id = ?",
            (_encode(name, value), term_id),
        )


def delete_term_row(conn: sqlite3.Connection, term_id: int) -> bool:
    cur = conn.execute("DELETE FROM terms WHERE id = ?", (term_id,))
    return cur.rowcount > 0


def get_term_row(conn: sqlite3.Connection, term_id: int) -> sqlite3.Row | None:
    """Get a full term row by id."""
    return conn.execute(
        "SELECT * FROM terms WHERE id = ?",
        (term_id,),
    ).fetchone()


def list_term_rows(
    conn: sqlite3.Connection,
    *,
    category: str | None = None,
) -> list[sqlite3.Row]:
    """List term rows in insertion (id) order, optionally by category."""
    if category is None:
        return conn.execute("SELECT * FROM terms ORDER BY id").fetchall()
    return conn.execute(
        "SELECT * FROM terms WHERE category = ? ORDER BY id",
        (category,),
    ).fetchall()


def row_to_term(row: sqlite3.Row) -> TermModel:
    return TermModel(
        id=row["id"],
        term=row["term"],
        category=row["category"],
        definition=row["definition"],
        aliases=tuple(row["aliases"] or ()),
        related=tuple(row["related"] or ()),
        tags=tuple(row["tags"] or ()),
        references=tuple(row["refs"] or ()),
        learningpaths=dict(row["learningpaths"] or {}),
    )


# ---------------------------------------------------------------------------
# Learning path helpers
# ---------------------------------------------------------------------------

def insert_learning_path(
    conn: sqlite3.Connection,
    path_id: str,
    name: str,
    *,
    description: str | None = None,
    icon: str | None = None,
    categories: list[str] | tuple[str, ...] = (),
) -> None:
    conn.execute(
        "INSERT INTO learning_paths (id, name, description, icon, categories) "
        "VALUES (?, ?, ?, ?, ?)",
        (path_id, name, description, icon, json.dumps(list(categories))),
    )


def get_learning_path_row(
    conn: sqlite3.Connection, path_id: str
) -> sqlite3.Row | None:
    return conn.execute(
        "SELECT * FROM learning_paths WHERE id = ?",
        (path_id,),
    ).fetchone()


def list_learning_path_rows(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    return conn.execute("SELECT * FROM learning_paths ORDER BY rowid").fetchall()


def row_to_learning_path(row: sqlite3.Row) -> LearningPathModel:
    return LearningPathModel(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        icon=row["icon"],
        categories=tuple(row["categories"] or ()),
    )
