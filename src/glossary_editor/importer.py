"""Import pipeline for glossary-editor.

Reads the on-disk glossary layout: a directory holding ``categories.json``,
``terms.json`` and optionally ``learningpaths.json``, each a JSON array.
Records without an ``id`` take their 1-based array position, which is how
older position-identified files are read.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from glossary_editor import db as _db
from glossary_editor.exceptions import DataImportError
from glossary_editor.validator import LIST_FIELDS

logger = logging.getLogger(__name__)

CATEGORIES_FILE = "categories.json"
TERMS_FILE = "terms.json"
LEARNING_PATHS_FILE = "learningpaths.json"


def import_from_json(conn: sqlite3.Connection, data_dir: str | Path) -> None:
    """Load a glossary directory into the editor database.

    Missing files are skipped. Unknown categories on terms are accepted
    here; validation reports them afterwards.
    """
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Directory not found: {data_dir}")

    categories = read_array(data_dir / CATEGORIES_FILE)
    terms = read_array(data_dir / TERMS_FILE)
    paths = read_array(data_dir / LEARNING_PATHS_FILE)

    try:
        _import_categories(conn, categories)
        _import_terms(conn, terms)
        _import_learning_paths(conn, paths)
    except sqlite3.IntegrityError as e:
        raise DataImportError(f"Conflicting records in {data_dir}: {e}") from e

    logger.info(
        "Imported %d categories, %d terms, %d learning paths from %s",
        len(categories), len(terms), len(paths), data_dir,
    )


def read_array(path: Path) -> list[dict[str, Any]]:
    """Read a JSON array of objects; a missing file reads as empty."""
    if not path.exists():
        logger.debug("Skipping missing file %s", path)
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataImportError(f"Failed to parse {path}: {e}") from e
    if not isinstance(data, list):
        raise DataImportError(f"{path}: expected a JSON array")
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise DataImportError(f"{path}: item {index} is not an object")
    return data


def _record_ids(records: list[dict[str, Any]], kind: str) -> list[int]:
    """Explicit ids where present, else 1-based positions."""
    ids = []
    for position, record in enumerate(records, start=1):
        record_id = record.get("id", position)
        if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id < 1:
            raise DataImportError(f"{kind} {position}: invalid id {record_id!r}")
        ids.append(record_id)
    seen = set()
    for record_id in ids:
        if record_id in seen:
            raise DataImportError(f"Duplicate {kind} id: {record_id}")
        seen.add(record_id)
    return ids


def _import_categories(
    conn: sqlite3.Connection,
    records: list[dict[str, Any]],
) -> None:
    for record, category_id in zip(records, _record_ids(records, "category")):
        name = record.get("name")
        if not isinstance(name, str) or not name:
            raise DataImportError(f"Category {category_id} has no name")
        _db.insert_category(
            conn,
            name,
            record.get("description") or "",
            record.get("icon"),
            category_id=category_id,
        )


def _import_terms(conn: sqlite3.Connection, records: list[dict[str, Any]]) -> None:
    for record, term_id in zip(records, _record_ids(records, "term")):
        name = record.get("term")
        if not isinstance(name, str):
            raise DataImportError(f"Term {term_id} has no 'term' name")
        fields: dict[str, Any] = {
            "term": name,
            "category": str(record.get("category") or ""),
            "definition": str(record.get("definition") or ""),
        }
        for list_field in LIST_FIELDS:
            value = record.get(list_field) or []
            if not isinstance(value, list):
                raise DataImportError(
                    f"Term {term_id}: {list_field!r} must be an array"
                )
            fields[list_field] = [str(item) for item in value]
        paths = record.get("learningpaths") or {}
        if not isinstance(paths, dict) or not all(
            isinstance(p, int) and not isinstance(p, bool) for p in paths.values()
        ):
            raise DataImportError(
                f"Term {term_id}: 'learningpaths' must map ids to integer positions"
            )
        fields["learningpaths"] = paths
        _db.insert_term(conn, fields, term_id=term_id)


def _import_learning_paths(
    conn: sqlite3.Connection,
    records: list[dict[str, Any]],
) -> None:
    for index, record in enumerate(records):
        path_id = record.get("id")
        if not isinstance(path_id, str) or not path_id:
            raise DataImportError(f"Learning path {index} has no string id")
        _db.insert_learning_path(
            conn,
            path_id,
            str(record.get("name") or path_id),
            description=record.get("description"),
            icon=record.get("icon"),
            categories=list(record.get("categories") or []),
        )
