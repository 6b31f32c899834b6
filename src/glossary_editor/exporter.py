"""Export pipeline for glossary-editor."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from pathlib import Path
from typing import Any

from glossary_editor import db as _db
from glossary_editor.exceptions import ExportError
from glossary_editor.importer import CATEGORIES_FILE, LEARNING_PATHS_FILE, TERMS_FILE

logger = logging.getLogger(__name__)


def export_to_json(
    conn: sqlite3.Connection,
    destination: str | Path,
    *,
    legacy: bool = False,
) -> None:
    """Write the glossary directory layout to ``destination``.

    By default every category and term record carries its ``id``. With
    ``legacy=True`` ids are omitted and readers fall back to array
    positions.
    """
    destination = Path(destination)
    categories = [_db.row_to_category(r) for r in _db.list_category_rows(conn)]
    terms = [_db.row_to_term(r) for r in _db.list_term_rows(conn)]
    paths = [_db.row_to_learning_path(r) for r in _db.list_learning_path_rows(conn)]

    if legacy:
        _warn_id_loss("category", [c.id for c in categories])
        _warn_id_loss("term", [t.id for t in terms])

    include_id = not legacy
    try:
        destination.mkdir(parents=True, exist_ok=True)
        _write_atomic(
            destination / CATEGORIES_FILE,
            [c.to_dict(include_id=include_id) for c in categories],
        )
        _write_atomic(
            destination / TERMS_FILE,
            [t.to_dict(include_id=include_id) for t in terms],
        )
        if paths:
            _write_atomic(
                destination / LEARNING_PATHS_FILE,
                [p.to_dict() for p in paths],
            )
    except OSError as e:
        raise ExportError(f"Failed to write glossary to {destination}: {e}") from e

    logger.debug(
        "Exported %d categories, %d terms to %s", len(categories), len(terms), destination
    )


def _write_atomic(path: Path, data: list[dict[str, Any]]) -> None:
    """Write JSON next to ``path`` and rename it into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _warn_id_loss(kind: str, ids: list[int]) -> None:
    """Log when position-based ids will differ from the stored ones."""
    if ids != list(range(1, len(ids) + 1)):
        logger.warning(
            "Legacy export: %s ids are not contiguous from 1; "
            "they will be renumbered by position when read back",
            kind,
        )
