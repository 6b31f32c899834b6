"""GlossaryEditor: main entry point for the glossary-editor library."""

from __future__ import annotations

import functools
import logging
import sqlite3
import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from glossary_editor import db as _db
from glossary_editor.duplicates import DuplicateReport, analyze_records
from glossary_editor.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ExportError,
    ValidationError,
)
from glossary_editor.models import (
    CategoryModel,
    LearningPathModel,
    LearningPathProgress,
    TermModel,
    ValidationResult,
)
from glossary_editor.navigation import Neighbors, RelatedLink
from glossary_editor.query import TermQuery
from glossary_editor.validator import check_term_fields

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])

# Sentinel for "no change" in update methods
_UNSET: Any = type("_UNSET", (), {"__repr__": lambda self: "..."})()


def _modifies_db(method: _F) -> _F:
    """Decorator: wraps mutation methods in a transaction (unless in batch).

    Outside a batch, a successful mutation is followed by an automatic save
    when the editor has a persistence directory.
    """

    @functools.wraps(method)
    def wrapper(self: GlossaryEditor, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            if self._in_batch:
                return method(self, *args, **kwargs)
            with self._conn:
                result = method(self, *args, **kwargs)
            self._persist()
            return result

    return wrapper  # type: ignore[return-value]


class GlossaryEditor:
    """Owns the glossary's categories, terms and learning paths.

    All reads and writes go through one sqlite connection guarded by a
    re-entrant lock, so callers on different threads always see whole
    records. Returned models are immutable snapshots.

    Args:
        db_path: sqlite database path, ``":memory:"`` by default.
        persist_dir: if given, the glossary is written there as JSON
            after every committed mutation.
        legacy_format: write files without ids (array position identity).
        enforce_categories: reject terms whose category does not exist.
    """

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        persist_dir: str | Path | None = None,
        legacy_format: bool = False,
        enforce_categories: bool = True,
    ) -> None:
        self._db_path = str(db_path)
        self._conn = _db.connect(db_path)
        _db.check_schema_version(self._conn)
        _db.init_db(self._conn)
        self._lock = threading.RLock()
        self._in_batch = False
        self._batch_depth = 0
        self._persist_dir = Path(persist_dir) if persist_dir is not None else None
        self._legacy_format = legacy_format
        self._enforce_categories = enforce_categories

    @property
    def enforce_categories(self) -> bool:
        """Whether writes reject terms in unknown categories."""
        return self._enforce_categories

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> GlossaryEditor:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Batch context manager
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Group multiple mutations into a single transaction and save."""
        with self._lock:
            self._batch_depth += 1
            if self._batch_depth == 1:
                self._in_batch = True
                self._conn.execute("BEGIN")
            try:
                yield
            except BaseException:
                if self._batch_depth == 1:
                    self._conn.rollback()
                    self._in_batch = False
                self._batch_depth -= 1
                raise
            else:
                self._batch_depth -= 1
                if self._batch_depth == 0:
                    self._conn.commit()
                    self._in_batch = False
                    self._persist()

    def _persist(self) -> None:
        if self._persist_dir is None:
            return
        from glossary_editor.exporter import export_to_json
        try:
            export_to_json(self._conn, self._persist_dir, legacy=self._legacy_format)
        except ExportError:
            logger.exception(
                "Automatic save to %s failed; changes kept in memory",
                self._persist_dir,
            )

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    @_modifies_db
    def create_category(
        self,
        name: str,
        description: str = "",
        *,
        icon: str | None = None,
    ) -> CategoryModel:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Category name must be a non-empty string")
        try:
            category_id = _db.insert_category(self._conn, name, description, icon)
        except sqlite3.IntegrityError as e:
            raise DuplicateEntityError(f"Category already exists: {name!r}") from e
        logger.debug("Created category %r (id=%d)", name, category_id)
        return CategoryModel(id=category_id, name=name, description=description, icon=icon)

    @_modifies_db
    def update_category(
        self,
        name: str,
        *,
        description: Any = _UNSET,
        icon: Any = _UNSET,
    ) -> CategoryModel:
        if _db.get_category_row(self._conn, name) is None:
            raise EntityNotFoundError(f"Category not found: {name!r}")

        updates: dict[str, Any] = {}
        if description is not _UNSET:
            updates["description"] = description or ""
        if icon is not _UNSET:
            updates["icon"] = icon
        _db.update_category_columns(self._conn, name, updates)
        return _db.row_to_category(_db.get_category_row(self._conn, name))

    @_modifies_db
    def rename_category(self, old_name: str, new_name: str) -> CategoryModel:
        """Rename a category and move all of its terms to the new name."""
        if not isinstance(new_name, str) or not new_name.strip():
            raise ValidationError("Category name must be a non-empty string")
        if _db.get_category_row(self._conn, old_name) is None:
            raise EntityNotFoundError(f"Category not found: {old_name!r}")
        if new_name != old_name:
            if _db.get_category_row(self._conn, new_name) is not None:
                raise DuplicateEntityError(f"Category already exists: {new_name!r}")
            moved = _db.rename_category_rows(self._conn, old_name, new_name)
            logger.info(
                "Renamed category %r to %r (%d terms updated)", old_name, new_name, moved
            )
        return _db.row_to_category(_db.get_category_row(self._conn, new_name))

    def get_category(self, name: str) -> CategoryModel | None:
        with self._lock:
            row = _db.get_category_row(self._conn, name)
            return _db.row_to_category(row) if row is not None else None

    def list_categories(self) -> list[CategoryModel]:
        with self._lock:
            return [_db.row_to_category(r) for r in _db.list_category_rows(self._conn)]

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    def _check_category(self, category: str) -> None:
        if self._enforce_categories and _db.get_category_row(self._conn, category) is None:
            raise ValidationError(f"Unknown category: {category!r}")

    @_modifies_db
    def create_term(
        self,
        term: str,
        category: str,
        definition: str,
        *,
        aliases: list[str] | None = None,
        related: list[str] | None = None,
        tags: list[str] | None = None,
        references: list[str] | None = None,
        learningpaths: dict[str, int] | None = None,
    ) -> TermModel:
        """Add a term and return the stored record with its new id."""
        fields = check_term_fields({
            "term": term,
            "category": category,
            "definition": definition,
            "aliases": aliases,
            "related": related,
            "tags": tags,
            "references": references,
            "learningpaths": learningpaths,
        })
        self._check_category(fields["category"])
        term_id = _db.insert_term(self._conn, fields)
        logger.debug("Created term %r (id=%d)", term, term_id)
        return _db.row_to_term(_db.get_term_row(self._conn, term_id))

    @_modifies_db
    def update_term(self, term_id: int, **fields: Any) -> TermModel:
        """Replace the supplied fields of a term; others are left alone.

        List fields are replaced wholesale, not merged.
        """
        if _db.get_term_row(self._conn, term_id) is None:
            raise EntityNotFoundError(f"Term not found: {term_id!r}")
        updates = check_term_fields(fields, partial=True)
        if "category" in updates:
            self._check_category(updates["category"])
        _db.update_term_columns(self._conn, term_id, updates)
        return _db.row_to_term(_db.get_term_row(self._conn, term_id))

    @_modifies_db
    def delete_term(self, term_id: int) -> bool:
        """Delete a term; ``False`` if there was nothing to delete."""
        deleted = _db.delete_term_row(self._conn, term_id)
        if deleted:
            logger.debug("Deleted term id=%d", term_id)
        return deleted

    def get_term(self, term_id: int) -> TermModel | None:
        with self._lock:
            row = _db.get_term_row(self._conn, term_id)
            return _db.row_to_term(row) if row is not None else None

    def list_terms(self) -> list[TermModel]:
        """All terms in insertion order."""
        with self._lock:
            return [_db.row_to_term(r) for r in _db.list_term_rows(self._conn)]

    def list_terms_by_category(self, category: str) -> list[TermModel]:
        with self._lock:
            return [
                _db.row_to_term(r)
                for r in _db.list_term_rows(self._conn, category=category)
            ]

    # ------------------------------------------------------------------
    # Learning paths
    # ------------------------------------------------------------------

    @_modifies_db
    def create_learning_path(
        self,
        path_id: str,
        name: str,
        *,
        categories: list[str] | tuple[str, ...] = (),
        description: str | None = None,
        icon: str | None = None,
    ) -> LearningPathModel:
        if not isinstance(path_id, str) or not path_id.strip():
            raise ValidationError("Learning path id must be a non-empty string")
        for category in categories:
            self._check_category(category)
        try:
            _db.insert_learning_path(
                self._conn, path_id, name,
                description=description, icon=icon, categories=categories,
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateEntityError(
                f"Learning path already exists: {path_id!r}"
            ) from e
        return LearningPathModel(
            id=path_id, name=name, description=description,
            icon=icon, categories=tuple(categories),
        )

    def get_learning_path(self, path_id: str) -> LearningPathModel | None:
        with self._lock:
            row = _db.get_learning_path_row(self._conn, path_id)
            return _db.row_to_learning_path(row) if row is not None else None

    def list_learning_paths(self) -> list[LearningPathModel]:
        with self._lock:
            return [
                _db.row_to_learning_path(r)
                for r in _db.list_learning_path_rows(self._conn)
            ]

    # ------------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------------

    def find_terms(
        self,
        category: str | None = None,
        search: str | None = None,
        learning_path: str | None = None,
    ) -> list[TermModel]:
        """Filtered terms in canonical list order."""
        from glossary_editor.query import filter_terms
        query = TermQuery(category=category, search=search, learning_path=learning_path)
        return filter_terms(self.list_terms(), query)

    def get_neighbors(
        self,
        term_id: int,
        query: TermQuery | None = None,
    ) -> Neighbors:
        """Previous and next terms around ``term_id`` in the list for ``query``."""
        from glossary_editor.navigation import neighbors_for
        return neighbors_for(self.list_terms(), query or TermQuery(), term_id)

    def resolve_related(self, name: str) -> TermModel | None:
        from glossary_editor.navigation import resolve_related
        return resolve_related(self.list_terms(), name)

    def related_links(self, term_id: int) -> list[RelatedLink]:
        from glossary_editor.navigation import related_links
        terms = self.list_terms()
        term = next((t for t in terms if t.id == term_id), None)
        if term is None:
            return []
        return related_links(term, terms)

    def category_counts(self) -> dict[str, int]:
        from glossary_editor.query import category_counts
        return category_counts(self.list_terms())

    def learning_path_progress(self, path_id: str) -> LearningPathProgress:
        from glossary_editor.query import learning_path_progress
        return learning_path_progress(self.list_terms(), path_id)

    # ------------------------------------------------------------------
    # Validation and reports
    # ------------------------------------------------------------------

    def validate(self) -> list[ValidationResult]:
        from glossary_editor.validator import validate_all
        with self._lock:
            return validate_all(
                self.list_categories(),
                self.list_terms(),
                self.list_learning_paths(),
            )

    def validate_term(self, term_id: int) -> list[ValidationResult]:
        from glossary_editor.validator import validate_term
        with self._lock:
            term = self.get_term(term_id)
            if term is None:
                raise EntityNotFoundError(f"Term not found: {term_id!r}")
            return validate_term(
                term,
                self.list_categories(),
                self.list_terms(),
                self.list_learning_paths(),
            )

    def undefined_related_terms(self) -> list[str]:
        from glossary_editor.reports import undefined_related
        return undefined_related(self.list_terms())

    def find_duplicates(self) -> DuplicateReport:
        """Run the duplicate analysis over the stored terms."""
        return analyze_records(
            [t.to_dict() for t in self.list_terms()], source="store"
        )

    # ------------------------------------------------------------------
    # Import/Export
    # ------------------------------------------------------------------

    @classmethod
    def from_json(
        cls,
        data_dir: str | Path,
        db_path: str | Path = ":memory:",
        **options: Any,
    ) -> GlossaryEditor:
        """Create an editor loaded from a glossary directory."""
        from glossary_editor.importer import import_from_json

        editor = cls(db_path, **options)
        try:
            with editor._lock, editor._conn:
                import_from_json(editor._conn, data_dir)
        except BaseException:
            editor.close()
            raise
        return editor

    @_modifies_db
    def import_json(self, data_dir: str | Path) -> None:
        from glossary_editor.importer import import_from_json
        import_from_json(self._conn, data_dir)

    def export_json(
        self,
        destination: str | Path | None = None,
        *,
        legacy: bool | None = None,
    ) -> None:
        """Write the glossary as JSON files.

        Defaults to the persistence directory and format the editor was
        created with.
        """
        from glossary_editor.exporter import export_to_json

        target = destination if destination is not None else self._persist_dir
        if target is None:
            raise ExportError("No export destination given")
        with self._lock:
            export_to_json(
                self._conn, target,
                legacy=self._legacy_format if legacy is None else legacy,
            )
