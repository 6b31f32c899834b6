"""Filtering, search and ordering over glossary terms.

Everything here is a pure function of the terms passed in: nothing touches
the store, nothing raises for "no results". The ordering produced by
:func:`sort_terms` is the canonical list order that navigation relies on.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, replace

from glossary_editor.models import UNORDERED, LearningPathProgress, TermModel

# Category value that disables category filtering.
ALL_CATEGORIES = "all"


@dataclass(frozen=True, slots=True)
class TermQuery:
    """A browse request: optional category, search text and learning path.

    Active filters combine with AND. The ``select_*`` helpers model the
    browsing rules: picking a category drops the learning path and the
    search text, picking a learning path drops the category.
    """

    category: str | None = None
    search: str | None = None
    learning_path: str | None = None

    def select_category(self, category: str | None) -> TermQuery:
        return replace(self, category=category, learning_path=None, search=None)

    def select_learning_path(self, path_id: str | None) -> TermQuery:
        return replace(self, learning_path=path_id, category=None)

    def with_search(self, search: str | None) -> TermQuery:
        return replace(self, search=search)

    @property
    def category_filter(self) -> str | None:
        if not self.category or self.category == ALL_CATEGORIES:
            return None
        return self.category


def matches_category(term: TermModel, category: str | None) -> bool:
    """Exact, case-sensitive category match; ``None``/``"all"`` match all."""
    if not category or category == ALL_CATEGORIES:
        return True
    return term.category == category


def search_fields(term: TermModel) -> list[str]:
    """The texts free-text search looks at, in order."""
    return [term.term, term.definition, *term.aliases, *term.tags]


def matches_search(term: TermModel, search: str | None) -> bool:
    """Case-insensitive substring match over name, definition, aliases, tags."""
    if not search:
        return True
    needle = search.lower()
    return any(needle in text.lower() for text in search_fields(term))


def in_learning_path(term: TermModel, path_id: str | None) -> bool:
    if path_id is None:
        return True
    return path_id in term.learningpaths


def path_position(term: TermModel, path_id: str) -> int:
    """Position of ``term`` in a path, clamped so all unordered values tie."""
    return min(term.learningpaths.get(path_id, UNORDERED), UNORDERED)


def _name_key(term: TermModel) -> str:
    return term.term.lower()


def sort_terms(
    terms: Iterable[TermModel],
    learning_path: str | None = None,
) -> list[TermModel]:
    """Return terms in canonical list order.

    Without a learning path: case-insensitive alphabetical by name.
    With one: ascending path position, then alphabetical. Python's sort is
    stable, so exact ties keep their incoming order.
    """
    if learning_path is None:
        return sorted(terms, key=_name_key)
    return sorted(
        terms,
        key=lambda t: (path_position(t, learning_path), _name_key(t)),
    )


def filter_terms(
    terms: Iterable[TermModel],
    query: TermQuery | None = None,
) -> list[TermModel]:
    """Apply a :class:`TermQuery` and return the ordered result list."""
    query = query or TermQuery()
    category = query.category_filter
    selected = [
        t for t in terms
        if matches_category(t, category)
        and in_learning_path(t, query.learning_path)
        and matches_search(t, query.search)
    ]
    return sort_terms(selected, query.learning_path)


def category_counts(terms: Iterable[TermModel]) -> dict[str, int]:
    """Number of terms per category name."""
    return dict(Counter(t.category for t in terms))


def learning_path_progress(
    terms: Iterable[TermModel],
    path_id: str,
) -> LearningPathProgress:
    """Count the terms on a path, split into ordered and unordered."""
    positions = [t.learningpaths[path_id] for t in terms if path_id in t.learningpaths]
    ordered = sum(1 for p in positions if p < UNORDERED)
    return LearningPathProgress(
        total=len(positions),
        ordered=ordered,
        unordered=len(positions) - ordered,
    )
