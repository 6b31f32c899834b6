"""Previous/next browsing and related-term resolution."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from glossary_editor.models import TermModel
from glossary_editor.query import TermQuery, filter_terms


@dataclass(frozen=True, slots=True)
class Neighbors:
    """Terms adjacent to a focused term in the current list."""

    previous: TermModel | None
    next: TermModel | None
    position: int | None
    total: int


@dataclass(frozen=True, slots=True)
class RelatedLink:
    """A related-term name and the term it resolves to, if any."""

    name: str
    target: TermModel | None

    @property
    def is_link(self) -> bool:
        return self.target is not None


def find_neighbors(sequence: Sequence[TermModel], term_id: int) -> Neighbors:
    """Locate ``term_id`` in an ordered sequence and return its neighbours.

    A term outside the sequence (reached through a related-term link, say)
    has no neighbours.
    """
    index = next((i for i, t in enumerate(sequence) if t.id == term_id), None)
    if index is None:
        return Neighbors(previous=None, next=None, position=None, total=len(sequence))
    return Neighbors(
        previous=sequence[index - 1] if index > 0 else None,
        next=sequence[index + 1] if index < len(sequence) - 1 else None,
        position=index,
        total=len(sequence),
    )


def neighbors_for(
    terms: Iterable[TermModel],
    query: TermQuery,
    term_id: int,
) -> Neighbors:
    """Rebuild the list for ``query`` and find the neighbours of ``term_id``."""
    return find_neighbors(filter_terms(terms, query), term_id)


def resolve_related(terms: Iterable[TermModel], name: str) -> TermModel | None:
    """Find the term whose name is exactly ``name``."""
    return next((t for t in terms if t.term == name), None)


def related_links(term: TermModel, terms: Iterable[TermModel]) -> list[RelatedLink]:
    by_name: dict[str, TermModel] = {}
    for t in terms:
        by_name.setdefault(t.term, t)
    return [RelatedLink(name=name, target=by_name.get(name)) for name in term.related]
