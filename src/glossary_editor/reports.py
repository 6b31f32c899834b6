"""Name-level reports over raw term records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from glossary_editor.models import TermModel

Record = Mapping[str, Any] | TermModel


def _as_dict(record: Record) -> Mapping[str, Any]:
    if isinstance(record, TermModel):
        return record.to_dict()
    return record


def defined_term_names(records: Iterable[Record]) -> list[str]:
    """Sorted, unique names of the defined terms."""
    names = set()
    for record in map(_as_dict, records):
        name = record.get("term")
        if isinstance(name, str):
            names.add(name)
    return sorted(names)


def undefined_related(records: Iterable[Record]) -> list[str]:
    """Names referenced in some ``related`` list that no term defines.

    Matching is exact (case-sensitive, no trimming). The result is sorted.
    """
    records = [_as_dict(r) for r in records]
    defined = set(defined_term_names(records))
    referenced = set()
    for record in records:
        for name in record.get("related") or ():
            if isinstance(name, str):
                referenced.add(name)
    return sorted(referenced - defined)


def format_name_listing(title: str, names: list[str]) -> str:
    lines = [f"{title} ({len(names)})"]
    lines.extend(f"  {name}" for name in names)
    return "\n".join(lines)
