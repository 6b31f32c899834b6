"""Validation engine for glossary-editor."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import Any

from glossary_editor.duplicates import normalize_name
from glossary_editor.exceptions import ValidationError
from glossary_editor.models import (
    CategoryModel,
    LearningPathModel,
    TermModel,
    ValidationResult,
)

TEXT_FIELDS = ("term", "category", "definition")
LIST_FIELDS = ("aliases", "related", "tags", "references")
TERM_FIELDS = frozenset((*TEXT_FIELDS, *LIST_FIELDS, "learningpaths"))


# ------------------------------------------------------------------
# Write-time input checks
# ------------------------------------------------------------------

def check_term_fields(
    fields: dict[str, Any],
    *,
    partial: bool = False,
) -> dict[str, Any]:
    """Check term input and return it normalized.

    List fields come back as lists (``None`` becomes ``[]``) and
    ``learningpaths`` as a dict. Raises :class:`ValidationError` on the
    first problem found.
    """
    unknown = set(fields) - TERM_FIELDS
    if unknown:
        raise ValidationError(f"Unknown term field(s): {', '.join(sorted(unknown))}")

    if not partial:
        for name in TEXT_FIELDS:
            if name not in fields:
                raise ValidationError(f"Missing required field: {name!r}")

    normalized: dict[str, Any] = {}
    for name, value in fields.items():
        if name in TEXT_FIELDS:
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Field {name!r} must be a non-empty string")
            normalized[name] = value
        elif name in LIST_FIELDS:
            normalized[name] = _check_string_list(name, value)
        else:
            normalized[name] = _check_learningpaths(value)
    return normalized


def _check_string_list(name: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValidationError(f"Field {name!r} must be a list of strings")
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(
                f"Field {name!r} must be a list of strings, got item {item!r}"
            )
    return list(value)


def _check_learningpaths(value: Any) -> dict[str, int]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError("Field 'learningpaths' must be a mapping")
    for key, position in value.items():
        if not isinstance(key, str) or not key:
            raise ValidationError(f"Learning path id must be a non-empty string: {key!r}")
        if isinstance(position, bool) or not isinstance(position, int):
            raise ValidationError(
                f"Learning path position for {key!r} must be an integer"
            )
    return dict(value)


# ------------------------------------------------------------------
# Whole-glossary rules
# ------------------------------------------------------------------

def validate_all(
    categories: Sequence[CategoryModel],
    terms: Sequence[TermModel],
    learning_paths: Sequence[LearningPathModel] = (),
) -> list[ValidationResult]:
    """Run all validation rules."""
    results: list[ValidationResult] = []
    category_names = {c.name for c in categories}
    term_names = {t.term for t in terms}
    path_ids = {p.id for p in learning_paths}

    for term in terms:
        results.extend(_term_rules(term, category_names, term_names, path_ids))
    results.extend(_val_trm_005(terms))
    results.extend(_val_cat_001(categories, terms))
    results.extend(_val_lpt_001(learning_paths, terms))
    return results


def validate_term(
    term: TermModel,
    categories: Sequence[CategoryModel],
    terms: Sequence[TermModel],
    learning_paths: Sequence[LearningPathModel] = (),
) -> list[ValidationResult]:
    """Validate a specific term against the rest of the glossary."""
    results = _term_rules(
        term,
        {c.name for c in categories},
        {t.term for t in terms},
        {p.id for p in learning_paths},
    )
    key = normalize_name(term.term)
    clashes = [t.id for t in terms if t.id != term.id and normalize_name(t.term) == key]
    if clashes:
        results.append(_result(
            "VAL-TRM-005", "WARNING", term,
            f"Term name duplicates term(s) {clashes}",
            {"duplicates": clashes},
        ))
    return results


def _result(
    rule_id: str,
    severity: str,
    term: TermModel,
    message: str,
    details: dict[str, Any] | None = None,
) -> ValidationResult:
    return ValidationResult(
        rule_id=rule_id,
        severity=severity,
        entity_type="term",
        entity_id=str(term.id),
        message=message,
        details=details,
    )


def _term_rules(
    term: TermModel,
    category_names: set[str],
    term_names: set[str],
    path_ids: set[str],
) -> list[ValidationResult]:
    results: list[ValidationResult] = []

    # VAL-TRM-001 / 002: blank text (only reachable through imported data)
    if not term.term.strip():
        results.append(_result("VAL-TRM-001", "ERROR", term, "Term name is blank"))
    if not term.definition.strip():
        results.append(_result("VAL-TRM-002", "ERROR", term, "Definition is blank"))

    # VAL-TRM-003: unknown category
    if term.category not in category_names:
        results.append(_result(
            "VAL-TRM-003", "WARNING", term,
            f"Category not defined: {term.category!r}",
            {"category": term.category},
        ))

    # VAL-TRM-004: dangling related names
    missing = [name for name in term.related if name not in term_names]
    if missing:
        results.append(_result(
            "VAL-TRM-004", "WARNING", term,
            f"Related term(s) not defined: {', '.join(missing)}",
            {"related": missing},
        ))

    # VAL-TRM-006: unknown learning path ids
    if path_ids:
        unknown_paths = [p for p in term.learningpaths if p not in path_ids]
        if unknown_paths:
            results.append(_result(
                "VAL-TRM-006", "WARNING", term,
                f"Learning path(s) not defined: {', '.join(unknown_paths)}",
                {"learningpaths": unknown_paths},
            ))

    # VAL-TRM-007: references that are not web links
    bad_refs = [r for r in term.references if not r.startswith(("http://", "https://"))]
    if bad_refs:
        results.append(_result(
            "VAL-TRM-007", "WARNING", term,
            f"Reference(s) are not http(s) URLs: {', '.join(bad_refs)}",
            {"references": bad_refs},
        ))

    return results


def _val_trm_005(terms: Sequence[TermModel]) -> list[ValidationResult]:
    """Terms sharing a normalized name."""
    groups: dict[str, list[TermModel]] = defaultdict(list)
    for term in terms:
        groups[normalize_name(term.term)].append(term)

    results = []
    for members in groups.values():
        if len(members) < 2:
            continue
        ids = [t.id for t in members]
        for term in members:
            others = [i for i in ids if i != term.id]
            results.append(_result(
                "VAL-TRM-005", "WARNING", term,
                f"Term name duplicates term(s) {others}",
                {"duplicates": others},
            ))
    return results


def _val_cat_001(
    categories: Sequence[CategoryModel],
    terms: Sequence[TermModel],
) -> list[ValidationResult]:
    used = {t.category for t in terms}
    return [
        ValidationResult(
            rule_id="VAL-CAT-001",
            severity="WARNING",
            entity_type="category",
            entity_id=c.name,
            message="Category has no terms",
            details=None,
        )
        for c in categories
        if c.name not in used
    ]


def _val_lpt_001(
    learning_paths: Sequence[LearningPathModel],
    terms: Sequence[TermModel],
) -> list[ValidationResult]:
    used = {p for t in terms for p in t.learningpaths}
    return [
        ValidationResult(
            rule_id="VAL-LPT-001",
            severity="WARNING",
            entity_type="learning_path",
            entity_id=p.id,
            message="Learning path has no terms",
            details=None,
        )
        for p in learning_paths
        if p.id not in used
    ]
