"""
Validation for batch change requests.

Provides both schema validation (required fields, types) and
referential validation against an editor (term ids exist, categories
exist or are created earlier in the same request, when the editor
enforces categories).
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple

from ..duplicates import normalize_name
from .schema import (
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    TERM_LIST_FIELDS,
    Change,
    ChangeRequest,
    OperationType,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)

if TYPE_CHECKING:
    from ..editor import GlossaryEditor

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("term", "category", "definition", "name", "new_name", "description", "icon")


class _ReferenceState:
    """What the glossary will look like as the request is applied in order."""

    def __init__(self, editor: "GlossaryEditor"):
        self.categories: Set[str] = {c.name for c in editor.list_categories()}
        terms = editor.list_terms()
        self.term_ids: Set[int] = {t.id for t in terms}
        self.term_names: Set[str] = {normalize_name(t.term) for t in terms}
        self.enforce_categories = editor.enforce_categories


def validate_change_request(
    request: ChangeRequest,
    editor: Optional["GlossaryEditor"] = None,
) -> ValidationResult:
    """Validate a change request.

    Args:
        request: The change request to validate
        editor: If given, also check that referenced terms and
            categories exist in it

    Returns:
        ValidationResult with errors and warnings
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    state = _ReferenceState(editor) if editor is not None else None

    for i, change in enumerate(request.changes):
        change_errors, change_warnings = _validate_change(change, i, state)
        errors.extend(change_errors)
        warnings.extend(change_warnings)

    logger.debug(
        "Validated %d changes: %d errors, %d warnings",
        len(request.changes), len(errors), len(warnings),
    )
    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _error(change: Change, index: int, field: str, message: str) -> ValidationError:
    return ValidationError(
        index=index,
        operation=change.operation,
        field=field,
        message=message,
        line_number=change.line_number,
    )


def _warning(change: Change, index: int, message: str) -> ValidationWarning:
    return ValidationWarning(
        index=index,
        operation=change.operation,
        message=message,
        line_number=change.line_number,
    )


def _validate_change(
    change: Change,
    index: int,
    state: Optional[_ReferenceState],
) -> Tuple[List[ValidationError], List[ValidationWarning]]:
    """Validate a single change operation.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []

    # Validate operation type
    valid_operations = {op.value for op in OperationType}
    if change.operation not in valid_operations:
        errors.append(_error(
            change, index, "operation",
            f"Unknown operation '{change.operation}'. "
            f"Valid: {', '.join(sorted(valid_operations))}",
        ))
        return errors, warnings

    # Validate required and allowed fields
    required = REQUIRED_FIELDS[change.operation]
    allowed = set(required) | set(OPTIONAL_FIELDS[change.operation])
    for field in required:
        if change.params.get(field) is None:
            errors.append(_error(change, index, field, f"Missing required field '{field}'"))
    for field in sorted(set(change.params) - allowed):
        errors.append(_error(change, index, field, f"Unknown field '{field}'"))

    errors.extend(_validate_types(change, index))
    if errors or state is None:
        return errors, warnings

    ref_errors, ref_warnings = _validate_references(change, index, state)
    errors.extend(ref_errors)
    warnings.extend(ref_warnings)
    return errors, warnings


def _validate_types(change: Change, index: int) -> List[ValidationError]:
    errors: List[ValidationError] = []
    params = change.params

    for field in _TEXT_FIELDS:
        value = params.get(field)
        if value is None:
            continue
        if not isinstance(value, str):
            errors.append(_error(change, index, field, f"Field '{field}' must be a string"))
        elif not value.strip() and field not in ("description", "icon"):
            errors.append(_error(change, index, field, f"Field '{field}' cannot be empty"))

    for field in TERM_LIST_FIELDS:
        value = params.get(field)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            errors.append(_error(
                change, index, field, f"Field '{field}' must be a list of strings"
            ))

    paths = params.get("learningpaths")
    if paths is not None and not _is_position_map(paths):
        errors.append(_error(
            change, index, "learningpaths",
            "Field 'learningpaths' must map path ids to integer positions",
        ))

    term_id = params.get("id")
    if term_id is not None and (isinstance(term_id, bool) or not isinstance(term_id, int)):
        errors.append(_error(change, index, "id", "Field 'id' must be an integer"))

    return errors


def _is_position_map(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    return all(
        isinstance(k, str) and isinstance(v, int) and not isinstance(v, bool)
        for k, v in value.items()
    )


def _validate_references(
    change: Change,
    index: int,
    state: _ReferenceState,
) -> Tuple[List[ValidationError], List[ValidationWarning]]:
    """Check a change against the running reference state, then apply it."""
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    op = change.operation
    params: Dict[str, Any] = change.params

    category = params.get("category")
    if category is not None and op in (
        OperationType.CREATE_TERM.value,
        OperationType.UPDATE_TERM.value,
    ) and state.enforce_categories and category not in state.categories:
        errors.append(_error(change, index, "category", f"Category not found: '{category}'"))

    if op == OperationType.CREATE_TERM.value:
        key = normalize_name(params["term"])
        if key in state.term_names:
            warnings.append(_warning(
                change, index, f"A term named '{params['term']}' already exists"
            ))
        state.term_names.add(key)

    elif op in (OperationType.UPDATE_TERM.value, OperationType.DELETE_TERM.value):
        if params["id"] not in state.term_ids:
            errors.append(_error(change, index, "id", f"Term not found: {params['id']}"))
        elif op == OperationType.DELETE_TERM.value:
            state.term_ids.discard(params["id"])

    elif op == OperationType.CREATE_CATEGORY.value:
        if params["name"] in state.categories:
            errors.append(_error(
                change, index, "name", f"Category already exists: '{params['name']}'"
            ))
        state.categories.add(params["name"])

    elif op == OperationType.UPDATE_CATEGORY.value:
        if params["name"] not in state.categories:
            errors.append(_error(change, index, "name", f"Category not found: '{params['name']}'"))

    elif op == OperationType.RENAME_CATEGORY.value:
        old, new = params["name"], params["new_name"]
        if old not in state.categories:
            errors.append(_error(change, index, "name", f"Category not found: '{old}'"))
        elif new != old and new in state.categories:
            errors.append(_error(change, index, "new_name", f"Category already exists: '{new}'"))
        else:
            state.categories.discard(old)
            state.categories.add(new)

    return errors, warnings
