"""
Executor for batch change requests.

Applies changes to a glossary through :class:`GlossaryEditor`. All changes
run in one editor batch, so they are saved together; a change that fails
is reported and the rest still apply.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, List

from .schema import (
    BatchResult,
    Change,
    ChangeRequest,
    ChangeResult,
    OperationType,
)

if TYPE_CHECKING:
    from ..editor import GlossaryEditor

logger = logging.getLogger(__name__)


def execute_change_request(
    request: ChangeRequest,
    editor: "GlossaryEditor",
    dry_run: bool = False,
) -> BatchResult:
    """Execute a batch change request.

    Args:
        request: The change request to execute
        editor: The glossary to modify
        dry_run: If True, only simulate execution without making changes

    Returns:
        BatchResult with details of each change
    """
    start_time = time.time()
    results: List[ChangeResult] = []

    if request.session_name:
        logger.info("Applying change request: %s", request.session_name)

    if dry_run:
        results = [_dry_run_change(c, i) for i, c in enumerate(request.changes)]
    else:
        with editor.batch():
            for i, change in enumerate(request.changes):
                results.append(_execute_change(change, i, editor))

    # Calculate totals
    success_count = sum(1 for r in results if r.success)
    failure_count = sum(1 for r in results if not r.success)
    duration = time.time() - start_time

    return BatchResult(
        total_count=len(results),
        success_count=success_count,
        failure_count=failure_count,
        changes=results,
        duration_seconds=duration,
        dry_run=dry_run,
    )


def _execute_change(
    change: Change,
    index: int,
    editor: "GlossaryEditor",
) -> ChangeResult:
    """Execute a single change operation.

    Returns:
        ChangeResult with success/failure status
    """
    op = change.operation

    try:
        if op == OperationType.CREATE_TERM.value:
            return _exec_create_term(change, index, editor)

        elif op == OperationType.UPDATE_TERM.value:
            return _exec_update_term(change, index, editor)

        elif op == OperationType.DELETE_TERM.value:
            return _exec_delete_term(change, index, editor)

        elif op == OperationType.CREATE_CATEGORY.value:
            return _exec_create_category(change, index, editor)

        elif op == OperationType.UPDATE_CATEGORY.value:
            return _exec_update_category(change, index, editor)

        elif op == OperationType.RENAME_CATEGORY.value:
            return _exec_rename_category(change, index, editor)

        else:
            return ChangeResult(
                index=index,
                operation=op,
                success=False,
                message=f"Unknown operation: {op}",
                error=f"Unknown operation: {op}",
            )

    except Exception as e:
        logger.exception("Error executing change #%d (%s)", index + 1, op)
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=f"Error: {e}",
            error=str(e),
        )


def _dry_run_change(change: Change, index: int) -> ChangeResult:
    """Simulate a change without actually executing it."""
    op = change.operation
    if change.term_id is not None:
        target = f"term {change.term_id}"
    else:
        target = change.params.get("term") or change.category or "new entry"

    return ChangeResult(
        index=index,
        operation=op,
        success=True,
        message=f"Would execute {op}",
        target=str(target),
    )


def _exec_create_term(change: Change, index: int, editor: "GlossaryEditor") -> ChangeResult:
    params = dict(change.params)
    term = editor.create_term(
        params.pop("term"),
        params.pop("category"),
        params.pop("definition"),
        **params,
    )
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Created term '{term.term}'",
        target=term.term,
        created_id=term.id,
    )


def _exec_update_term(change: Change, index: int, editor: "GlossaryEditor") -> ChangeResult:
    params = dict(change.params)
    term_id = params.pop("id")
    term = editor.update_term(term_id, **params)
    fields = ", ".join(sorted(params)) or "nothing"
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Updated {fields} on term '{term.term}'",
        target=f"term {term_id}",
    )


def _exec_delete_term(change: Change, index: int, editor: "GlossaryEditor") -> ChangeResult:
    term_id = change.params["id"]
    if not editor.delete_term(term_id):
        return ChangeResult(
            index=index,
            operation=change.operation,
            success=False,
            message=f"Term {term_id} not found",
            target=f"term {term_id}",
            error=f"Term {term_id} not found",
        )
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Deleted term {term_id}",
        target=f"term {term_id}",
    )


def _exec_create_category(
    change: Change, index: int, editor: "GlossaryEditor"
) -> ChangeResult:
    category = editor.create_category(
        change.params["name"],
        change.params.get("description") or "",
        icon=change.params.get("icon"),
    )
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Created category '{category.name}'",
        target=category.name,
        created_id=category.id,
    )


def _exec_update_category(
    change: Change, index: int, editor: "GlossaryEditor"
) -> ChangeResult:
    updates = {k: change.params[k] for k in ("description", "icon") if k in change.params}
    category = editor.update_category(change.params["name"], **updates)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Updated category '{category.name}'",
        target=category.name,
    )


def _exec_rename_category(
    change: Change, index: int, editor: "GlossaryEditor"
) -> ChangeResult:
    old_name = change.params["name"]
    category = editor.rename_category(old_name, change.params["new_name"])
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Renamed category '{old_name}' to '{category.name}'",
        target=category.name,
    )
