"""
Data classes and constants for the batch change request system.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


# =============================================================================
# Operation Types
# =============================================================================

class OperationType(str, Enum):
    """Supported batch operations."""
    CREATE_TERM = "create_term"
    UPDATE_TERM = "update_term"
    DELETE_TERM = "delete_term"
    CREATE_CATEGORY = "create_category"
    UPDATE_CATEGORY = "update_category"
    RENAME_CATEGORY = "rename_category"


# =============================================================================
# Field Requirements
# =============================================================================

TERM_LIST_FIELDS = ["aliases", "related", "tags", "references"]

# Required fields for each operation
REQUIRED_FIELDS: Dict[str, List[str]] = {
    OperationType.CREATE_TERM.value: ["term", "category", "definition"],
    OperationType.UPDATE_TERM.value: ["id"],
    OperationType.DELETE_TERM.value: ["id"],
    OperationType.CREATE_CATEGORY.value: ["name"],
    OperationType.UPDATE_CATEGORY.value: ["name"],
    OperationType.RENAME_CATEGORY.value: ["name", "new_name"],
}

# Optional fields for each operation
OPTIONAL_FIELDS: Dict[str, List[str]] = {
    OperationType.CREATE_TERM.value: TERM_LIST_FIELDS + ["learningpaths"],
    OperationType.UPDATE_TERM.value: (
        ["term", "category", "definition"] + TERM_LIST_FIELDS + ["learningpaths"]
    ),
    OperationType.DELETE_TERM.value: [],
    OperationType.CREATE_CATEGORY.value: ["description", "icon"],
    OperationType.UPDATE_CATEGORY.value: ["description", "icon"],
    OperationType.RENAME_CATEGORY.value: [],
}


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Change:
    """Single change operation."""
    operation: str
    params: Dict[str, Any]
    line_number: Optional[int] = None

    @property
    def term_id(self) -> Optional[int]:
        """Get the target term id if present in params."""
        return self.params.get("id")

    @property
    def category(self) -> Optional[str]:
        """Get the category a change refers to, if any."""
        if self.operation in (
            OperationType.CREATE_CATEGORY.value,
            OperationType.UPDATE_CATEGORY.value,
            OperationType.RENAME_CATEGORY.value,
        ):
            return self.params.get("name")
        return self.params.get("category")


@dataclass
class ChangeRequest:
    """Parsed change request."""
    changes: List[Change]
    session_name: Optional[str] = None
    session_description: Optional[str] = None
    source_file: Optional[Path] = None


@dataclass
class ValidationError:
    """Validation error for a specific change."""
    index: int
    operation: str
    field: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationWarning:
    """Validation warning for a specific change."""
    index: int
    operation: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationResult:
    """Result of validating a change request."""
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


@dataclass
class ChangeResult:
    """Result of executing a single change."""
    index: int
    operation: str
    success: bool
    message: str
    target: Optional[str] = None
    created_id: Optional[int] = None
    error: Optional[str] = None


@dataclass
class BatchResult:
    """Result of executing a batch change request."""
    total_count: int
    success_count: int
    failure_count: int
    changes: List[ChangeResult]
    duration_seconds: float
    dry_run: bool = False

    @property
    def skipped_count(self) -> int:
        return self.total_count - self.success_count - self.failure_count
