"""
YAML parser for batch change requests.

JSON is a subset of YAML, so ``.json`` change files load the same way.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..text import parse_list_input, parse_url_input
from .schema import TERM_LIST_FIELDS, Change, ChangeRequest


class ParseError(Exception):
    """Error parsing a change request file."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(message)


def load_change_request(
    source: Union[str, Path, Dict[str, Any]],
) -> ChangeRequest:
    """Load a change request from a YAML file, YAML string or dictionary.

    Args:
        source: Path to YAML file, YAML string, or parsed dictionary

    Returns:
        ChangeRequest object

    Raises:
        ParseError: If the file cannot be parsed or is invalid
        FileNotFoundError: If the file does not exist
    """
    source_path: Optional[Path] = None
    lines: List[Optional[int]] = []

    if isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or (isinstance(source, str) and _is_file_path(source)):
        source_path = Path(source)
        if not source_path.exists():
            raise FileNotFoundError(f"File not found: {source_path}")
        text = source_path.read_text(encoding="utf-8")
        data = _load_yaml_string(text, empty_message="Empty YAML file")
        lines = _change_lines(text)
    else:
        # Assume it's a YAML string
        data = _load_yaml_string(source)
        lines = _change_lines(source)

    return _parse_change_request(data, source_path, lines)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "\n" in s:
        return False
    if "/" in s or "\\" in s:
        return True
    if s.endswith((".yaml", ".yml", ".json")):
        return True
    return False


def _load_yaml_string(s: str, empty_message: str = "Empty YAML content") -> Dict[str, Any]:
    """Load YAML from a string."""
    try:
        data = yaml.safe_load(s)
    except yaml.YAMLError as e:
        line = getattr(e, "problem_mark", None)
        line_num = line.line + 1 if line else None
        raise ParseError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        raise ParseError(empty_message)
    if not isinstance(data, dict):
        raise ParseError("YAML root must be a mapping (dictionary)")

    return data


def _change_lines(text: str) -> List[Optional[int]]:
    """1-based line numbers of each item under the top-level 'changes' key."""
    root = yaml.compose(text, Loader=yaml.SafeLoader)
    if not isinstance(root, yaml.MappingNode):
        return []
    for key_node, value_node in root.value:
        if key_node.value == "changes" and isinstance(value_node, yaml.SequenceNode):
            return [item.start_mark.line + 1 for item in value_node.value]
    return []


def _parse_change_request(
    data: Dict[str, Any],
    source_path: Optional[Path] = None,
    lines: Optional[List[Optional[int]]] = None,
) -> ChangeRequest:
    """Parse a dictionary into a ChangeRequest object."""
    # Extract session info (optional)
    session = data.get("session") or {}
    if not isinstance(session, dict):
        raise ParseError("Field 'session' must be a mapping")

    session_name = session.get("name")
    session_description = session.get("description")

    # Extract changes (required)
    changes_data = data.get("changes")
    if changes_data is None:
        raise ParseError("Missing required field: 'changes'")
    if not isinstance(changes_data, list):
        raise ParseError("Field 'changes' must be a list")
    if len(changes_data) == 0:
        raise ParseError("Field 'changes' cannot be empty")

    changes = _parse_changes(changes_data, lines or [])

    return ChangeRequest(
        changes=changes,
        session_name=session_name,
        session_description=session_description,
        source_file=source_path,
    )


def _parse_changes(
    changes_data: List[Any],
    lines: List[Optional[int]],
) -> List[Change]:
    """Parse a list of change dictionaries into Change objects."""
    changes = []

    for i, change_data in enumerate(changes_data):
        line = lines[i] if i < len(lines) else None
        if not isinstance(change_data, dict):
            raise ParseError(
                f"Change #{i + 1} must be a mapping (dictionary)",
                line=line,
            )

        operation = change_data.get("operation")
        if not operation:
            raise ParseError(
                f"Change #{i + 1}: Missing required field 'operation'",
                line=line,
            )
        if not isinstance(operation, str):
            raise ParseError(
                f"Change #{i + 1}: Field 'operation' must be a string",
                line=line,
            )

        # Extract all other fields as params
        params = {k: v for k, v in change_data.items() if k != "operation"}
        _coerce_list_fields(params)

        changes.append(
            Change(
                operation=operation,
                params=params,
                line_number=line,
            )
        )

    return changes


def _coerce_list_fields(params: Dict[str, Any]) -> None:
    """Accept comma-separated strings for list fields, as the admin form does.

    References are one URL per line instead.
    """
    for name in TERM_LIST_FIELDS:
        value = params.get(name)
        if not isinstance(value, str):
            continue
        if name == "references":
            params[name] = parse_url_input(value)
        else:
            params[name] = parse_list_input(value)


def load_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load raw YAML from a file (exposed for testing).

    Args:
        path: Path to YAML file

    Returns:
        Parsed YAML as dictionary

    Raises:
        ParseError: If the file cannot be parsed
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return _load_yaml_string(path.read_text(encoding="utf-8"), empty_message="Empty YAML file")
