"""
Command-line interface for glossary maintenance.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .batch import (
    BatchResult,
    ParseError,
    ValidationResult,
    execute_change_request,
    load_change_request,
    validate_change_request,
)
from .duplicates import analyze_files, format_report, write_report
from .editor import GlossaryEditor
from .exceptions import DataImportError, ExportError
from .importer import read_array
from .models import ValidationSeverity
from .reports import defined_term_names, format_name_listing, undefined_related


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the glossary-tool CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="glossary-tool",
        description="Maintenance tool for glossary data files",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Load a glossary directory and report validation findings",
    )
    check_parser.add_argument(
        "data_dir",
        type=Path,
        help="Directory holding categories.json and terms.json",
    )
    check_parser.set_defaults(func=cmd_check)

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a change request file",
    )
    validate_parser.add_argument(
        "file",
        type=Path,
        help="YAML or JSON file containing a change request",
    )
    validate_parser.add_argument(
        "--data-dir",
        type=Path,
        help="Also check references against this glossary directory",
    )
    validate_parser.set_defaults(func=cmd_validate)

    # apply command
    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply changes from a request file",
    )
    apply_parser.add_argument(
        "file",
        type=Path,
        help="YAML or JSON file containing a change request",
    )
    apply_parser.add_argument(
        "--data-dir",
        type=Path,
        required=True,
        help="Glossary directory to modify",
    )
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate execution without making changes",
    )
    apply_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    apply_parser.add_argument(
        "--legacy-format",
        action="store_true",
        help="Write files without ids (array position identity)",
    )
    apply_parser.set_defaults(func=cmd_apply)

    # duplicates command
    dup_parser = subparsers.add_parser(
        "duplicates",
        help="Find duplicate terms across JSON term files",
    )
    dup_parser.add_argument(
        "files",
        type=Path,
        nargs="+",
        help="JSON files each holding an array of terms",
    )
    dup_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write the removal report as JSON to this path",
    )
    dup_parser.set_defaults(func=cmd_duplicates)

    # undefined-related command
    undefined_parser = subparsers.add_parser(
        "undefined-related",
        help="List related-term names that no term defines",
    )
    undefined_parser.add_argument("file", type=Path, help="JSON term file")
    undefined_parser.set_defaults(func=cmd_undefined_related)

    # list-terms command
    list_parser = subparsers.add_parser(
        "list-terms",
        help="List the defined term names",
    )
    list_parser.add_argument("file", type=Path, help="JSON term file")
    list_parser.set_defaults(func=cmd_list_terms)

    return parser


def _open_glossary(data_dir: Path, legacy_format: bool = False) -> GlossaryEditor:
    return GlossaryEditor.from_json(
        data_dir,
        legacy_format=legacy_format,
        enforce_categories=True,
    )


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    try:
        editor = _open_glossary(args.data_dir)
    except (DataImportError, FileNotFoundError) as e:
        print(f"[ERROR] {e}")
        return 1

    with editor:
        results = editor.validate()
        print(f"Terms: {len(editor.list_terms())}")
        print(f"Categories: {len(editor.list_categories())}")

    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]
    for result in results:
        tag = "[ERROR]" if result.severity == ValidationSeverity.ERROR else "[WARN] "
        print(f"  {tag} {result.rule_id} {result.entity_type} {result.entity_id}: {result.message}")

    print(f"\nFound {len(errors)} error(s), {len(results) - len(errors)} warning(s)")
    return 1 if errors else 0


def _load_request(path: Path):
    try:
        return load_change_request(path)
    except ParseError as e:
        print(f"\n  [PARSE ERROR] {e}")
        if e.line:
            print(f"               Line: {e.line}")
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
    return None


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    print(f"\nValidating {args.file}...")

    request = _load_request(args.file)
    if request is None:
        return 1

    print(f"  Changes: {len(request.changes)}")
    if request.session_name:
        print(f"  Session: {request.session_name}")

    editor = None
    if args.data_dir is not None:
        try:
            editor = _open_glossary(args.data_dir)
        except (DataImportError, FileNotFoundError) as e:
            print(f"\n  [ERROR] {e}")
            return 1

    try:
        result = validate_change_request(request, editor)
    finally:
        if editor is not None:
            editor.close()

    print("\nValidation Results:")
    _print_validation_result(result)

    if result.is_valid:
        print("\nValidation passed!")
        return 0
    else:
        print(f"\nFound {result.error_count} error(s), {result.warning_count} warning(s)")
        return 1


def cmd_apply(args: argparse.Namespace) -> int:
    """Handle apply command."""
    print(f"\nLoading {args.file}...")

    request = _load_request(args.file)
    if request is None:
        return 1

    print(f"  Changes: {len(request.changes)}")
    if request.session_name:
        print(f"  Session: \"{request.session_name}\"")

    try:
        editor = _open_glossary(args.data_dir, legacy_format=args.legacy_format)
    except (DataImportError, FileNotFoundError) as e:
        print(f"\n  [ERROR] {e}")
        return 1

    with editor:
        # Validate first
        print("\nValidating...")
        validation = validate_change_request(request, editor)

        if not validation.is_valid:
            print("\nValidation failed:")
            _print_validation_result(validation)
            print(f"\nFound {validation.error_count} error(s). Fix errors before applying.")
            return 1

        if validation.warning_count > 0:
            print("\nWarnings:")
            _print_validation_result(validation, warnings_only=True)

        # Confirm unless --yes or --dry-run
        if args.dry_run:
            print("\n[DRY RUN] Simulating execution...")
        elif not args.yes:
            response = input(f"\nApply {len(request.changes)} changes to {args.data_dir}? [y/N] ")
            if response.lower() not in ("y", "yes"):
                print("Aborted.")
                return 1

        print(f"\n{'Simulating' if args.dry_run else 'Applying'} changes...")
        result = execute_change_request(request, editor, dry_run=args.dry_run)
        _print_batch_result(result)

        if not args.dry_run and result.success_count > 0:
            try:
                editor.export_json(args.data_dir)
            except ExportError as e:
                print(f"\n  [ERROR] {e}")
                return 1

    if result.failure_count > 0:
        return 1
    return 0


def cmd_duplicates(args: argparse.Namespace) -> int:
    """Handle duplicates command."""
    report = analyze_files(args.files)
    print(format_report(report))

    if args.output is not None:
        try:
            write_report(report, args.output)
        except ExportError as e:
            print(f"\n[ERROR] {e}")
            return 1
        print(f"\nRemoval report saved to: {args.output}")

    return 1 if report.failures else 0


def _read_term_file(path: Path):
    if not path.exists():
        print(f"[ERROR] File not found: {path}")
        return None
    try:
        return read_array(path)
    except DataImportError as e:
        print(f"[ERROR] {e}")
        return None


def cmd_undefined_related(args: argparse.Namespace) -> int:
    """Handle undefined-related command."""
    records = _read_term_file(args.file)
    if records is None:
        return 1
    print(format_name_listing("Undefined related terms", undefined_related(records)))
    return 0


def cmd_list_terms(args: argparse.Namespace) -> int:
    """Handle list-terms command."""
    records = _read_term_file(args.file)
    if records is None:
        return 1
    print(format_name_listing("Defined terms", defined_term_names(records)))
    return 0


def _print_validation_result(
    result: ValidationResult,
    warnings_only: bool = False,
) -> None:
    """Print validation errors and warnings."""
    if not warnings_only:
        for error in result.errors:
            line_info = f" (line {error.line_number})" if error.line_number else ""
            print(f"  [ERROR] Change #{error.index + 1} ({error.operation}): {error.message}{line_info}")
            if error.field:
                print(f"          Field: {error.field}")

    for warning in result.warnings:
        line_info = f" (line {warning.line_number})" if warning.line_number else ""
        print(f"  [WARN]  Change #{warning.index + 1} ({warning.operation}): {warning.message}{line_info}")


def _print_batch_result(result: BatchResult) -> None:
    """Print batch execution result."""
    print()
    for change in result.changes:
        idx = change.index + 1
        status = "OK" if change.success else "FAILED"
        print(f"  [{idx}/{result.total_count}] {change.operation}: {status}")
        if change.message:
            print(f"         {change.message}")

    print("\nResults:")
    print(f"  Total:   {result.total_count}")
    print(f"  Success: {result.success_count}")
    print(f"  Failed:  {result.failure_count}")
    print(f"  Time:    {result.duration_seconds:.2f}s")


if __name__ == "__main__":
    sys.exit(main())
