"""Offline duplicate-term analysis over raw JSON term files.

Terms are grouped by exact name (case- and surrounding-whitespace-
insensitive). Within each group a quality heuristic picks the copy to keep;
the others are reported as removal candidates together with where they
live in their source file. Nothing is modified.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from glossary_editor.exceptions import ExportError

logger = logging.getLogger(__name__)

# Definitions mentioning any of these (case-sensitive) earn a bonus.
AI_PHRASES = ("machine learning", "artificial intelligence", "AI")

# Definitions shorter than this are penalized.
SHORT_DEFINITION = 100

# How far back from a ``"term":`` line to look for the object's opening brace.
_BRACE_LOOKBACK = 10


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SourcedTerm:
    """A raw term record plus where it was read from."""

    record: dict[str, Any]
    source: str
    source_path: str
    line_number: int
    array_index: int

    @property
    def name(self) -> str:
        name = self.record.get("term")
        return name if isinstance(name, str) else ""

    @property
    def location(self) -> str:
        return f"{self.source}:{self.line_number} (array index {self.array_index})"


@dataclass(frozen=True, slots=True)
class LoadFailure:
    """A term file that could not be read or parsed."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ScoredTerm:
    entry: SourcedTerm
    score: float


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """Two or more records sharing a normalized name, best first."""

    key: str
    members: tuple[ScoredTerm, ...]

    @property
    def keep(self) -> ScoredTerm:
        return self.members[0]

    @property
    def remove(self) -> tuple[ScoredTerm, ...]:
        return self.members[1:]


@dataclass(frozen=True, slots=True)
class Removal:
    """Recommendation to drop one record in favour of its group's keeper."""

    term: str
    file: str
    line_number: int
    array_index: int
    location: str
    keep_instead: str
    keep_location: str
    keep_score: float
    score: float

    @property
    def quality_difference(self) -> float:
        return self.keep_score - self.score

    @property
    def reason(self) -> str:
        return (
            "Absolute duplicate - exact term name match (keeping the one with "
            f"higher quality score: {self.keep_score:.2f} vs {self.score:.2f})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "term": self.term,
            "file": self.file,
            "line_number": self.line_number,
            "array_index": self.array_index,
            "location": self.location,
            "reason": self.reason,
            "keep_instead": self.keep_instead,
            "keep_location": self.keep_location,
            "quality_difference": self.quality_difference,
        }


@dataclass
class DuplicateReport:
    """Outcome of one duplicate analysis run."""

    total_terms: int
    groups: list[DuplicateGroup]
    removals: list[Removal]
    failures: list[LoadFailure] = field(default_factory=list)
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def final_count(self) -> int:
        return self.total_terms - len(self.removals)

    def to_dict(self) -> dict[str, Any]:
        def _entry(item: ScoredTerm) -> dict[str, Any]:
            return {
                "term": item.entry.name,
                "location": f"{item.entry.source}:{item.entry.line_number}",
                "array_index": item.entry.array_index,
                "quality_score": item.score,
            }

        return {
            "analysis_date": self.analyzed_at.isoformat(),
            "total_terms_analyzed": self.total_terms,
            "duplicate_groups_found": len(self.groups),
            "terms_to_remove": [r.to_dict() for r in self.removals],
            "duplicate_groups": [
                {
                    "keep": _entry(group.keep),
                    "remove": [_entry(item) for item in group.remove],
                }
                for group in self.groups
            ],
            "quick_removal_list": [
                {
                    "term": r.term,
                    "file": r.file,
                    "line_number": r.line_number,
                    "array_index": r.array_index,
                }
                for r in self.removals
            ],
            "failures": [{"path": f.path, "message": f.message} for f in self.failures],
        }


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_term_files(
    paths: Iterable[str | Path],
) -> tuple[list[SourcedTerm], list[LoadFailure]]:
    """Read term arrays from JSON files.

    A file that can't be read or parsed is logged, recorded as a
    :class:`LoadFailure` and skipped; the remaining files still load.
    """
    terms: list[SourcedTerm] = []
    failures: list[LoadFailure] = []

    for path in map(Path, paths):
        try:
            text = path.read_text(encoding="utf-8")
            data = json.loads(text)
        except (OSError, ValueError) as e:
            logger.error("Error loading %s: %s", path, e)
            failures.append(LoadFailure(path=str(path), message=str(e)))
            continue
        if not isinstance(data, list):
            message = "top-level JSON value is not an array"
            logger.error("Error loading %s: %s", path, message)
            failures.append(LoadFailure(path=str(path), message=message))
            continue

        line_numbers = find_record_lines(text, data)
        loaded = 0
        for index, record in enumerate(data):
            if not isinstance(record, dict):
                logger.warning("Skipping non-object at %s index %d", path, index)
                continue
            terms.append(SourcedTerm(
                record=record,
                source=path.name,
                source_path=str(path),
                line_number=line_numbers[index],
                array_index=index,
            ))
            loaded += 1
        logger.info("Loaded %d terms from %s", loaded, path)

    return terms, failures


def load_term_array(
    records: Iterable[dict[str, Any]],
    source: str = "direct",
) -> list[SourcedTerm]:
    """Wrap in-memory records; line numbers are 1-based positions."""
    return [
        SourcedTerm(
            record=record,
            source=source,
            source_path=source,
            line_number=index + 1,
            array_index=index,
        )
        for index, record in enumerate(records)
    ]


def find_record_lines(text: str, records: list[Any]) -> list[int]:
    """1-based line numbers where each top-level array object starts."""
    lines = text.split("\n")
    starts = _object_start_lines(lines)
    if len(starts) == len(records):
        return starts

    logger.warning(
        "Object count mismatch (%d starts for %d records); locating by name",
        len(starts), len(records),
    )
    return [_locate_by_name(lines, record, index) for index, record in enumerate(records)]


def _object_start_lines(lines: list[str]) -> list[int]:
    starts: list[int] = []
    depth = 0
    in_array = False
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not in_array:
            if not line.startswith("["):
                continue
            in_array = True
            line = line[1:]
        opens = line.count("{")
        closes = line.count("}")
        if depth == 0 and opens > 0:
            starts.append(number)
        depth += opens - closes
    return starts


def _locate_by_name(lines: list[str], record: Any, index: int) -> int:
    name = record.get("term") if isinstance(record, dict) else None
    if isinstance(name, str):
        pattern = re.compile(r'"term"\s*:\s*"' + re.escape(name) + '"')
        for i, line in enumerate(lines):
            if not pattern.search(line):
                continue
            for j in range(i, max(0, i - _BRACE_LOOKBACK) - 1, -1):
                if lines[j].strip().startswith("{"):
                    return j + 1
            break
    # Rough estimate: the opening "[" takes line 1
    return index + 2


# ---------------------------------------------------------------------------
# Scoring and grouping
# ---------------------------------------------------------------------------

def normalize_name(name: str) -> str:
    """Grouping key: lowercased, surrounding whitespace trimmed."""
    return name.strip().lower()


def quality_score(record: dict[str, Any]) -> float:
    """Heuristic for which duplicate to keep; higher is better."""
    definition = str(record.get("definition") or "")
    score = 0.0

    score += min(len(definition) / 200, 2.0)
    score += len(record.get("aliases") or []) * 0.3
    score += len(record.get("related") or []) * 0.2
    score += len(record.get("tags") or []) * 0.1
    score += len(record.get("references") or []) * 0.5

    if any(phrase in definition for phrase in AI_PHRASES):
        score += 0.5
    if len(definition) < SHORT_DEFINITION:
        score -= 1.0

    return score


def find_duplicate_groups(terms: Iterable[SourcedTerm]) -> list[DuplicateGroup]:
    """Group by normalized name and keep only groups with 2+ members.

    Groups come out in the order their name was first seen. Members are
    sorted by descending score; equal scores keep encounter order.
    Records without a term name are left out of grouping.
    """
    buckets: dict[str, list[ScoredTerm]] = {}
    for entry in terms:
        if not entry.name.strip():
            logger.warning("Skipping unnamed term at %s", entry.location)
            continue
        buckets.setdefault(normalize_name(entry.name), []).append(
            ScoredTerm(entry=entry, score=quality_score(entry.record))
        )

    groups = []
    for key, members in buckets.items():
        if len(members) < 2:
            continue
        ranked = sorted(members, key=lambda m: m.score, reverse=True)
        groups.append(DuplicateGroup(key=key, members=tuple(ranked)))
        logger.debug("Found %d duplicates for %r", len(members), key)
    return groups


def removal_recommendations(groups: Iterable[DuplicateGroup]) -> list[Removal]:
    removals = []
    for group in groups:
        keep = group.keep
        for item in group.remove:
            removals.append(Removal(
                term=item.entry.name,
                file=item.entry.source_path,
                line_number=item.entry.line_number,
                array_index=item.entry.array_index,
                location=item.entry.location,
                keep_instead=keep.entry.name,
                keep_location=keep.entry.location,
                keep_score=keep.score,
                score=item.score,
            ))
    return removals


def _build_report(
    terms: list[SourcedTerm],
    failures: list[LoadFailure],
) -> DuplicateReport:
    groups = find_duplicate_groups(terms)
    report = DuplicateReport(
        total_terms=len(terms),
        groups=groups,
        removals=removal_recommendations(groups),
        failures=failures,
    )
    logger.info(
        "Analysis complete: %d terms, %d duplicate groups",
        report.total_terms, len(report.groups),
    )
    return report


def analyze_files(paths: Iterable[str | Path]) -> DuplicateReport:
    """Run the full duplicate analysis over JSON term files."""
    terms, failures = load_term_files(paths)
    return _build_report(terms, failures)


def analyze_records(
    records: Iterable[dict[str, Any]],
    source: str = "direct",
) -> DuplicateReport:
    """Run the full duplicate analysis over in-memory records."""
    return _build_report(load_term_array(records, source), [])


def analyze(
    source: str | Path | Iterable[str | Path] | Iterable[dict[str, Any]],
) -> DuplicateReport:
    """Analyze file path(s) or a list of term records."""
    items = [source] if isinstance(source, (str, Path)) else list(source)
    if items and all(isinstance(item, (str, Path)) for item in items):
        return analyze_files(items)
    return analyze_records(items)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def format_report(report: DuplicateReport) -> str:
    """Human-readable grouping report."""
    out: list[str] = ["DUPLICATE ANALYSIS RESULTS", "=" * 50]

    for failure in report.failures:
        out.append(f"[ERROR] Could not load {failure.path}: {failure.message}")

    if not report.groups:
        out.append("No duplicates found. All term names are unique.")
    else:
        out.append(f"Found {len(report.groups)} sets of duplicates:")
        for number, group in enumerate(report.groups, start=1):
            out.append("")
            out.append(f'DUPLICATE SET {number}: "{group.keep.entry.name}"')
            out.append("-" * 60)
            for item in group.members:
                entry = item.entry
                status = "KEEP  " if item is group.keep else "REMOVE"
                aliases = ", ".join(entry.record.get("aliases") or []) or "None"
                definition = str(entry.record.get("definition") or "")
                out.append(f'[{status}] "{entry.name}"')
                out.append(f"    Location: {entry.location}")
                out.append(f"    Quality score: {item.score:.2f}")
                out.append(f"    Category: {entry.record.get('category', '')}")
                out.append(f"    Aliases: {aliases}")
                out.append(f"    Definition: {definition[:100]}...")

        out.append("")
        out.append("TERMS TO REMOVE")
        out.append("=" * 50)
        for number, removal in enumerate(report.removals, start=1):
            out.append(f'{number}. Remove: "{removal.term}"')
            out.append(f"   Location: {removal.location}")
            out.append(f'   Keep instead: "{removal.keep_instead}" at {removal.keep_location}')
            out.append(f"   Quality difference: {removal.quality_difference:.2f}")

    out.append("")
    out.append(f"Total terms analyzed: {report.total_terms}")
    out.append(f"Duplicate sets found: {len(report.groups)}")
    out.append(f"Terms to remove: {len(report.removals)}")
    out.append(f"Final unique terms: {report.final_count}")
    return "\n".join(out)


def write_report(report: DuplicateReport, destination: str | Path) -> None:
    """Write the structured removal report as JSON."""
    try:
        with open(destination, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ExportError(f"Failed to write report to {destination}: {e}") from e
