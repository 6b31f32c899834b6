"""Domain model dataclasses and enums for glossary-editor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

# Learning-path positions at or above this value mean "unordered / appendix".
UNORDERED = 1000

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CategoryIcon(str, Enum):
    """Known icon identifiers for categories and learning paths."""

    GRADUATION_CAP = "GraduationCap"
    TARGET = "Target"
    LIGHTBULB = "Lightbulb"
    BOOK_OPEN = "BookOpen"
    BRAIN = "Brain"
    LAYERS = "Layers"
    COG = "Cog"
    NETWORK = "Network"
    PEN_TOOL = "PenTool"
    MESSAGE_SQUARE = "MessageSquare"
    SPARKLES = "Sparkles"
    BOT = "Bot"
    DATABASE = "Database"
    DATABASE_ZAP = "DatabaseZap"
    SERVER = "Server"
    CLOUD = "Cloud"
    SHIELD_CHECK = "ShieldCheck"
    BRIEFCASE = "Briefcase"
    FOLDER_OPEN = "FolderOpen"

    @classmethod
    def resolve(cls, name: str | None) -> CategoryIcon:
        """Map an icon name to a known icon, falling back to FOLDER_OPEN."""
        if not name:
            return cls.FOLDER_OPEN
        try:
            return cls(name)
        except ValueError:
            return cls.FOLDER_OPEN


class ValidationSeverity(str, Enum):
    """Severity level for validation results."""

    ERROR = "ERROR"
    WARNING = "WARNING"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CategoryModel:
    """A named grouping of terms."""

    id: int
    name: str
    description: str
    icon: str | None = None

    @property
    def icon_kind(self) -> CategoryIcon:
        return CategoryIcon.resolve(self.icon)

    def to_dict(self, *, include_id: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if include_id:
            data["id"] = self.id
        data["name"] = self.name
        data["description"] = self.description
        if self.icon:
            data["icon"] = self.icon
        return data


@dataclass(frozen=True, slots=True)
class TermModel:
    """A single glossary entry."""

    id: int
    term: str
    category: str
    definition: str
    aliases: tuple[str, ...] = ()
    related: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    references: tuple[str, ...] = ()
    learningpaths: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        # Read-only copy; returned snapshots never change
        object.__setattr__(self, "learningpaths", MappingProxyType(dict(self.learningpaths)))

    def to_dict(self, *, include_id: bool = True) -> dict[str, Any]:
        """Serialize in the terms.json record layout."""
        data: dict[str, Any] = {}
        if include_id:
            data["id"] = self.id
        data.update(
            term=self.term,
            category=self.category,
            definition=self.definition,
            aliases=list(self.aliases),
            related=list(self.related),
            tags=list(self.tags),
            references=list(self.references),
        )
        if self.learningpaths:
            data["learningpaths"] = dict(self.learningpaths)
        return data


@dataclass(frozen=True, slots=True)
class LearningPathModel:
    """A named, ordered curriculum drawing terms from some categories."""

    id: str
    name: str
    description: str | None = None
    icon: str | None = None
    categories: tuple[str, ...] = ()

    @property
    def icon_kind(self) -> CategoryIcon:
        return CategoryIcon.resolve(self.icon)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.description:
            data["description"] = self.description
        if self.icon:
            data["icon"] = self.icon
        data["categories"] = list(self.categories)
        return data


@dataclass(frozen=True, slots=True)
class LearningPathProgress:
    """Term counts for one learning path."""

    total: int
    ordered: int
    unordered: int


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """A single validation finding (error or warning)."""

    rule_id: str
    severity: str
    entity_type: str
    entity_id: str
    message: str
    details: dict[str, Any] | None
