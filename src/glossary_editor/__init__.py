__version__ = "0.1.0"

from .editor import (
    GlossaryEditor as GlossaryEditor,
)

from .exceptions import (
    GlossaryEditorError as GlossaryEditorError,
    ValidationError as ValidationError,
    EntityNotFoundError as EntityNotFoundError,
    DuplicateEntityError as DuplicateEntityError,
    DataImportError as DataImportError,
    ExportError as ExportError,
    DatabaseError as DatabaseError,
)

from .models import (
    UNORDERED as UNORDERED,
    CategoryIcon as CategoryIcon,
    CategoryModel as CategoryModel,
    TermModel as TermModel,
    LearningPathModel as LearningPathModel,
    LearningPathProgress as LearningPathProgress,
    ValidationResult as ValidationResult,
)

from .query import (
    ALL_CATEGORIES as ALL_CATEGORIES,
    TermQuery as TermQuery,
    filter_terms as filter_terms,
    sort_terms as sort_terms,
)

from .navigation import (
    Neighbors as Neighbors,
    RelatedLink as RelatedLink,
    find_neighbors as find_neighbors,
)

from .duplicates import (
    DuplicateReport as DuplicateReport,
    analyze as analyze_duplicates,
)

from .reports import (
    undefined_related as undefined_related,
    defined_term_names as defined_term_names,
)

__all__ = [
    "GlossaryEditor",
    # Exceptions
    "GlossaryEditorError",
    "ValidationError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "DataImportError",
    "ExportError",
    "DatabaseError",
    # Models
    "UNORDERED",
    "CategoryIcon",
    "CategoryModel",
    "TermModel",
    "LearningPathModel",
    "LearningPathProgress",
    "ValidationResult",
    # Browsing
    "ALL_CATEGORIES",
    "TermQuery",
    "filter_terms",
    "sort_terms",
    "Neighbors",
    "RelatedLink",
    "find_neighbors",
    # Maintenance
    "DuplicateReport",
    "analyze_duplicates",
    "undefined_related",
    "defined_term_names",
]
