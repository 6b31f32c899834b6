"""Custom exception hierarchy for glossary-editor."""


class GlossaryEditorError(Exception):
    """Base exception for all glossary-editor errors."""


class ValidationError(GlossaryEditorError):
    """Invalid data (blank term, blank definition, unknown category)."""


class EntityNotFoundError(GlossaryEditorError):
    """Entity doesn't exist in the glossary."""


class DuplicateEntityError(GlossaryEditorError):
    """Entity with the same unique key already exists."""


class DataImportError(GlossaryEditorError):
    """Failed to import data (malformed JSON, duplicate ids, etc.)."""


class ExportError(GlossaryEditorError):
    """Failed to write glossary files."""


class DatabaseError(GlossaryEditorError):
    """Schema version mismatch, connection failure."""
