"""Tests for categories, learning paths and icons."""

import pytest

from glossary_editor.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)
from glossary_editor.models import CategoryIcon


class TestCategories:

    def test_create_and_get(self, editor):
        category = editor.create_category("Basics", "Core ideas", icon="Lightbulb")
        assert editor.get_category("Basics") == category
        assert category.icon_kind is CategoryIcon.LIGHTBULB

    def test_duplicate_name(self, editor_with_categories):
        with pytest.raises(DuplicateEntityError):
            editor_with_categories.create_category("Basics")

    def test_blank_name(self, editor):
        with pytest.raises(ValidationError):
            editor.create_category("  ")

    def test_list_in_creation_order(self, editor_with_categories):
        names = [c.name for c in editor_with_categories.list_categories()]
        assert names == ["Basics", "Models"]

    def test_get_missing(self, editor):
        assert editor.get_category("Nowhere") is None

    def test_update_description_only(self, editor_with_categories):
        updated = editor_with_categories.update_category("Basics", description="New")
        assert updated.description == "New"
        assert updated.icon == "Lightbulb"

    def test_update_can_clear_icon(self, editor_with_categories):
        updated = editor_with_categories.update_category("Basics", icon=None)
        assert updated.icon is None
        assert updated.icon_kind is CategoryIcon.FOLDER_OPEN

    def test_update_missing(self, editor):
        with pytest.raises(EntityNotFoundError):
            editor.update_category("Nowhere", description="x")


class TestRenameCategory:

    def test_rename_moves_terms(self, editor_with_data):
        ed, t1, t2, t3, t4 = editor_with_data
        renamed = ed.rename_category("Basics", "Fundamentals")
        assert renamed.name == "Fundamentals"
        assert ed.get_category("Basics") is None
        assert ed.get_term(t1.id).category == "Fundamentals"
        assert ed.get_term(t2.id).category == "Fundamentals"
        assert ed.get_term(t3.id).category == "Models"

    def test_rename_keeps_id(self, editor_with_categories):
        ed = editor_with_categories
        before = ed.get_category("Basics")
        after = ed.rename_category("Basics", "Fundamentals")
        assert after.id == before.id

    def test_rename_to_taken_name(self, editor_with_categories):
        with pytest.raises(DuplicateEntityError):
            editor_with_categories.rename_category("Basics", "Models")

    def test_rename_missing(self, editor):
        with pytest.raises(EntityNotFoundError):
            editor.rename_category("Nowhere", "Somewhere")

    def test_rename_to_same_name(self, editor_with_categories):
        category = editor_with_categories.rename_category("Basics", "Basics")
        assert category.name == "Basics"


class TestLearningPaths:

    def test_create_and_list(self, editor_with_categories):
        ed = editor_with_categories
        path = ed.create_learning_path(
            "intro", "Introduction", categories=["Basics"], icon="GraduationCap",
        )
        assert ed.get_learning_path("intro") == path
        assert ed.list_learning_paths() == [path]
        assert path.icon_kind is CategoryIcon.GRADUATION_CAP

    def test_duplicate_id(self, editor_with_categories):
        ed = editor_with_categories
        ed.create_learning_path("intro", "Introduction")
        with pytest.raises(DuplicateEntityError):
            ed.create_learning_path("intro", "Again")

    def test_unknown_category(self, editor_with_categories):
        with pytest.raises(ValidationError):
            editor_with_categories.create_learning_path(
                "intro", "Introduction", categories=["Nowhere"],
            )

    def test_get_missing(self, editor):
        assert editor.get_learning_path("nope") is None


class TestCategoryIcon:

    def test_known_name(self):
        assert CategoryIcon.resolve("DatabaseZap") is CategoryIcon.DATABASE_ZAP

    def test_unknown_name_falls_back(self):
        assert CategoryIcon.resolve("Nope") is CategoryIcon.FOLDER_OPEN

    def test_missing_name_falls_back(self):
        assert CategoryIcon.resolve(None) is CategoryIcon.FOLDER_OPEN
        assert CategoryIcon.resolve("") is CategoryIcon.FOLDER_OPEN

    def test_value_is_identifier(self):
        assert CategoryIcon.FOLDER_OPEN.value == "FolderOpen"
