"""Tests for input checks and whole-glossary validation rules."""

import pytest

from glossary_editor import GlossaryEditor
from glossary_editor.exceptions import EntityNotFoundError, ValidationError
from glossary_editor.models import CategoryModel, LearningPathModel, TermModel
from glossary_editor.validator import check_term_fields, validate_all


def _rules(results):
    return sorted({r.rule_id for r in results})


def _term(id, name, **kwargs):
    kwargs.setdefault("category", "Basics")
    kwargs.setdefault("definition", "Some definition.")
    return TermModel(id=id, term=name, **kwargs)


BASICS = CategoryModel(id=1, name="Basics", description="")


class TestCheckTermFields:

    def test_normalizes_optional_lists(self):
        fields = check_term_fields({
            "term": "A", "category": "Basics", "definition": "d", "aliases": None,
        })
        assert fields["aliases"] == []

    def test_missing_required(self):
        with pytest.raises(ValidationError, match="definition"):
            check_term_fields({"term": "A", "category": "Basics"})

    def test_partial_allows_missing(self):
        assert check_term_fields({"tags": ["x"]}, partial=True) == {"tags": ["x"]}

    def test_non_string_item(self):
        with pytest.raises(ValidationError):
            check_term_fields({"tags": ["x", 3]}, partial=True)

    def test_bool_position_rejected(self):
        with pytest.raises(ValidationError):
            check_term_fields({"learningpaths": {"intro": True}}, partial=True)


class TestValidateAll:

    def test_clean_glossary(self):
        terms = [_term(1, "A", related=("B",)), _term(2, "B", references=("https://x",))]
        assert validate_all([BASICS], terms) == []

    def test_blank_text(self):
        results = validate_all([BASICS], [_term(1, " ", definition="")])
        assert {"VAL-TRM-001", "VAL-TRM-002"} <= set(_rules(results))
        assert all(r.severity == "ERROR" for r in results if r.rule_id in ("VAL-TRM-001", "VAL-TRM-002"))

    def test_unknown_category(self):
        results = validate_all([BASICS], [_term(1, "A", category="Nowhere")])
        assert "VAL-TRM-003" in _rules(results)

    def test_dangling_related(self):
        results = validate_all([BASICS], [_term(1, "A", related=("Missing",))])
        finding = next(r for r in results if r.rule_id == "VAL-TRM-004")
        assert finding.details == {"related": ["Missing"]}

    def test_duplicate_names(self):
        results = validate_all([BASICS], [_term(1, "GPU"), _term(2, " gpu")])
        dups = [r for r in results if r.rule_id == "VAL-TRM-005"]
        assert {r.entity_id for r in dups} == {"1", "2"}

    def test_unknown_learning_path(self):
        path = LearningPathModel(id="intro", name="Intro")
        terms = [_term(1, "A", learningpaths={"intro": 1, "other": 2})]
        results = validate_all([BASICS], terms, [path])
        finding = next(r for r in results if r.rule_id == "VAL-TRM-006")
        assert finding.details == {"learningpaths": ["other"]}

    def test_learning_path_ids_unchecked_without_paths(self):
        results = validate_all([BASICS], [_term(1, "A", learningpaths={"other": 2})])
        assert "VAL-TRM-006" not in _rules(results)

    def test_non_url_reference(self):
        results = validate_all([BASICS], [_term(1, "A", references=("see book",))])
        assert "VAL-TRM-007" in _rules(results)

    def test_empty_category(self):
        extra = CategoryModel(id=2, name="Empty", description="")
        results = validate_all([BASICS, extra], [_term(1, "A")])
        finding = next(r for r in results if r.rule_id == "VAL-CAT-001")
        assert finding.entity_id == "Empty"

    def test_empty_learning_path(self):
        path = LearningPathModel(id="intro", name="Intro")
        results = validate_all([BASICS], [_term(1, "A")], [path])
        assert "VAL-LPT-001" in _rules(results)


class TestEditorValidation:

    def test_validate_store(self, editor_with_data):
        ed = editor_with_data[0]
        results = ed.validate()
        assert _rules(results) == ["VAL-TRM-004"]

    def test_validate_term(self, editor_with_data):
        ed, t1, t2, t3, t4 = editor_with_data
        assert ed.validate_term(t1.id) == []
        assert _rules(ed.validate_term(t2.id)) == ["VAL-TRM-004"]

    def test_validate_term_duplicate_name(self, editor_with_categories):
        ed = editor_with_categories
        a = ed.create_term("GPU", "Basics", "First.")
        ed.create_term("gpu", "Basics", "Second.")
        assert "VAL-TRM-005" in _rules(ed.validate_term(a.id))

    def test_validate_term_missing(self, editor):
        with pytest.raises(EntityNotFoundError):
            editor.validate_term(1)

    def test_unknown_category_loaded_from_files(self, write_json, tmp_path):
        write_json("data/terms.json", [
            {"term": "A", "category": "Nowhere", "definition": "d"},
        ])
        with GlossaryEditor.from_json(tmp_path / "data") as ed:
            assert "VAL-TRM-003" in _rules(ed.validate())
