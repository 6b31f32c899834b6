"""Shared test fixtures for glossary-editor."""

import json

import pytest

from glossary_editor import GlossaryEditor


@pytest.fixture
def editor():
    """Create an in-memory editor for testing."""
    with GlossaryEditor(":memory:") as ed:
        yield ed


@pytest.fixture
def editor_with_categories(editor):
    """Editor with the 'Basics' and 'Models' categories pre-created."""
    editor.create_category("Basics", "Core ideas", icon="Lightbulb")
    editor.create_category("Models", "Model families", icon="Brain")
    return editor


@pytest.fixture
def editor_with_data(editor_with_categories):
    """Editor with a handful of terms and one learning path."""
    ed = editor_with_categories
    ed.create_learning_path("intro", "Introduction", categories=["Basics", "Models"])
    t1 = ed.create_term(
        "Token", "Basics", "A unit of text processed by a language model.",
        aliases=["tokens"], tags=["nlp"], learningpaths={"intro": 2},
    )
    t2 = ed.create_term(
        "Embedding", "Basics", "A dense vector representation of text.",
        related=["Token", "Vector Database"], learningpaths={"intro": 1},
    )
    t3 = ed.create_term(
        "Transformer", "Models", "A neural network architecture built on attention.",
        aliases=["attention model"], related=["Embedding"],
        learningpaths={"intro": 1000},
    )
    t4 = ed.create_term(
        "attention", "Models", "Mechanism weighting parts of the input.",
        tags=["core"],
    )
    return ed, t1, t2, t3, t4


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON value to a file under tmp_path and return its path."""
    def _write(name, value, **dump_options):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(value, **dump_options), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def glossary_dir(write_json, tmp_path):
    """A legacy-layout glossary directory (records carry no ids)."""
    data_dir = tmp_path / "data"
    write_json("data/categories.json", [
        {"name": "Basics", "description": "Core ideas", "icon": "Lightbulb"},
        {"name": "Models", "description": "Model families", "icon": "Brain"},
    ], indent=2)
    write_json("data/terms.json", [
        {
            "term": "Token",
            "category": "Basics",
            "definition": "A unit of text processed by a language model.",
            "aliases": ["tokens"],
            "related": ["Embedding"],
            "tags": ["nlp"],
            "references": ["https://example.com/token"],
            "learningpaths": {"intro": 1},
        },
        {
            "term": "Embedding",
            "category": "Basics",
            "definition": "A dense vector representation of text.",
            "aliases": [],
            "related": ["Token", "Cosine Similarity"],
            "tags": [],
            "references": [],
        },
        {
            "term": "Transformer",
            "category": "Models",
            "definition": "A neural network architecture built on attention.",
            "aliases": [],
            "related": [],
            "tags": [],
            "references": [],
        },
    ], indent=2)
    write_json("data/learningpaths.json", [
        {"id": "intro", "name": "Introduction", "categories": ["Basics"]},
    ], indent=2)
    return data_dir
