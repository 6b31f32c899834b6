"""Tests for GlossaryEditor initialization, batches and persistence."""

import json
import os
import tempfile
import threading

import pytest

from glossary_editor import GlossaryEditor
from glossary_editor.exceptions import DatabaseError, ExportError, ValidationError


class TestInit:

    def test_create_new_file_database(self):
        with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
            path = f.name
        os.unlink(path)
        try:
            editor = GlossaryEditor(path)
            assert os.path.exists(path)
            row = editor._conn.execute(
                "SELECT value FROM meta WHERE key='schema_version'"
            ).fetchone()
            assert row[0] == "1.0"
            editor.close()
        finally:
            for suffix in ("", "-wal", "-shm"):
                if os.path.exists(path + suffix):
                    os.unlink(path + suffix)

    def test_in_memory_database(self):
        editor = GlossaryEditor(":memory:")
        assert editor.list_terms() == []
        assert editor.list_categories() == []
        editor.close()

    def test_context_manager(self):
        with GlossaryEditor() as editor:
            assert editor is not None

    def test_open_existing_database(self, tmp_path):
        path = tmp_path / "glossary.db"
        ed1 = GlossaryEditor(path)
        ed1.create_category("Basics")
        term = ed1.create_term("Token", "Basics", "A unit of text.")
        ed1.close()

        ed2 = GlossaryEditor(path)
        assert ed2.get_term(term.id) == term
        ed2.close()

    def test_schema_version_mismatch(self, tmp_path):
        path = tmp_path / "glossary.db"
        ed1 = GlossaryEditor(path)
        with ed1._conn:
            ed1._conn.execute("UPDATE meta SET value = '0.1' WHERE key = 'schema_version'")
        ed1.close()

        with pytest.raises(DatabaseError):
            GlossaryEditor(path)


class TestBatch:

    def test_batch_commits_all(self, editor_with_categories):
        ed = editor_with_categories
        with ed.batch():
            ed.create_term("A", "Basics", "First.")
            ed.create_term("B", "Basics", "Second.")
        assert [t.term for t in ed.list_terms()] == ["A", "B"]

    def test_batch_rolls_back_on_error(self, editor_with_categories):
        ed = editor_with_categories
        with pytest.raises(ValidationError):
            with ed.batch():
                ed.create_term("A", "Basics", "First.")
                ed.create_term("B", "Nowhere", "Second.")
        assert ed.list_terms() == []

    def test_nested_batch_joins_outer(self, editor_with_categories):
        ed = editor_with_categories
        with pytest.raises(RuntimeError):
            with ed.batch():
                ed.create_term("A", "Basics", "First.")
                with ed.batch():
                    ed.create_term("B", "Basics", "Second.")
                raise RuntimeError("abort")
        assert ed.list_terms() == []

    def test_failed_mutation_outside_batch_rolls_back(self, editor_with_categories):
        ed = editor_with_categories
        with pytest.raises(ValidationError):
            ed.update_term(
                ed.create_term("A", "Basics", "First.").id,
                definition="   ",
            )
        assert ed.list_terms()[0].definition == "First."


class TestPersistence:

    def test_mutation_writes_files(self, tmp_path):
        out = tmp_path / "out"
        with GlossaryEditor(persist_dir=out) as ed:
            ed.create_category("Basics", "Core ideas")
            term = ed.create_term("Token", "Basics", "A unit of text.")

        terms = json.loads((out / "terms.json").read_text())
        assert terms == [term.to_dict()]
        categories = json.loads((out / "categories.json").read_text())
        assert categories[0]["name"] == "Basics"

    def test_legacy_format_omits_ids(self, tmp_path):
        out = tmp_path / "out"
        with GlossaryEditor(persist_dir=out, legacy_format=True) as ed:
            ed.create_category("Basics")
            ed.create_term("Token", "Basics", "A unit of text.")

        terms = json.loads((out / "terms.json").read_text())
        assert "id" not in terms[0]

    def test_batch_writes_once(self, tmp_path, monkeypatch):
        calls = []
        import glossary_editor.exporter as exporter
        original = exporter.export_to_json

        def counting(*args, **kwargs):
            calls.append(args)
            return original(*args, **kwargs)

        monkeypatch.setattr(exporter, "export_to_json", counting)
        with GlossaryEditor(persist_dir=tmp_path / "out") as ed:
            with ed.batch():
                ed.create_category("Basics")
                ed.create_term("A", "Basics", "First.")
                ed.create_term("B", "Basics", "Second.")
        assert len(calls) == 1

    def test_failed_save_keeps_mutation(self, tmp_path, monkeypatch, caplog):
        import glossary_editor.exporter as exporter

        def failing(*args, **kwargs):
            raise ExportError("disk full")

        monkeypatch.setattr(exporter, "export_to_json", failing)
        with GlossaryEditor(persist_dir=tmp_path / "out") as ed:
            ed.create_category("Basics")
            term = ed.create_term("Token", "Basics", "A unit of text.")
            assert ed.get_term(term.id) == term
        assert "Automatic save" in caplog.text

    def test_explicit_export_propagates(self, editor_with_categories, monkeypatch):
        import glossary_editor.exporter as exporter

        def failing(*args, **kwargs):
            raise ExportError("disk full")

        monkeypatch.setattr(exporter, "export_to_json", failing)
        with pytest.raises(ExportError):
            editor_with_categories.export_json("/nonexistent")

    def test_export_without_destination(self, editor):
        with pytest.raises(ExportError):
            editor.export_json()


class TestConcurrency:

    def test_concurrent_writers_and_readers(self, editor_with_categories):
        ed = editor_with_categories
        errors = []

        def writer(n):
            try:
                for i in range(20):
                    ed.create_term(f"T{n}-{i}", "Basics", f"Definition {i}.")
            except Exception as e:  # pragma: no cover
                errors.append(e)

        def reader():
            try:
                for _ in range(20):
                    for term in ed.find_terms(search="definition"):
                        assert term.definition.startswith("Definition")
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        threads += [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        terms = ed.list_terms()
        assert len(terms) == 80
        assert len({t.id for t in terms}) == 80
