"""Tests for previous/next navigation and related-term links."""

from glossary_editor.models import TermModel
from glossary_editor.navigation import find_neighbors, related_links, resolve_related
from glossary_editor.query import TermQuery


def _term(id, name):
    return TermModel(id=id, term=name, category="Basics", definition="Some definition.")


class TestFindNeighbors:

    def test_middle(self):
        seq = [_term(1, "A"), _term(2, "B"), _term(3, "C")]
        n = find_neighbors(seq, 2)
        assert n.previous.id == 1
        assert n.next.id == 3
        assert n.position == 1
        assert n.total == 3

    def test_first_has_no_previous(self):
        seq = [_term(1, "A"), _term(2, "B")]
        n = find_neighbors(seq, 1)
        assert n.previous is None
        assert n.next.id == 2

    def test_last_has_no_next(self):
        seq = [_term(1, "A"), _term(2, "B")]
        n = find_neighbors(seq, 2)
        assert n.previous.id == 1
        assert n.next is None

    def test_single_item(self):
        n = find_neighbors([_term(1, "A")], 1)
        assert n.previous is None and n.next is None
        assert n.position == 0

    def test_absent_id(self):
        n = find_neighbors([_term(1, "A")], 99)
        assert n.previous is None and n.next is None
        assert n.position is None

    def test_neighbors_adjacent_in_sequence(self):
        seq = [_term(i, name) for i, name in enumerate("ABCDE", start=1)]
        for index, term in enumerate(seq):
            n = find_neighbors(seq, term.id)
            if n.previous is not None:
                assert seq[index - 1] == n.previous
            if n.next is not None:
                assert seq[index + 1] == n.next


class TestEditorNeighbors:

    def test_follows_list_order(self, editor_with_data):
        ed, t1, t2, t3, t4 = editor_with_data
        # alphabetical: attention, Embedding, Token, Transformer
        n = ed.get_neighbors(t2.id)
        assert n.previous == t4
        assert n.next == t1

    def test_follows_learning_path_order(self, editor_with_data):
        ed, t1, t2, t3, t4 = editor_with_data
        n = ed.get_neighbors(t1.id, TermQuery(learning_path="intro"))
        assert n.previous == t2
        assert n.next == t3

    def test_term_outside_filtered_list(self, editor_with_data):
        ed, t1, t2, t3, t4 = editor_with_data
        n = ed.get_neighbors(t1.id, TermQuery(category="Models"))
        assert n.previous is None and n.next is None

    def test_deleted_term_has_no_neighbors(self, editor_with_data):
        ed, t1, *_ = editor_with_data
        ed.delete_term(t1.id)
        n = ed.get_neighbors(t1.id)
        assert n.position is None


class TestRelated:

    def test_resolve_exact(self, editor_with_data):
        ed, t1, *_ = editor_with_data
        assert ed.resolve_related("Token") == t1

    def test_resolve_is_case_sensitive(self, editor_with_data):
        ed = editor_with_data[0]
        assert ed.resolve_related("token") is None

    def test_links(self, editor_with_data):
        ed, t1, t2, t3, t4 = editor_with_data
        links = ed.related_links(t2.id)
        assert [link.name for link in links] == ["Token", "Vector Database"]
        assert links[0].is_link and links[0].target == t1
        assert not links[1].is_link

    def test_links_unknown_term(self, editor):
        assert editor.related_links(42) == []

    def test_pure_functions(self):
        a = TermModel(id=1, term="A", category="c", definition="d", related=("B",))
        b = _term(2, "B")
        assert resolve_related([a, b], "B") == b
        assert related_links(a, [a, b])[0].target == b
