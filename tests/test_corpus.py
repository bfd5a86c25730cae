#!/usr/bin/env python3
"""
KUBEVAULT CORPUS SUITE
----------------------
Document splitting, parse failures and the two traversal primitives.

Author: KubeVault Team
Date: 2026-10-17
"""

import io

import pytest

from kubevault.core.corpus import Corpus, as_mapping, as_sequence, as_str, lookup
from kubevault.core.errors import ManifestParseError

CONTENTS = """---
a: "foo"
nested:
  - name: a
  - name: b
---
- b: "bar"
- b: baz
- c:
    b: 4
    d: 1
    e: 2
"""


@pytest.fixture
def corpus():
    return Corpus.from_text(CONTENTS)


def test_can_read(corpus):
    assert len(corpus) == 2, "Didn't find two documents"
    doc1, doc2 = corpus.documents
    assert isinstance(doc1, dict) and "a" in doc1
    assert isinstance(doc2, list) and len(doc2) == 3


def test_blank_and_comment_segments_are_dropped():
    """SPLIT TEST: N segments with M blank/comment-only ones yield N-M documents."""
    text = "---\n# just a comment\n---\n\n---\nfirst: 1\n---\n- second\n---\n   \n"
    corpus = Corpus.from_text(text)
    assert list(corpus) == [{"first": 1}, ["second"]]


def test_top_level_scalar_is_a_document():
    corpus = Corpus.from_text("hello\n---\n42\n")
    assert corpus.documents == ("hello", 42)


def test_from_stream_reads_everything():
    corpus = Corpus.from_stream(io.StringIO(CONTENTS))
    assert len(corpus) == 2


def test_parse_error_names_the_segment():
    text = "ok: 1\n---\nkey: value: oops\n"
    with pytest.raises(ManifestParseError) as info:
        Corpus.from_text(text)
    assert info.value.segment == 2
    assert "segment 2" in str(info.value)


def test_self_referencing_anchor_is_a_parse_error():
    text = "kind: Service\n---\nspec: &loop\n  containers: [*loop]\n"
    with pytest.raises(ManifestParseError) as info:
        Corpus.from_text(text)
    assert info.value.segment == 2
    assert "recursive alias" in str(info.value)


def test_shared_anchor_is_not_recursive():
    text = "base: &b {name: x}\nfirst: *b\nsecond: [*b]\n"
    names = Corpus.from_text(text).filter_map_mappings(lambda m: as_str(m.get("name")))
    assert names == ["x", "x", "x"]


def test_segment_numbering_counts_skipped_segments():
    text = "---\n# comment only\n---\nbroken: [unclosed\n"
    with pytest.raises(ManifestParseError) as info:
        Corpus.from_text(text)
    assert info.value.segment == 3


def test_can_visit_mappings(corpus):
    """TOTAL TRAVERSAL: every mapping at every depth is visited once."""
    count = sum(corpus.filter_map_mappings(lambda _m: 1))
    assert count == 7, "unexpected number of mappings"


def test_mapping_count_mixed_documents():
    text = "top:\n  - x: 1\n  - y: 2\n---\n- a: 1\n- plain\n- b: 2\n"
    corpus = Corpus.from_text(text)
    assert sum(corpus.filter_map_mappings(lambda _m: 1)) == 5


def test_can_filter_mappings(corpus):
    b_count = sum(corpus.filter_map_mappings(lambda m: 1 if "b" in m else None))
    assert b_count == 3, "unexpected count of 'b' keys"


def test_predicate_results_keep_document_order():
    corpus = Corpus.from_text('a: "foo"\nnested:\n  - name: "x"\n  - name: "y"\n')
    values = corpus.filter_map_mappings(lambda m: as_str(m.get("name")))
    assert values == ["x", "y"]


def test_mapping_keys_are_not_visited():
    corpus = Corpus([{"outer": {"inner": 1}}])
    seen = corpus.filter_map_mappings(lambda m: sorted(m))
    assert seen == [["outer"], ["inner"]]


def test_values_from_includes_root_first():
    root = {"a": ["x", {"b": "y"}]}
    kinds = Corpus.filter_map_values_from(root, lambda v: type(v).__name__)
    assert kinds == ["dict", "list", "str", "dict", "str"]


def test_values_from_filters_scalars():
    root = {"name": "api", "args": ["--x", 3, None, "--y"]}
    assert Corpus.filter_map_values_from(root, as_str) == ["api", "--x", "--y"]


def test_deep_documents_do_not_exhaust_the_stack():
    doc = leaf = {}
    for _ in range(5000):
        leaf["next"] = {}
        leaf = leaf["next"]
    corpus = Corpus([doc])
    assert sum(corpus.filter_map_mappings(lambda _m: 1)) == 5001


@pytest.mark.parametrize("value,mapping,sequence,text", [
    ({"a": 1}, {"a": 1}, None, None),
    ([1], None, [1], None),
    ("s", None, None, "s"),
    (5, None, None, None),
    (None, None, None, None),
])
def test_accessors(value, mapping, sequence, text):
    assert as_mapping(value) == mapping
    assert as_sequence(value) == sequence
    assert as_str(value) == text


def test_lookup_stops_on_missing_or_foreign_nodes():
    node = {"a": {"b": {"c": "found"}}, "s": "scalar"}
    assert lookup(node, "a", "b", "c") == "found"
    assert lookup(node, "a", "missing", "c") is None
    assert lookup(node, "s", "b") is None
    assert lookup(node) is node
