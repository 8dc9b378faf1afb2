"""
Tests for the occurrence tracker.
"""

import types

import pytest

from graphrepr.errors import UnsupportedShapeError
from graphrepr.occurrences import OccurrenceRecord, track_occurrences
from graphrepr.tokens import Token


def test_tree_has_no_shared_nodes():
    value = {"a": [1, 2], "b": {"c": (3,)}}
    rec = track_occurrences(value)
    assert len(rec) == 4  # dict, list, inner dict, tuple
    assert rec.shared_count == 0


def test_primitives_are_not_tracked():
    rec = track_occurrences([1, "x", None, 2.5])
    assert len(rec) == 1


def test_shared_subobject_is_marked():
    inner = [1]
    outer = [inner, inner]
    rec = track_occurrences(outer)
    assert rec.is_shared(inner)
    assert not rec.is_shared(outer)


def test_self_reference_marks_the_node():
    w = []
    w.append(w)
    rec = track_occurrences(w)
    assert rec.is_shared(w)
    assert len(rec) == 1


def test_children_walked_only_from_first_visit():
    # the shared list holds a list that must not be counted as shared
    leaf = [0]
    shared = [leaf]
    rec = track_occurrences([shared, shared])
    assert rec.is_shared(shared)
    assert not rec.is_shared(leaf)


def test_same_token_twice_is_shared_distinct_tokens_are_not():
    t = Token("x")
    rec = track_occurrences([t, t, Token("x")])
    assert rec.is_shared(t)
    assert rec.shared_count == 1


def test_record_keys_and_values_are_walked():
    target = [1]
    ns = types.SimpleNamespace(a=target, b=target)
    rec = track_occurrences(ns)
    assert rec.is_shared(target)


def test_deep_chain_does_not_exhaust_the_stack():
    value = leaf = []
    for _ in range(20000):
        nxt = []
        leaf.append(nxt)
        leaf = nxt
    rec = track_occurrences(value)
    assert len(rec) == 20001


def test_unsupported_value_reports_path():
    class Opaque:
        pass

    with pytest.raises(UnsupportedShapeError) as exc:
        track_occurrences({"k": [1, Opaque()]})
    assert "root['k'][1]" in str(exc.value)
    assert exc.value.value_type is Opaque


def test_visit_returns_true_only_first_time():
    rec = OccurrenceRecord()
    x = []
    assert rec.visit(x) is True
    assert rec.visit(x) is False
    assert rec.is_shared(x)
    assert x in rec
