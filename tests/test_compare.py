"""graph_equal: structure plus aliasing."""

import datetime
import decimal
import types

import pytest

from graphrepr.compare import graph_equal
from graphrepr.errors import UnsupportedShapeError
from graphrepr.tokens import Token


def test_plain_values():
    assert graph_equal({"a": [1, 2.5, "x"]}, {"a": [1, 2.5, "x"]})
    assert not graph_equal({"a": [1]}, {"a": [2]})
    assert not graph_equal([1, 2], [1, 2, 3])


def test_exact_types():
    assert not graph_equal(True, 1)
    assert not graph_equal([1], (1,))
    assert not graph_equal(1, 1.0)


def test_float_edge_values():
    assert graph_equal(float("nan"), float("nan"))
    assert not graph_equal(0.0, -0.0)
    assert graph_equal(complex(float("nan"), -0.0), complex(float("nan"), -0.0))
    assert not graph_equal(decimal.Decimal("1.0"), decimal.Decimal("1.00"))


def test_lost_sharing_is_detected():
    inner = [1]
    assert graph_equal([inner, inner], [inner, inner])
    assert not graph_equal([inner, inner], [[1], [1]])


def test_invented_sharing_is_detected():
    other = [1]
    assert not graph_equal([[1], [1]], [other, other])


def test_invented_sharing_of_immutables_is_allowed():
    assert graph_equal(((1, 2), (1, 2)), ((1, 2),) * 2)


def test_cycles():
    a = []
    a.append(a)
    b = []
    b.append(b)
    assert graph_equal(a, b)
    c = [[]]
    c[0].append(c[0])
    assert not graph_equal(a, [c[0]])


def test_records_ignore_attribute_order():
    x = types.SimpleNamespace(a=1, b=2)
    y = types.SimpleNamespace(b=2, a=1)
    assert graph_equal(x, y)
    assert not graph_equal(x, types.SimpleNamespace(a=1))


def test_maps_ignore_order():
    assert graph_equal({"a": 1, "b": 2}, {"b": 2, "a": 1})
    assert not graph_equal({"a": 1}, {"b": 1})


def test_dates_compare_tzinfo():
    naive = datetime.datetime(2020, 1, 1)
    aware = datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)
    assert not graph_equal(naive, aware)
    assert graph_equal(aware, aware.replace())


def test_tokens():
    assert graph_equal(Token("a"), Token("a"))
    assert not graph_equal(Token("a"), Token("b"))
    assert graph_equal(object(), object())


def test_unsupported_raises():
    with pytest.raises(UnsupportedShapeError):
        graph_equal([len], [len])


def test_token_keys_match_by_identity_map():
    a, b = Token(), Token()
    assert graph_equal({a: 1}, {b: 1})
    assert graph_equal({object(): 1, "x": 2}, {object(): 1, "x": 2})
    assert graph_equal({Token(), Token()}, {Token(), Token()})
    assert not graph_equal({Token("p"): 1}, {Token("q"): 1})
    assert not graph_equal({a: 1}, {b: 2})


def test_token_key_must_meet_its_partner():
    a, b = Token(), Token()
    c, d = Token(), Token()
    # a pairs with c through the list, so {a: ...} must line up with {c: ...}
    assert graph_equal([a, {a: 1}], [c, {c: 1}])
    assert not graph_equal([a, {a: 1}], [c, {d: 1}])
    assert not graph_equal([a, {b}], [c, {c}])
