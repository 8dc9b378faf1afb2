"""
Graph-aware equality.

graph_equal(a, b) is True when b is a faithful rebuild of a:

  - same exact types and scalar values at every position (True != 1,
    -0.0 != 0.0, nan == nan);
  - same container contents (dict/record order is not compared);
  - same aliasing: identities of a and b correspond one-to-one, so a
    shared sub-object in a is shared in b and a cycle in a is the same
    cycle in b. Equal immutable values (tuples, bytes, dates, ...) may be
    merged in b.

Plain == cannot do this: it recurses forever on cycles and cannot see
aliasing. The walk uses an explicit stack, like the occurrence tracker.

Set members and dict keys are matched with ==, except tokens, which are
matched through the identity map once the rest of the graph has been
walked. A token nested inside a tuple key still has to be the same
(interned) token.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from graphrepr.errors import UnsupportedShapeError
from graphrepr.formatter import format_float
from graphrepr.shapes import Shape, classify
from graphrepr.tokens import Token

_Pair = Tuple[Any, Any]
# (tokens in x, tokens in y, x map or None, y map or None)
_Pending = Tuple[List[Any], List[Any], Optional[dict], Optional[dict]]

# Immutable shapes: the rebuilt side may merge equal values (the compiler
# folds constant tuples, re caches patterns), so only sharing in the
# original has to be preserved, not distinctness.
_MERGEABLE = frozenset([
    Shape.TUPLE,
    Shape.FROZEN_SET,
    Shape.RAW_BYTE_BUFFER,
    Shape.DATE_VALUE,
    Shape.PATTERN_VALUE,
    Shape.URL_VALUE,
])


def _scalar_equal(x: Any, y: Any) -> bool:
    if type(x) is float:
        return format_float(x) == format_float(y)
    if type(x) is complex:
        return (
            format_float(x.real) == format_float(y.real)
            and format_float(x.imag) == format_float(y.imag)
        )
    if type(x) is not int and type(x) is not bool and type(x) is not str and x is not None:
        # Decimal: compare the exact text so NaN and signed zeros count
        return str(x) == str(y)
    return x == y


def _leaf_equal(x: Any, y: Any, shape: Shape) -> bool:
    if shape is Shape.TYPED_BUFFER_VIEW:
        return x.typecode == y.typecode and x.tobytes() == y.tobytes()
    if shape is Shape.DATE_VALUE:
        # naive == aware is simply False, never an error
        return (
            x == y
            and getattr(x, "tzinfo", None) == getattr(y, "tzinfo", None)
            and getattr(x, "fold", 0) == getattr(y, "fold", 0)
        )
    if shape is Shape.PATTERN_VALUE:
        return x.pattern == y.pattern and x.flags == y.flags
    if shape is Shape.OPAQUE_TOKEN:
        if type(x) is Token:
            return x.description == y.description
        return True
    return x == y


def _split_identity_keys(items: Any) -> Tuple[List[Any], List[Any]]:
    """Split set members or dict keys into (tokens, everything else)."""
    tokens: List[Any] = []
    plain: List[Any] = []
    for item in items:
        if classify(item) is Shape.OPAQUE_TOKEN:
            tokens.append(item)
        else:
            plain.append(item)
    return tokens, plain


def _push_children(x: Any, y: Any, shape: Shape, stack: List[_Pair], pending: List[_Pending]) -> bool:
    """Queue child pairs; False if the containers already differ."""
    if shape is Shape.ORDERED_LIST or shape is Shape.TUPLE:
        if len(x) != len(y):
            return False
        stack.extend(reversed(list(zip(x, y))))
        return True

    if shape is Shape.RECORD_MAP:
        xa, ya = vars(x), vars(y)
        if set(xa) != set(ya):
            return False
        for key in xa:
            stack.append((xa[key], ya[key]))
        return True

    if shape is Shape.SET_COLLECTION or shape is Shape.FROZEN_SET:
        x_tokens, x_plain = _split_identity_keys(x)
        y_tokens, y_plain = _split_identity_keys(y)
        if len(x_tokens) != len(y_tokens) or set(x_plain) != set(y_plain):
            return False
        if x_tokens:
            pending.append((x_tokens, y_tokens, None, None))
        return True

    if shape is Shape.MAP_COLLECTION:
        if len(x) != len(y):
            return False
        x_tokens, x_plain = _split_identity_keys(x)
        y_tokens, y_plain = _split_identity_keys(y)
        if len(x_tokens) != len(y_tokens):
            return False
        if x_tokens:
            pending.append((x_tokens, y_tokens, x, y))
        y_keys: Dict[Any, Any] = {k: k for k in y_plain}
        for k in x_plain:
            v = x[k]
            if k not in y_keys:
                return False
            yk = y_keys[k]
            stack.append((k, yk))
            stack.append((v, y[yk]))
        return True

    return _leaf_equal(x, y, shape)


def _pair_tokens(
    entry: _Pending,
    forward: Dict[int, int],
    backward: Dict[int, int],
    stack: List[_Pair],
) -> bool:
    """
    Match token keys or members by identity. Tokens already paired
    elsewhere in the graph must meet their partner; the rest pair with
    any unclaimed token of equal type and description.
    """
    x_tokens, y_tokens, x_map, y_map = entry
    y_by_id = {id(t): t for t in y_tokens}
    pairs: List[_Pair] = []
    unmatched: List[Any] = []
    for t in x_tokens:
        iy = forward.get(id(t))
        if iy is None:
            unmatched.append(t)
        elif iy in y_by_id:
            pairs.append((t, y_by_id.pop(iy)))
        else:
            return False

    free = [u for u in y_by_id.values() if id(u) not in backward]
    for t in unmatched:
        for i, u in enumerate(free):
            if type(u) is type(t) and _leaf_equal(t, u, Shape.OPAQUE_TOKEN):
                pairs.append((t, free.pop(i)))
                break
        else:
            return False

    for t, u in pairs:
        stack.append((t, u))
        if x_map is not None:
            stack.append((x_map[t], y_map[u]))
    return True


def graph_equal(a: Any, b: Any) -> bool:
    """Structural equality plus one-to-one identity correspondence."""
    forward: Dict[int, int] = {}
    backward: Dict[int, int] = {}
    stack: List[_Pair] = [(a, b)]
    pending: List[_Pending] = []

    while stack or pending:
        if not stack:
            if not _pair_tokens(pending.pop(0), forward, backward, stack):
                return False
            continue
        x, y = stack.pop()
        if type(x) is not type(y):
            return False

        shape = classify(x)
        if shape is Shape.UNSUPPORTED:
            raise UnsupportedShapeError(x)
        if shape is Shape.PRIMITIVE:
            if not _scalar_equal(x, y):
                return False
            continue

        ix, iy = id(x), id(y)
        strict = shape not in _MERGEABLE or type(x) is bytearray
        if ix in forward:
            if forward[ix] != iy or (strict and backward.get(iy) != ix):
                return False
            continue
        if strict and iy in backward:
            return False
        forward[ix] = iy
        if strict:
            backward[iy] = ix

        if not _push_children(x, y, shape, stack, pending):
            return False

    return True
