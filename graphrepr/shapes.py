"""
Variant classifier.

Every value maps to exactly one Shape, decided by its *exact* type.
isinstance() is never used: a list subclass is not a list here, it is
UNSUPPORTED, so it is never silently rebuilt as its base class.

    classify(value)          -> Shape
    children(value, shape)   -> ordered (label, child) pairs

The child order produced here is the order the occurrence walk and the
formatter both use, which keeps generated alias names stable.
"""

from __future__ import annotations

import array
import datetime
import decimal
import enum
import re
import types
import urllib.parse
from typing import Any, Dict, Iterator, List, Tuple

from graphrepr.errors import UnsupportedShapeError
from graphrepr.tokens import Token


class Shape(enum.Enum):
    PRIMITIVE = "primitive"
    ORDERED_LIST = "list"
    TUPLE = "tuple"
    RECORD_MAP = "record"
    SET_COLLECTION = "set"
    FROZEN_SET = "frozenset"
    MAP_COLLECTION = "map"
    TYPED_BUFFER_VIEW = "typed_buffer"
    RAW_BYTE_BUFFER = "raw_bytes"
    DATE_VALUE = "date"
    PATTERN_VALUE = "pattern"
    URL_VALUE = "url"
    OPAQUE_TOKEN = "token"
    UNSUPPORTED = "unsupported"


PatternType = type(re.compile(""))

_SHAPE_BY_TYPE: Dict[type, Shape] = {
    type(None): Shape.PRIMITIVE,
    bool: Shape.PRIMITIVE,
    int: Shape.PRIMITIVE,
    float: Shape.PRIMITIVE,
    complex: Shape.PRIMITIVE,
    str: Shape.PRIMITIVE,
    decimal.Decimal: Shape.PRIMITIVE,
    list: Shape.ORDERED_LIST,
    tuple: Shape.TUPLE,
    types.SimpleNamespace: Shape.RECORD_MAP,
    set: Shape.SET_COLLECTION,
    frozenset: Shape.FROZEN_SET,
    dict: Shape.MAP_COLLECTION,
    array.array: Shape.TYPED_BUFFER_VIEW,
    bytes: Shape.RAW_BYTE_BUFFER,
    bytearray: Shape.RAW_BYTE_BUFFER,
    datetime.datetime: Shape.DATE_VALUE,
    datetime.date: Shape.DATE_VALUE,
    PatternType: Shape.PATTERN_VALUE,
    urllib.parse.SplitResult: Shape.URL_VALUE,
    urllib.parse.ParseResult: Shape.URL_VALUE,
    Token: Shape.OPAQUE_TOKEN,
    object: Shape.OPAQUE_TOKEN,
}


def classify(value: Any) -> Shape:
    """Return the Shape of *value*; UNSUPPORTED is a real answer, not a guess."""
    return _SHAPE_BY_TYPE.get(type(value), Shape.UNSUPPORTED)


def is_node(shape: Shape) -> bool:
    """True for shapes tracked by identity (everything but primitives)."""
    return shape is not Shape.PRIMITIVE and shape is not Shape.UNSUPPORTED


# =============================================================================
# Child enumeration
# =============================================================================

class Edge(enum.Enum):
    INDEX = "index"
    ATTR_KEY = "attr_key"
    ATTR = "attr"
    MEMBER = "member"
    MAP_KEY = "map_key"
    MAP_VALUE = "map_value"


Label = Tuple[Edge, Any]


def record_keys(ns: types.SimpleNamespace, path: str = "root") -> List[str]:
    """Attribute names of a record in emission order: sorted by code point."""
    keys = list(vars(ns))
    for key in keys:
        if type(key) is not str:
            raise UnsupportedShapeError(key, f"{path}.<key>")
    return sorted(keys)


def children(value: Any, shape: Shape, path: str = "root") -> Iterator[Tuple[Label, Any]]:
    """
    Yield (label, child) pairs for a container, in emission order.

    Records yield each key before its value since keys are formatted too.
    Maps yield key then value per pair, in insertion order.
    Leaf shapes yield nothing.
    """
    if shape is Shape.ORDERED_LIST or shape is Shape.TUPLE:
        for i, item in enumerate(value):
            yield (Edge.INDEX, i), item
    elif shape is Shape.RECORD_MAP:
        attrs = vars(value)
        for key in record_keys(value, path):
            yield (Edge.ATTR_KEY, key), key
            yield (Edge.ATTR, key), attrs[key]
    elif shape is Shape.SET_COLLECTION or shape is Shape.FROZEN_SET:
        for item in value:
            yield (Edge.MEMBER, None), item
    elif shape is Shape.MAP_COLLECTION:
        for i, (k, v) in enumerate(value.items()):
            yield (Edge.MAP_KEY, i), k
            yield (Edge.MAP_VALUE, k), v


def describe_label(parent_path: str, label: Label) -> str:
    """Human path segment for error messages, e.g. root[2].name."""
    edge, data = label
    if edge is Edge.INDEX:
        return f"{parent_path}[{data}]"
    if edge is Edge.ATTR:
        return f"{parent_path}.{data}"
    if edge is Edge.ATTR_KEY:
        return f"{parent_path}.<key {data!r}>"
    if edge is Edge.MEMBER:
        return f"{parent_path}.<member>"
    if edge is Edge.MAP_KEY:
        return f"{parent_path}.<key #{data}>"
    return f"{parent_path}[{_short(data)}]"


def _short(key: Any) -> str:
    try:
        text = repr(key)
    except Exception:
        text = "?"
    return text if len(text) <= 40 else text[:37] + "..."
