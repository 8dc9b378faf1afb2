"""
Expression formatter.

Turns one value into Python expression text, recursively, consulting the
OccurrenceRecord to decide which identities need an alias and the
NameBindings to detect back-edges.

Per value:

  1. FINALIZED alias        -> the alias name (this is how sharing is written)
  2. RESERVED               -> back-edge; handled by the *container*, which
                               leaves a placeholder (or omits the entry) and
                               records a PatchEntry
  3. shared (seen twice+)   -> reserve before descending
  4. build the construction text from the children
  5. reserved at this point -> "(_aN := <construction>)", now FINALIZED

A container that records a patch is itself reserved on the spot if it was
not already, because the patch needs a name to address it.

Runtime helpers the text refers to (b64decode, datetime, ...) are
collected in `imports` and bound by the assembler.
"""

from __future__ import annotations

import datetime
import math
import sys
import urllib.parse
from typing import Any, Callable, Dict, List, Optional, Tuple

from graphrepr.bindings import BindingState, NameBindings
from graphrepr.codec import DECODER, encode_bytes
from graphrepr.errors import CycleError, ReprDepthError, UnsupportedShapeError
from graphrepr.occurrences import OccurrenceRecord
from graphrepr.patches import PatchList
from graphrepr.shapes import Shape, classify, record_keys
from graphrepr.tokens import Token

# frames per nesting level: format, the handler, and slack for key formatting
_FRAMES_PER_LEVEL = 3
_STACK_RESERVE = 100

# ints past this size are written in hex: str(int) is capped at 4300 digits
_HEX_INT_BITS = 4096

_EPOCH_NAIVE = datetime.datetime(1970, 1, 1)
_EPOCH_UTC = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
_EPOCH_DATE = datetime.date(1970, 1, 1)
_ONE_US = datetime.timedelta(microseconds=1)

_IMMUTABLE_CONTAINERS = (Shape.TUPLE, Shape.FROZEN_SET)


def format_float(x: float) -> str:
    if math.isfinite(x):
        return repr(x)
    if math.isnan(x):
        return "float('nan')"
    return "float('inf')" if x > 0 else "float('-inf')"


def default_max_depth() -> int:
    """Deepest nesting the recursive formatter takes under the current recursion limit."""
    return max(1, (sys.getrecursionlimit() - _STACK_RESERVE) // _FRAMES_PER_LEVEL)


def format_int(n: int) -> str:
    if n.bit_length() <= _HEX_INT_BITS:
        return repr(n)
    return hex(n)


class ExpressionFormatter:
    def __init__(self, occurrences: OccurrenceRecord, *, max_depth: Optional[int] = None) -> None:
        self.occurrences = occurrences
        self.bindings = NameBindings()
        self.patches = PatchList()
        self.imports: Dict[str, Tuple[str, str]] = {}
        self.max_depth = default_max_depth() if max_depth is None else max_depth
        self._depth = 0
        self._handlers: Dict[Shape, Callable[[Any, str], str]] = {
            Shape.ORDERED_LIST: self._list,
            Shape.TUPLE: self._tuple,
            Shape.RECORD_MAP: self._record,
            Shape.SET_COLLECTION: self._set,
            Shape.FROZEN_SET: self._frozenset,
            Shape.MAP_COLLECTION: self._map,
            Shape.TYPED_BUFFER_VIEW: self._typed_buffer,
            Shape.RAW_BYTE_BUFFER: self._raw_bytes,
            Shape.DATE_VALUE: self._date,
            Shape.PATTERN_VALUE: self._pattern,
            Shape.URL_VALUE: self._url,
            Shape.OPAQUE_TOKEN: self._token,
        }

    # -------------------------------------------------------------------------
    # entry point
    # -------------------------------------------------------------------------

    def format(self, value: Any, path: str = "root") -> str:
        shape = classify(value)
        if shape is Shape.PRIMITIVE:
            return self._primitive(value)
        if shape is Shape.UNSUPPORTED:
            raise UnsupportedShapeError(value, path)

        state = self.bindings.state(value)
        if state is BindingState.FINALIZED:
            return self.bindings.alias(value)  # type: ignore[return-value]
        if state is BindingState.RESERVED:
            # containers check is_back_edge() before descending
            raise RuntimeError(f"back-edge at {path} reached the formatter directly")

        if self.occurrences.is_shared(value):
            self.bindings.reserve(value)

        if self._depth >= self.max_depth:
            raise ReprDepthError(self.max_depth)
        self._depth += 1
        try:
            text = self._handlers[shape](value, path)
        finally:
            self._depth -= 1

        if self.bindings.is_reserved(value):
            name = self.bindings.finalize(value)
            return f"({name} := {text})"
        return text

    def is_back_edge(self, value: Any) -> bool:
        return self.bindings.is_reserved(value)

    def needs_patch(self, value: Any) -> bool:
        """
        True if *value* cannot be written in place: it is a back-edge, or an
        immutable container (tuple, frozenset) that reaches a back-edge
        through immutable containers only. The nearest mutable container
        then leaves the slot out and fills it from a patch, when every
        alias is bound.
        """
        if self.is_back_edge(value):
            return True
        stack = [value]
        seen = set()
        while stack:
            item = stack.pop()
            if classify(item) not in _IMMUTABLE_CONTAINERS or id(item) in seen:
                continue
            if self.bindings.state(item) is not BindingState.UNBOUND:
                continue
            seen.add(id(item))
            for child in item:
                if self.is_back_edge(child):
                    return True
                stack.append(child)
        return False

    def runtime(self, module: str, attr: str) -> str:
        """Name under which the emitted text refers to module.attr."""
        name = f"_{attr}"
        self.imports.setdefault(name, (module, attr))
        return name

    def _addressable(self, container: Any) -> None:
        # a patch target needs an alias even if it occurs only once
        if self.bindings.state(container) is BindingState.UNBOUND:
            self.bindings.reserve(container)

    # -------------------------------------------------------------------------
    # scalars
    # -------------------------------------------------------------------------

    def _primitive(self, value: Any) -> str:
        tp = type(value)
        if tp is float:
            return format_float(value)
        if tp is complex:
            return f"complex({format_float(value.real)}, {format_float(value.imag)})"
        if tp is not int and tp is not bool and tp is not str and value is not None:
            # decimal.Decimal: extended precision, tagged apart from float
            return f"{self.runtime('decimal', 'Decimal')}({str(value)!r})"
        if tp is int:
            return format_int(value)
        return repr(value)

    # -------------------------------------------------------------------------
    # containers
    # -------------------------------------------------------------------------

    def _list(self, value: list, path: str) -> str:
        parts: List[str] = []
        for i, item in enumerate(value):
            if self.needs_patch(item):
                self.patches.index_assign(value, i, item)
                self._addressable(value)
                parts.append("None")
            else:
                parts.append(self.format(item, f"{path}[{i}]"))
        return "[" + ", ".join(parts) + "]"

    def _tuple(self, value: tuple, path: str) -> str:
        parts: List[str] = []
        for i, item in enumerate(value):
            if self.is_back_edge(item):
                raise CycleError(value, f"{path}[{i}]")
            parts.append(self.format(item, f"{path}[{i}]"))
        if len(parts) == 1:
            return f"({parts[0]},)"
        return "(" + ", ".join(parts) + ")"

    def _record(self, value: Any, path: str) -> str:
        attrs = vars(value)
        parts: List[str] = []
        for key in record_keys(value, path):
            item = attrs[key]
            if self.needs_patch(item):
                self.patches.key_assign(value, key, item)
                self._addressable(value)
                continue
            parts.append(f"{self.format(key)}: {self.format(item, f'{path}.{key}')}")
        ns = self.runtime("types", "SimpleNamespace")
        if not parts:
            return f"{ns}()"
        return f"{ns}(**{{{', '.join(parts)}}})"

    def _set(self, value: set, path: str) -> str:
        parts: List[str] = []
        for item in value:
            if self.needs_patch(item):
                self.patches.set_add(value, item)
                self._addressable(value)
                continue
            parts.append(self.format(item, f"{path}.<member>"))
        if not parts:
            return "set()"
        return "{" + ", ".join(parts) + "}"

    def _frozenset(self, value: frozenset, path: str) -> str:
        parts: List[str] = []
        for item in value:
            if self.is_back_edge(item):
                raise CycleError(value, f"{path}.<member>")
            parts.append(self.format(item, f"{path}.<member>"))
        if not parts:
            return "frozenset()"
        return "frozenset({" + ", ".join(parts) + "})"

    def _map(self, value: dict, path: str) -> str:
        parts: List[str] = []
        for i, (k, v) in enumerate(value.items()):
            if self.needs_patch(k) or self.needs_patch(v):
                # both sides are rendered when the patch is replayed
                self.patches.map_set(value, k, v)
                self._addressable(value)
                continue
            key_text = self.format(k, f"{path}.<key #{i}>")
            parts.append(f"{key_text}: {self.format(v, f'{path}[{key_text}]')}")
        return "{" + ", ".join(parts) + "}"

    # -------------------------------------------------------------------------
    # leaves
    # -------------------------------------------------------------------------

    def _decode(self, data: bytes) -> str:
        return f"{self.runtime(*DECODER)}({encode_bytes(data)!r})"

    def _typed_buffer(self, value: Any, path: str) -> str:
        arr = self.runtime("array", "array")
        return f"{arr}({value.typecode!r}, {self._decode(value.tobytes())})"

    def _raw_bytes(self, value: Any, path: str) -> str:
        if type(value) is bytearray:
            return f"bytearray({self._decode(value)})"
        return self._decode(value)

    def _date(self, value: Any, path: str) -> str:
        td = self.runtime("datetime", "timedelta")
        if type(value) is datetime.date:
            days = (value - _EPOCH_DATE).days
            return f"{self.runtime('datetime', 'date')}(1970, 1, 1) + {td}(days={days})"

        text = self._datetime(value, path, td)
        if value.fold:
            return f"({text}).replace(fold=1)"
        return text

    def _datetime(self, value: datetime.datetime, path: str, td: str) -> str:
        dt = self.runtime("datetime", "datetime")
        tz = value.tzinfo
        if tz is None:
            us = (value - _EPOCH_NAIVE) // _ONE_US
            return f"{dt}(1970, 1, 1) + {td}(microseconds={us})"
        if type(tz) is not datetime.timezone:
            raise UnsupportedShapeError(tz, f"{path}.tzinfo")

        tzn = self.runtime("datetime", "timezone")
        us = (value - _EPOCH_UTC) // _ONE_US
        text = f"{dt}(1970, 1, 1, tzinfo={tzn}.utc) + {td}(microseconds={us})"
        if tz == datetime.timezone.utc and tz.tzname(None) == "UTC":
            return text
        return f"({text}).astimezone({self._timezone(tz)})"

    def _timezone(self, tz: datetime.timezone) -> str:
        offset = tz.utcoffset(None)
        tzn = self.runtime("datetime", "timezone")
        td = self.runtime("datetime", "timedelta")
        text = f"{tzn}({td}(seconds={offset.total_seconds()!r})"
        name = tz.tzname(None)
        if name != datetime.timezone(offset).tzname(None):
            text += f", {name!r}"
        return text + ")"

    def _pattern(self, value: Any, path: str) -> str:
        return f"{self.runtime('re', 'compile')}({value.pattern!r}, {value.flags})"

    def _url(self, value: Any, path: str) -> str:
        attr = "urlsplit" if type(value) is urllib.parse.SplitResult else "urlparse"
        return f"{self.runtime('urllib.parse', attr)}({value.geturl()!r})"

    def _token(self, value: Any, path: str) -> str:
        if type(value) is not Token:
            return "object()"
        tok = self.runtime("graphrepr.tokens", "Token")
        if value.description is None:
            return f"{tok}()"
        return f"{tok}.for_key({value.description!r})"
