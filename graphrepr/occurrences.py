"""
Occurrence tracker.

One walk over the whole value graph before any text is produced. Each
identity is recorded as "seen once" (False) on first visit and flipped
to "seen more than once" (True) on any later visit. Children are only
pushed from the first visit, so cycles and shared subgraphs are walked
exactly once.

The walk uses an explicit work stack rather than host recursion, so
arbitrarily deep graphs do not exhaust the call stack here. Children are
pushed in reverse so they are visited in the same order the formatter
will visit them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from graphrepr.errors import UnsupportedShapeError
from graphrepr.shapes import Shape, children, classify, describe_label, is_node


class OccurrenceRecord:
    """identity -> "occurs more than once or is self-referential"."""

    __slots__ = ("_seen",)

    def __init__(self) -> None:
        self._seen: Dict[int, bool] = {}

    def visit(self, value: Any) -> bool:
        """
        Record a visit. Returns True if this is the first visit (caller
        should descend), False if the identity was already recorded.
        """
        key = id(value)
        if key in self._seen:
            self._seen[key] = True
            return False
        self._seen[key] = False
        return True

    def is_shared(self, value: Any) -> bool:
        return self._seen.get(id(value), False)

    def __contains__(self, value: Any) -> bool:
        return id(value) in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    @property
    def shared_count(self) -> int:
        return sum(1 for v in self._seen.values() if v)


def track_occurrences(root: Any) -> OccurrenceRecord:
    """
    Walk *root* once and return its OccurrenceRecord.

    Raises:
        UnsupportedShapeError: if any reachable value has no supported shape.
    """
    record = OccurrenceRecord()
    stack: List[Tuple[Any, str]] = [(root, "root")]

    while stack:
        value, path = stack.pop()
        shape = classify(value)

        if shape is Shape.UNSUPPORTED:
            raise UnsupportedShapeError(value, path)
        if not is_node(shape):
            continue
        if not record.visit(value):
            continue

        pending = [
            (child, describe_label(path, label))
            for label, child in children(value, shape, path)
        ]
        stack.extend(reversed(pending))

    return record
