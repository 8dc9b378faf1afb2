"""
Deferred patch list.

When a child of a container turns out to be a back-edge, it cannot be
written inline: the value it names is still being built. The container
is built without it and a PatchEntry records the mutation that attaches
it once every construction has finished. Entries are kept in discovery
order and replayed in that order.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator, List


class PatchKind(enum.Enum):
    INDEX_ASSIGN = "index_assign"   # target[index] = value
    KEY_ASSIGN = "key_assign"       # setattr(target, key, value)
    SET_ADD = "set_add"             # target.add(value)
    MAP_SET = "map_set"             # target[key] = value


@dataclass(frozen=True)
class PatchEntry:
    kind: PatchKind
    target: Any
    value: Any
    key: Any = None


class PatchList:
    """Append-only list of PatchEntry; may grow while it is being replayed."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: List[PatchEntry] = []

    def add(self, entry: PatchEntry) -> None:
        self._entries.append(entry)

    def index_assign(self, target: Any, index: int, value: Any) -> None:
        self.add(PatchEntry(PatchKind.INDEX_ASSIGN, target, value, index))

    def key_assign(self, target: Any, key: str, value: Any) -> None:
        self.add(PatchEntry(PatchKind.KEY_ASSIGN, target, value, key))

    def set_add(self, target: Any, value: Any) -> None:
        self.add(PatchEntry(PatchKind.SET_ADD, target, value))

    def map_set(self, target: Any, key: Any, value: Any) -> None:
        self.add(PatchEntry(PatchKind.MAP_SET, target, value, key))

    def drain(self) -> Iterator[PatchEntry]:
        """Yield entries in order, including ones appended during iteration."""
        i = 0
        while i < len(self._entries):
            yield self._entries[i]
            i += 1

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PatchEntry]:
        return iter(list(self._entries))
