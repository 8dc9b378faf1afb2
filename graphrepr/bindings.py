"""
Alias bindings.

Each identity is in exactly one of three states:

    UNBOUND    no alias; the value is rendered inline (or not yet at all)
    RESERVED   an alias is promised, construction is still in progress
    FINALIZED  construction finished; the alias name can be used directly

A reference that resolves to a RESERVED identity is a back-edge: the
value is an ancestor of the current position and has to be attached
later by a patch. Alias names are handed out at finalization, in the
order constructions complete, and an identity never gets a second one.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, Optional

ALIAS_PREFIX = "_a"


class BindingState(enum.Enum):
    UNBOUND = "unbound"
    RESERVED = "reserved"
    FINALIZED = "finalized"


class NameBindings:
    __slots__ = ("_states", "_names", "_counter")

    def __init__(self) -> None:
        self._states: Dict[int, BindingState] = {}
        self._names: Dict[int, str] = {}
        self._counter = 0

    def state(self, value: Any) -> BindingState:
        return self._states.get(id(value), BindingState.UNBOUND)

    def is_reserved(self, value: Any) -> bool:
        return self._states.get(id(value)) is BindingState.RESERVED

    def reserve(self, value: Any) -> None:
        key = id(value)
        current = self._states.get(key, BindingState.UNBOUND)
        if current is BindingState.FINALIZED:
            raise RuntimeError(f"identity already finalized as {self._names[key]}")
        self._states[key] = BindingState.RESERVED

    def finalize(self, value: Any) -> str:
        """Move a RESERVED identity to FINALIZED and return its new alias."""
        key = id(value)
        if self._states.get(key) is not BindingState.RESERVED:
            raise RuntimeError("finalize() called on an identity that was never reserved")
        name = f"{ALIAS_PREFIX}{self._counter}"
        self._counter += 1
        self._states[key] = BindingState.FINALIZED
        self._names[key] = name
        return name

    def alias(self, value: Any) -> Optional[str]:
        return self._names.get(id(value))

    def __len__(self) -> int:
        return len(self._names)
