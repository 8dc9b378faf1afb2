"""
Opaque unique tokens.

A Token carries identity and an optional description, nothing else.

    Token()             -> fresh token, never equal to any other
    Token("tag")        -> fresh token with a description
    Token.for_key("k")  -> interned: every call with "k" returns the same token

Emitted source rebuilds described tokens through Token.for_key() and
undescribed ones through Token(). Two independently created tokens that
share a description therefore come back as one interned token unless
they were reached through aliasing. That is a known fidelity limit.
"""

from __future__ import annotations

from typing import Dict, Optional

_REGISTRY: Dict[str, "Token"] = {}


class Token:
    __slots__ = ("_description", "__weakref__")

    def __init__(self, description: Optional[str] = None) -> None:
        if description is not None and not isinstance(description, str):
            raise TypeError(f"description must be str or None, got {type(description).__name__}")
        self._description = description

    @property
    def description(self) -> Optional[str]:
        return self._description

    @classmethod
    def for_key(cls, key: str) -> "Token":
        """Return the interned token for *key*, creating it on first use."""
        if not isinstance(key, str):
            raise TypeError(f"key must be str, got {type(key).__name__}")
        tok = _REGISTRY.get(key)
        if tok is None:
            tok = cls(key)
            _REGISTRY[key] = tok
        return tok

    @staticmethod
    def key_for(token: "Token") -> Optional[str]:
        """Interning key of *token*, or None if it was never interned."""
        desc = token.description
        if desc is not None and _REGISTRY.get(desc) is token:
            return desc
        return None

    def __repr__(self) -> str:
        if self._description is None:
            return "Token()"
        return f"Token({self._description!r})"

    def __reduce__(self):
        # pickle keeps interned tokens interned
        key = Token.key_for(self)
        if key is not None:
            return (Token.for_key, (key,))
        return (Token, (self._description,))
