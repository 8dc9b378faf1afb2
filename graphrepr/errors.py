"""
Error types for graphrepr.

A call to the formatter ends in exactly one of: a source string, or one
of the errors below. Nothing is retried and no partial text is returned.
"""

from __future__ import annotations


class ReprError(Exception):
    """Base class for every error raised while rendering a value."""


class UnsupportedShapeError(ReprError, TypeError):
    """The value (or something reachable from it) has no supported shape."""

    def __init__(self, value: object, path: str = "root") -> None:
        self.value_type = type(value)
        self.path = path
        super().__init__(
            f"cannot represent {_type_label(self.value_type)} at {path}: "
            f"unsupported shape ({_short_repr(value)})"
        )


class CycleError(ReprError, ValueError):
    """A cycle passes through an immutable container and cannot be patched."""

    def __init__(self, container: object, label: str) -> None:
        self.container_type = type(container)
        self.label = label
        super().__init__(
            f"cycle closes through immutable {_type_label(self.container_type)} "
            f"at {label}; rebuild from a mutable ancestor instead"
        )


class ReprDepthError(ReprError, RecursionError):
    """Nesting exceeded the configured max_depth."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"value nests deeper than max_depth={max_depth}")


def _type_label(tp: type) -> str:
    mod = tp.__module__
    if mod == "builtins":
        return tp.__qualname__
    return f"{mod}.{tp.__qualname__}"


def _short_repr(value: object, limit: int = 60) -> str:
    try:
        text = repr(value)
    except Exception as e:  # repr of arbitrary user objects may raise
        text = f"<repr failed: {type(e).__name__}>"
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text
