"""
Public entry points.

    to_source(value)  -> str        Python expression that rebuilds value
    render(value)     -> Rendering  same text plus counters for tooling

Each call builds its own tracker, bindings and patch list and drops them
when it returns; nothing is shared between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from graphrepr import config
from graphrepr.assembler import assemble
from graphrepr.formatter import ExpressionFormatter
from graphrepr.occurrences import track_occurrences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rendering:
    source: str
    nodes: int
    shared: int
    aliases: int
    patches: int
    imports: Tuple[str, ...]

    def stats(self) -> dict:
        return {
            "nodes": self.nodes,
            "shared": self.shared,
            "aliases": self.aliases,
            "patches": self.patches,
            "imports": list(self.imports),
        }


def render(value: Any, *, max_depth: Optional[int] = None) -> Rendering:
    """
    Render *value* as a self-contained Python expression.

    Raises:
        UnsupportedShapeError: a reachable value has no supported shape.
        CycleError: a back-edge reached a tuple or frozenset directly
            (internal; tuples on a cycle are filled in by patches).
        ReprDepthError: nesting exceeds max_depth.
    """
    depth = config.max_depth(max_depth)
    occurrences = track_occurrences(value)
    fmt = ExpressionFormatter(occurrences, max_depth=depth)
    root_text = fmt.format(value)
    source = assemble(fmt, root_text)

    result = Rendering(
        source=source,
        nodes=len(occurrences),
        shared=occurrences.shared_count,
        aliases=len(fmt.bindings),
        patches=len(fmt.patches),
        imports=tuple(f"{m}.{a}" for m, a in fmt.imports.values()),
    )
    logger.debug(
        "rendered %d nodes (%d shared): %d aliases, %d patches, %d chars",
        result.nodes, result.shared, result.aliases, result.patches, len(source),
    )
    return result


def to_source(value: Any, *, max_depth: Optional[int] = None) -> str:
    """Python expression text that evaluates to a copy of *value*."""
    return render(value, max_depth=max_depth).source
