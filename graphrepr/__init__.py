# graphrepr/__init__.py
"""
graphrepr public API surface.

Render a live Python value as a Python expression that rebuilds it,
keeping shared sub-objects shared and cycles cyclic:

    >>> from graphrepr import to_source
    >>> w = [1]
    >>> w.append(w)
    >>> to_source(w)
    '(_root := (_a0 := [1, None]), _a0.__setitem__(1, _a0), _root)[-1]'

Exposed:

    - Rendering: to_source, render, Rendering
    - Tokens: Token
    - Classification: Shape, classify
    - Errors: ReprError, UnsupportedShapeError, CycleError, ReprDepthError
"""

from __future__ import annotations

from .api import Rendering, render, to_source
from .errors import CycleError, ReprDepthError, ReprError, UnsupportedShapeError
from .shapes import Shape, classify
from .tokens import Token

__version__ = "0.1.0"

__all__ = [
    # rendering
    "to_source",
    "render",
    "Rendering",

    # tokens
    "Token",

    # classification
    "Shape",
    "classify",

    # errors
    "ReprError",
    "UnsupportedShapeError",
    "CycleError",
    "ReprDepthError",
]
