"""
Environment configuration (opt-in only).

  GRAPHREPR_MAX_DEPTH=<int>        nesting guard for the formatter
  GRAPHREPR_ADD_SCHEMA_FIELDS=1    CLI payload also carries kind/schema_version
  GRAPHREPR_SCHEMA_VERSION=x.y.z   schema_version to report

Everything is read at call time and explicit arguments win. Without a
max_depth from either source the formatter derives one from the
interpreter's recursion limit.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

ENV_MAX_DEPTH = "GRAPHREPR_MAX_DEPTH"
ENV_ADD_SCHEMA_FIELDS = "GRAPHREPR_ADD_SCHEMA_FIELDS"
ENV_SCHEMA_VERSION = "GRAPHREPR_SCHEMA_VERSION"
DEFAULT_SCHEMA_VERSION = "1.0.0"

_TRUTHY = {"1", "true", "yes", "on"}


def _positive_int(raw: str) -> Optional[int]:
    try:
        n = int(raw)
    except ValueError:
        return None
    return n if n > 0 else None


def max_depth(explicit: Optional[int] = None) -> Optional[int]:
    """
    Nesting guard for one render call.

    An explicit value must be a positive int (ValueError otherwise). A
    malformed GRAPHREPR_MAX_DEPTH is ignored. None means "no guard was
    asked for".
    """
    if explicit is not None:
        if type(explicit) is not int or explicit <= 0:
            raise ValueError(f"max_depth must be a positive int, got {explicit!r}")
        return explicit
    return _positive_int(os.getenv(ENV_MAX_DEPTH, "").strip())


def payload_schema_fields(kind: str) -> Dict[str, str]:
    """
    Extra identification fields for a CLI payload, or {} when
    GRAPHREPR_ADD_SCHEMA_FIELDS is not set.
    """
    if os.getenv(ENV_ADD_SCHEMA_FIELDS, "").strip().lower() not in _TRUTHY:
        return {}
    version = os.getenv(ENV_SCHEMA_VERSION, "").strip() or DEFAULT_SCHEMA_VERSION
    return {"kind": kind, "schema_version": version}
