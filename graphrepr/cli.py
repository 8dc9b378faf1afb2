"""
graphrepr CLI

Render a value as Python source. Input is JSON (positional, --input-file
or --stdin) or a pickle file (--pickle). Pickles keep shared references
and cycles, JSON cannot express them. Only load pickles you trust.

Default output is the source text itself. --json wraps it in the
graphrepr-source.v1 payload (schema tag + schema_doc).

Exit codes: 0 ok, 1 render/check failure, 2 bad input.
"""

from __future__ import annotations

import argparse
import datetime
import hashlib
import json
import logging
import pickle
import sys
from typing import Any, Dict, List, Optional

from graphrepr.api import render
from graphrepr.compare import graph_equal
from graphrepr.config import payload_schema_fields
from graphrepr.errors import ReprError

logger = logging.getLogger(__name__)

SCHEMA_TAG = "graphrepr-source.v1"
SCHEMA_DOC = "docs/graphrepr_source_schema.md"
SCHEMA_JSON = "docs/schemas/graphrepr_source_schema.json"
SCHEMA_KIND = "graphrepr-source"


def _utc_now_z() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _inputs_hash(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


def _parse_json_text(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Input must be JSON. Parse error: {e}") from e


def _read_input(args: argparse.Namespace) -> tuple[Any, bytes]:
    """
    Priority:
      1) positional input_json (if provided)
      2) --input-file
      3) --pickle
      4) --stdin
    Returns (value, raw bytes used for the determinism hash).
    """
    if args.input_json is not None:
        return _parse_json_text(args.input_json), args.input_json.encode("utf-8")

    if args.input_file is not None:
        with args.input_file as fh:
            text = fh.read()
        return _parse_json_text(text), text.encode("utf-8")

    if args.pickle is not None:
        with args.pickle as fh:
            raw = fh.read()
        try:
            return pickle.loads(raw), raw
        except Exception as e:
            raise ValueError(f"Could not unpickle input: {type(e).__name__}: {e}") from e

    if args.stdin:
        text = sys.stdin.read()
        return _parse_json_text(text), text.encode("utf-8")

    raise ValueError("No input provided. Use positional JSON, --input-file, --pickle or --stdin.")


def _check(source: str, value: Any) -> List[str]:
    """Evaluate *source* and compare the result with *value*."""
    try:
        rebuilt = eval(source, {})
    except Exception as e:
        return [f"check: evaluation failed: {type(e).__name__}: {e}"]
    if not graph_equal(value, rebuilt):
        return ["check: rebuilt value differs from input"]
    return []


def _emit(payload: Dict[str, Any], pretty: bool) -> None:
    if pretty:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(payload, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="graphrepr",
        description="Render a value as a Python expression that rebuilds it (sharing and cycles included).",
    )
    ap.add_argument("--schema", action="store_true", help="Print schema tag + schema doc + schema json and exit.")
    ap.add_argument("--json", action="store_true", help="Emit the graphrepr-source.v1 JSON payload.")
    ap.add_argument("--pretty", action="store_true", help="Pretty-print JSON output (with --json).")
    ap.add_argument("--check", action="store_true", help="Evaluate the output and verify it rebuilds the input.")
    ap.add_argument("--max-depth", type=int, default=None, help="Nesting guard (default: GRAPHREPR_MAX_DEPTH, else derived from the recursion limit).")
    ap.add_argument("--stdin", action="store_true", help="Read input JSON from stdin.")
    ap.add_argument(
        "--input-file",
        type=argparse.FileType("r", encoding="utf-8"),
        default=None,
        help="Read input JSON from a file.",
    )
    ap.add_argument(
        "--pickle",
        type=argparse.FileType("rb"),
        default=None,
        help="Read the input value from a (trusted) pickle file.",
    )
    ap.add_argument("input_json", nargs="?", default=None, help='Input JSON, e.g. \'{"a": [1, 2]}\'.')
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.schema:
        # one line: tag, human doc, JSON schema (repo-relative)
        print(f"{SCHEMA_TAG} {SCHEMA_DOC} {SCHEMA_JSON}")
        return 0

    try:
        value, raw = _read_input(args)
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    warnings: List[str] = []
    source = ""
    stats: Dict[str, Any] = {}
    try:
        result = render(value, max_depth=args.max_depth)
        source = result.source
        stats = result.stats()
    except (ReprError, ValueError) as e:
        logger.debug("render failed", exc_info=True)
        warnings.append(f"{type(e).__name__}: {e}")

    ok = not warnings
    if ok and args.check:
        warnings.extend(_check(source, value))
        ok = not warnings

    if not args.json:
        if ok:
            print(source)
        for w in warnings:
            print(w, file=sys.stderr)
        return 0 if ok else 1

    payload: Dict[str, Any] = {
        "schema": SCHEMA_TAG,
        "schema_doc": SCHEMA_DOC,
        "ok": ok,
        "source": source,
        "warnings": warnings,
        "stats": stats,
        "meta": {
            "tool": "graphrepr",
            "generated_at": _utc_now_z(),
            "determinism": {
                "inputs_hash": _inputs_hash(raw),
            },
        },
    }
    for key, val in payload_schema_fields(SCHEMA_KIND).items():
        payload.setdefault(key, val)
    _emit(payload, pretty=bool(args.pretty))
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
