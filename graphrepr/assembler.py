"""
Code assembler.

Wraps the root expression and the replayed patch list into one Python
expression that evaluates to the rebuilt root:

    (_b64decode := __import__('base64', fromlist=('b64decode',)).b64decode,
     _root := (_a0 := [None, _b64decode('AAE=')]),
     _a0.__setitem__(0, _a0),
     _root)[-1]

Runtime names are bound first, then the root, then each patch in
discovery order. Walrus bindings inside a tuple display are evaluated
left to right, so every alias a patch names already exists when the
patch runs. With no runtime names and no patches the bare root expression
is returned.
"""

from __future__ import annotations

from typing import List

from graphrepr.formatter import ExpressionFormatter
from graphrepr.patches import PatchEntry, PatchKind

ROOT_NAME = "_root"


def import_binding(name: str, module: str, attr: str) -> str:
    return f"{name} := __import__({module!r}, fromlist=({attr!r},)).{attr}"


def render_patch(fmt: ExpressionFormatter, entry: PatchEntry) -> str:
    target = fmt.bindings.alias(entry.target)
    if target is None:
        raise RuntimeError(f"patch target was never finalized: {entry.kind.value}")

    if entry.kind is PatchKind.INDEX_ASSIGN:
        return f"{target}.__setitem__({entry.key}, {fmt.format(entry.value)})"
    if entry.kind is PatchKind.KEY_ASSIGN:
        return f"setattr({target}, {entry.key!r}, {fmt.format(entry.value)})"
    if entry.kind is PatchKind.SET_ADD:
        return f"{target}.add({fmt.format(entry.value)})"
    if entry.kind is PatchKind.MAP_SET:
        # the non-back-edge side may be formatted for the first time here
        key_text = fmt.format(entry.key)
        return f"{target}.__setitem__({key_text}, {fmt.format(entry.value)})"
    raise ValueError(f"unknown patch kind: {entry.kind!r}")


def assemble(fmt: ExpressionFormatter, root_text: str) -> str:
    """
    Build the final expression from a formatter that has already rendered
    the root into *root_text*.

    Patch operands are formatted here, which can record further patches
    and request further runtime names; both are picked up before the text
    is joined.
    """
    patch_lines: List[str] = [render_patch(fmt, entry) for entry in fmt.patches.drain()]

    if not patch_lines and not fmt.imports:
        return root_text

    parts: List[str] = [
        import_binding(name, module, attr)
        for name, (module, attr) in fmt.imports.items()
    ]
    parts.append(f"{ROOT_NAME} := {root_text}")
    parts.extend(patch_lines)
    parts.append(ROOT_NAME)
    return "(" + ", ".join(parts) + ")[-1]"
