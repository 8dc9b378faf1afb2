"""
Binary <-> text seam.

Buffers are emitted as base64 text and decoded by the reconstructed
program. The codec itself is stdlib base64; this module only pins the
encoding used at format time to the decoder named in the emitted text.
"""

from __future__ import annotations

import base64
from typing import Tuple

# (module, attribute) the emitted source imports to decode buffers.
DECODER: Tuple[str, str] = ("base64", "b64decode")


def encode_bytes(data: bytes) -> str:
    """Printable ASCII for *data*; decodable by DECODER."""
    return base64.b64encode(bytes(data)).decode("ascii")
