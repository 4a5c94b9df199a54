# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Opaque cursor pagination for ``*/list`` methods.

A cursor is the base64 encoding of ``{"offset": n}``.  Clients must treat it as
opaque; the server never trusts it, so anything that fails to decode simply
restarts the listing at offset 0.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Sequence
import json
from typing import Any, Final, TypeVar


DEFAULT_PAGE_SIZE: Final[int] = 50

T = TypeVar("T")


def encode_cursor(offset: int) -> str:
    if offset < 0:
        raise ValueError("Cursor offset must be non-negative")
    raw = json.dumps({"offset": offset}, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_cursor(cursor: Any) -> int:
    """Return the offset stored in ``cursor``; 0 for anything undecodable."""
    if not isinstance(cursor, str) or not cursor:
        return 0
    try:
        payload = json.loads(base64.b64decode(cursor.encode("ascii"), validate=True))
    except (binascii.Error, UnicodeError, ValueError, RecursionError):
        return 0
    if not isinstance(payload, dict):
        return 0
    offset = payload.get("offset")
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        return 0
    return offset


def paginate_sequence(
    items: Sequence[T],
    cursor: str | None,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[T], str | None]:
    """Slice ``items`` for the page starting at ``cursor``.

    Returns the page and the cursor of the following page, or ``None`` on the
    last page.  A listing that fits in one page without a cursor comes back
    whole.
    """
    if limit <= 0:
        raise ValueError("Page size must be positive")

    total = len(items)
    if cursor is None and total <= limit:
        return list(items), None

    offset = decode_cursor(cursor)
    end = offset + limit
    page = list(items[offset:end])
    next_cursor = encode_cursor(end) if end < total else None
    return page, next_cursor


__all__ = ["DEFAULT_PAGE_SIZE", "decode_cursor", "encode_cursor", "paginate_sequence"]
