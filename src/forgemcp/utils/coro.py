# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Helpers for calling handlers that may be sync or async."""

from __future__ import annotations

import inspect
from typing import Any


async def maybe_await(value: Any) -> Any:
    """Evaluate ``value``: call it if callable, await it if awaitable."""
    if callable(value):
        value = value()
    if inspect.isawaitable(value):
        return await value
    return value


async def maybe_await_with_args(target: Any, *args: Any, **kwargs: Any) -> Any:
    """Call ``target`` with the given arguments and await the result when needed.

    Non-callable targets are returned (or awaited) as-is and the arguments are
    ignored.
    """
    result = target(*args, **kwargs) if callable(target) else target
    if inspect.isawaitable(result):
        return await result
    return result


__all__ = ["maybe_await", "maybe_await_with_args"]
