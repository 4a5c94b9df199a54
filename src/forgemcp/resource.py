# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource registration utilities.

Usage mirrors the :mod:`forgemcp.tool` ambient registration pattern.  The
decorated function takes no arguments and returns the resource body: text,
``bytes`` (sent as a base64 blob), or any JSON-serialisable value.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from .descriptors import ResourceDescriptor
from .metadata import announce


ResourceFn = TypeVar("ResourceFn", bound=Callable[..., Any])


def resource(
    uri: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str | None = None,
    subscribable: bool = False,
) -> Callable[[ResourceFn], ResourceFn]:
    """Register a resource-producing callable under ``uri``.

    ``subscribable`` resources accept ``resources/subscribe`` and receive
    ``notifications/resources/updated`` fan-out.
    """

    def decorator(fn: ResourceFn) -> ResourceFn:
        descriptor = ResourceDescriptor(
            uri=uri,
            fn=fn,
            name=name,
            description=description if description is not None else (fn.__doc__ or "").strip() or None,
            mime_type=mime_type,
            subscribable=subscribable,
        )
        return announce(fn, descriptor)

    return decorator


__all__ = ["resource"]
