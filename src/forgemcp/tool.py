# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Tool registration utilities for forgemcp.

This module implements the ambient registration pattern.  When an
:class:`~forgemcp.server.MCPServer` instance enters its
:meth:`binding <forgemcp.server.MCPServer.binding>` context, decorated
functions are registered as static tools.  Outside a binding context the
descriptor is only attached to the function, so it can be included later with
:meth:`MCPServer.include <forgemcp.server.MCPServer.include>`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from .descriptors import ParamDescriptor, ToolDescriptor, coerce_params
from .metadata import announce, extract_capabilities


ToolFn = TypeVar("ToolFn", bound=Callable[..., Any])


def tool(
    name: str | None = None,
    *,
    description: str | None = None,
    params: Iterable[ParamDescriptor] | Mapping[str, str] | None = None,
    title: str | None = None,
) -> Callable[[ToolFn], ToolFn]:
    """Decorator that marks a callable as a tool.

    Parameters are introspected from the signature unless ``params`` lists
    them explicitly; a mapping supplies per-parameter descriptions on top of
    introspection.  The description defaults to the docstring.
    """

    def decorator(fn: ToolFn) -> ToolFn:
        desc = (description if description is not None else (fn.__doc__ or "")).strip()
        descriptor = ToolDescriptor(
            name=name or fn.__name__,
            fn=fn,
            description=desc,
            params=coerce_params(params, fn),
            title=title,
        )
        return announce(fn, descriptor)

    return decorator


def extract_tool_spec(fn: Callable[..., Any]) -> ToolDescriptor | None:
    """Return the :class:`ToolDescriptor` attached to *fn*, if present."""
    for item in extract_capabilities(fn):
        if isinstance(item, ToolDescriptor):
            return item
    return None


__all__ = ["tool", "extract_tool_spec"]
