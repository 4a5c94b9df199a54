# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Builders for the protocol errors raised by the dispatch core.

Every error leaves the core as :class:`mcp.shared.exceptions.McpError` carrying
an :class:`mcp.types.ErrorData`; the dispatcher turns it into a JSON-RPC error
object.  Keeping the messages here keeps them identical across services.
"""

from __future__ import annotations

from typing import Any, Final

from mcp.shared.exceptions import McpError

from .. import types


RESOURCE_NOT_FOUND: Final[int] = -32002


def _error(code: int, message: str, data: Any = None) -> McpError:
    return McpError(types.ErrorData(code=code, message=message, data=data))


def tool_not_found(name: str) -> McpError:
    return _error(types.METHOD_NOT_FOUND, f"Tool '{name}' not found")


def prompt_not_found(name: str) -> McpError:
    return _error(types.METHOD_NOT_FOUND, f"Prompt '{name}' not found")


def method_not_found(method: str) -> McpError:
    return _error(types.METHOD_NOT_FOUND, f"Method '{method}' not found")


def resource_not_found(uri: str) -> McpError:
    return _error(RESOURCE_NOT_FOUND, f"Resource '{uri}' not found", {"uri": uri})


def invalid_params(message: str = "Invalid parameters", data: Any = None) -> McpError:
    return _error(types.INVALID_PARAMS, message, data)


def invalid_request(message: str, data: Any = None) -> McpError:
    return _error(types.INVALID_REQUEST, message, data)


def internal_error(message: str, data: Any = None) -> McpError:
    return _error(types.INTERNAL_ERROR, message or "Internal error", data)


def not_subscribable(uri: str) -> McpError:
    return invalid_request(f"Resource '{uri}' is not subscribable", {"uri": uri})


__all__ = [
    "RESOURCE_NOT_FOUND",
    "internal_error",
    "invalid_params",
    "invalid_request",
    "method_not_found",
    "not_subscribable",
    "prompt_not_found",
    "resource_not_found",
    "tool_not_found",
]
