# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Protocol method routing.

The dispatcher is stateless: one branch per protocol method, each of which
checks the required request fields and forwards to the owning
:class:`~forgemcp.server.core.MCPServer`.  :meth:`Dispatcher.handle_request`
is the transport-facing entry point.  It never raises; every failure becomes a
JSON-RPC error object, and notifications produce no response at all.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
import logging
import time
from typing import TYPE_CHECKING, Any

from mcp.shared.exceptions import McpError

from .errors import internal_error, invalid_params, method_not_found
from .jsonrpc import build_error, build_result


if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .core import MCPServer


Route = Callable[[Mapping[str, Any]], Awaitable[Any]]


def _require(params: Mapping[str, Any], field: str, message: str) -> str:
    value = params.get(field)
    if not isinstance(value, str) or not value:
        raise invalid_params(message)
    return value


class Dispatcher:
    """Route protocol methods to the server's capability surface."""

    def __init__(self, server: MCPServer, *, logger: logging.Logger) -> None:
        self._server = server
        self._logger = logger
        self._routes: dict[str, Route] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "notifications/initialized": self._initialized,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/templates/list": self._list_resource_templates,
            "resources/read": self._read_resource,
            "resources/subscribe": self._subscribe,
            "resources/unsubscribe": self._unsubscribe,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
            "completion/complete": self._complete,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._routes)

    async def dispatch(self, method: str, params: Any = None) -> Any:
        """Run ``method`` and return its result; errors raise :class:`McpError`."""
        route = self._routes.get(method)
        if route is None:
            raise method_not_found(method)
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            raise invalid_params("Parameters must be an object")
        return await route(params)

    async def handle_request(self, request: Mapping[str, Any]) -> dict[str, Any] | None:
        """Dispatch a decoded request and build its response envelope.

        Returns ``None`` for notifications (messages without an ``id``).
        """
        method = request.get("method")
        request_id = request.get("id")
        is_notification = "id" not in request

        started = time.perf_counter()
        try:
            if not isinstance(method, str):
                raise method_not_found(str(method))
            result = await self.dispatch(method, request.get("params"))
        except McpError as exc:
            response = build_error(request_id, exc.error)
        except Exception as exc:
            self._logger.exception("Unhandled error while dispatching %s", method)
            response = build_error(request_id, internal_error(str(exc)).error)
        else:
            response = build_result(request_id, result)

        self._logger.debug(
            "Handled %s", method, extra={"method": method, "duration_ms": (time.perf_counter() - started) * 1000}
        )
        return None if is_notification else response

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    async def _initialize(self, params: Mapping[str, Any]) -> Any:
        return self._server.handle_initialize(params)

    async def _ping(self, params: Mapping[str, Any]) -> Any:
        return {}

    async def _initialized(self, params: Mapping[str, Any]) -> Any:
        self._logger.debug("Client finished initialization")
        return None

    async def _list_tools(self, params: Mapping[str, Any]) -> Any:
        return await self._server.list_tools(params.get("cursor"))

    async def _call_tool(self, params: Mapping[str, Any]) -> Any:
        name = _require(params, "name", "Tool name is required")
        return await self._server.call_tool(name, params.get("arguments"))

    async def _list_resources(self, params: Mapping[str, Any]) -> Any:
        return await self._server.list_resources(params.get("cursor"))

    async def _list_resource_templates(self, params: Mapping[str, Any]) -> Any:
        return await self._server.list_resource_templates(params.get("cursor"))

    async def _read_resource(self, params: Mapping[str, Any]) -> Any:
        uri = _require(params, "uri", "Resource URI is required")
        return await self._server.read_resource(uri)

    async def _subscribe(self, params: Mapping[str, Any]) -> Any:
        client_id = _require(params, "clientId", "Client ID is required")
        uri = _require(params, "uri", "Resource URI is required")
        await self._server.subscribe_resource(client_id, uri)
        return {}

    async def _unsubscribe(self, params: Mapping[str, Any]) -> Any:
        client_id = _require(params, "clientId", "Client ID is required")
        uri = _require(params, "uri", "Resource URI is required")
        await self._server.unsubscribe_resource(client_id, uri)
        return {}

    async def _list_prompts(self, params: Mapping[str, Any]) -> Any:
        return await self._server.list_prompts(params.get("cursor"))

    async def _get_prompt(self, params: Mapping[str, Any]) -> Any:
        name = _require(params, "name", "Prompt name is required")
        return await self._server.get_prompt(name, params.get("arguments"))

    async def _complete(self, params: Mapping[str, Any]) -> Any:
        return await self._server.complete(params.get("ref"), params.get("argument"), params.get("context"))


__all__ = ["Dispatcher"]
