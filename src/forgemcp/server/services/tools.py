# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Tool capability service."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from ..adapters import normalize_tool_result
from ..binding import bind_call, ensure_valid
from ..errors import tool_not_found
from ..notifications import NotificationManager
from ..outcome import invoke, unwrap
from ..pagination import paginate_sequence
from ..registry import CapabilityRegistry
from ... import types
from ...descriptors import CapabilityKind, ToolDescriptor
from ...utils.schema import build_input_schema


_KIND = CapabilityKind.TOOL


class ToolsService:
    """Manages tool registration, listing and invocation."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        notifications: NotificationManager,
        logger: logging.Logger,
        pagination_limit: int,
    ) -> None:
        self._registry = registry
        self._notifications = notifications
        self._logger = logger
        self._pagination_limit = pagination_limit

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def tool_names(self) -> list[str]:
        return [descriptor.key for descriptor in self._registry.list(_KIND)]

    def register(self, descriptor: ToolDescriptor, *, dynamic: bool = True, replace: bool = False) -> ToolDescriptor:
        self._registry.register(descriptor, dynamic=dynamic, replace=replace)
        self._logger.debug("Registered %s tool '%s'", "dynamic" if dynamic else "static", descriptor.name)
        return descriptor

    def unregister(self, name: str) -> ToolDescriptor | None:
        removed = self._registry.unregister(_KIND, name)
        if removed is not None:
            self._logger.debug("Unregistered tool '%s'", name)
        return removed  # type: ignore[return-value]

    def definition(self, descriptor: ToolDescriptor) -> dict[str, Any]:
        tool = types.Tool(
            name=descriptor.name,
            title=descriptor.title,
            description=descriptor.description or None,
            inputSchema=build_input_schema(descriptor.params),
        )
        return tool.model_dump(by_alias=True, mode="json", exclude_none=True)

    async def list_tools(self, cursor: str | None = None) -> dict[str, Any]:
        self._registry.ensure_initialized(_KIND)
        tools = [self.definition(descriptor) for descriptor in self._registry.list(_KIND)]  # type: ignore[arg-type]
        page, next_cursor = paginate_sequence(tools, cursor, limit=self._pagination_limit)
        result: dict[str, Any] = {"tools": page}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return result

    async def call_tool(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict[str, Any]:
        self._registry.ensure_initialized(_KIND)
        descriptor = self._registry.resolve(_KIND, name)
        if descriptor is None:
            raise tool_not_found(name)

        if descriptor.params:
            ensure_valid(descriptor.params, arguments)
        explicit = arguments if isinstance(arguments, Mapping) else None
        args, kwargs = bind_call(descriptor.fn, descriptor.params, explicit)

        outcome = await invoke(descriptor.fn, *args, **kwargs)
        value = unwrap(outcome, logger=self._logger, label=f"Tool '{name}'")
        return normalize_tool_result(value)

    async def notify_list_changed(self) -> bool:
        return await self._notifications.notify_list_changed("tools")


__all__ = ["ToolsService"]
