# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Composable MCP server facade.

:class:`MCPServer` wires the capability registry, the per-capability services,
the subscription and notification managers and the dispatcher together, and
exposes both the Python registration API and the protocol surface.

Static capabilities come from a :class:`~forgemcp.metadata.MetadataProvider`
(passed as ``metadata=``) or from decorators applied inside
:meth:`MCPServer.binding`.  Dynamic capabilities are added and removed at any
time through the ``register_*``/``unregister_*`` methods.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from functools import partial
import inspect
from typing import Any, Final

from .dispatcher import Dispatcher
from .notifications import ListKind, NotificationManager, NotificationSender
from .pagination import DEFAULT_PAGE_SIZE
from .registry import CapabilityRegistry, RegistrationError
from .services import CompletionService, PromptsService, ResourcesService, ToolsService
from .subscriptions import SubscriptionManager
from .transports import StdioTransport
from .. import types
from ..descriptors import (
    CapabilityKind,
    CompletionSpec,
    GeneratorSpec,
    ParamDescriptor,
    PromptDescriptor,
    PromptTemplateDescriptor,
    ResourceDescriptor,
    ResourceTemplateDescriptor,
    ToolDescriptor,
    coerce_params,
)
from ..metadata import MetadataProvider, collecting, extract_capabilities
from ..utils import get_logger


PROTOCOL_VERSION: Final[str] = "2025-06-18"

ParamsArg = Iterable[ParamDescriptor] | Mapping[str, str] | None


class MCPServer:
    """Capability registry plus protocol dispatch for MCP applications."""

    _PAGINATION_LIMIT = DEFAULT_PAGE_SIZE

    def __init__(
        self,
        name: str,
        *,
        version: str | None = None,
        instructions: str | None = None,
        page_size: int | None = None,
        metadata: MetadataProvider | None = None,
        notification_sender: NotificationSender | None = None,
        protocol_version: str = PROTOCOL_VERSION,
    ) -> None:
        if page_size is not None and page_size <= 0:
            raise ValueError("page_size must be positive")

        self.name = name
        self.version = version or "0.1.0"
        self.instructions = instructions
        self.protocol_version = protocol_version
        self._logger = get_logger(f"forgemcp.server.{name}")
        limit = page_size or self._PAGINATION_LIMIT

        self.registry = CapabilityRegistry(logger=self._logger)
        self.subscriptions = SubscriptionManager()
        self.notifications = NotificationManager(self.subscriptions, notification_sender, logger=self._logger)

        self.tools = ToolsService(
            self.registry, notifications=self.notifications, logger=self._logger, pagination_limit=limit
        )
        self.resources = ResourcesService(
            self.registry,
            subscriptions=self.subscriptions,
            notifications=self.notifications,
            logger=self._logger,
            pagination_limit=limit,
        )
        self.prompts = PromptsService(
            self.registry, notifications=self.notifications, logger=self._logger, pagination_limit=limit
        )
        self.completions = CompletionService(self.registry, logger=self._logger)
        self.dispatcher = Dispatcher(self, logger=self._logger)

        if metadata is not None:
            self.load_metadata(metadata)

    # //////////////////////////////////////////////////////////////////
    # Static capabilities
    # //////////////////////////////////////////////////////////////////

    @contextmanager
    def binding(self) -> Iterator[MCPServer]:
        """Register decorated capabilities declared inside the block as static."""
        with collecting(self):
            yield self

    def collect(self, item: Any) -> None:
        """Register one decorator-produced item as a static capability."""
        if isinstance(item, ToolDescriptor):
            self.tools.register(item, dynamic=False)
        elif isinstance(item, ResourceDescriptor):
            self.resources.register(item, dynamic=False)
        elif isinstance(item, ResourceTemplateDescriptor):
            self.resources.register_template(item, dynamic=False)
        elif isinstance(item, PromptDescriptor):
            self.prompts.register(item, dynamic=False)
        elif isinstance(item, PromptTemplateDescriptor):
            self.prompts.register_template(item, dynamic=False)
        elif isinstance(item, GeneratorSpec):
            self.add_generator(item)
        elif isinstance(item, CompletionSpec):
            self.completions.register(item)
        else:
            raise RegistrationError(f"Unsupported capability item: {item!r}")

    def include(self, *targets: Callable[..., Any]) -> None:
        """Register functions that were decorated outside :meth:`binding`."""
        for target in targets:
            items = extract_capabilities(target)
            if not items:
                raise RegistrationError(f"{target!r} carries no capability metadata")
            for item in items:
                self.collect(item)

    def load_metadata(self, provider: MetadataProvider) -> None:
        """Register every capability exposed by ``provider``."""
        for tool in provider.get_static_tools_metadata():
            self.tools.register(tool, dynamic=False)
        for resource in provider.get_static_resources_metadata():
            self.resources.register(resource, dynamic=False)
        for template in provider.get_static_resource_templates_metadata():
            self.resources.register_template(template, dynamic=False)
        for prompt in provider.get_static_prompts_metadata():
            self.prompts.register(prompt, dynamic=False)
        for prompt_template in provider.get_static_prompt_templates_metadata():
            self.prompts.register_template(prompt_template, dynamic=False)
        for generator in provider.get_dynamic_generators():
            self.add_generator(generator)
        get_completions = getattr(provider, "get_completion_providers", None)
        if get_completions is not None:
            for spec in get_completions():
                self.completions.register(spec)

    def add_generator(self, spec: GeneratorSpec) -> None:
        """Queue a dynamic generator; it runs on first use of its kind."""
        self.registry.add_generator(spec.kind, partial(self._run_generator, spec))

    def _run_generator(self, spec: GeneratorSpec) -> None:
        result = spec.fn(self)
        if inspect.isawaitable(result):
            close = getattr(result, "close", None)
            if close is not None:
                close()
            raise RegistrationError(f"Dynamic generator {spec.fn!r} must be synchronous")

    # //////////////////////////////////////////////////////////////////
    # Dynamic registration
    # //////////////////////////////////////////////////////////////////

    def register_tool(
        self,
        name: str,
        handler: Callable[..., Any],
        *,
        description: str = "",
        params: ParamsArg = None,
        title: str | None = None,
        replace: bool = False,
    ) -> ToolDescriptor:
        descriptor = ToolDescriptor(
            name=name, fn=handler, description=description, params=coerce_params(params, handler), title=title
        )
        return self.tools.register(descriptor, replace=replace)

    def unregister_tool(self, name: str) -> ToolDescriptor | None:
        return self.tools.unregister(name)

    def register_resource(
        self,
        uri: str,
        handler: Callable[..., Any],
        *,
        description: str | None = None,
        subscribable: bool = False,
        mime_type: str | None = None,
        name: str | None = None,
        replace: bool = False,
    ) -> ResourceDescriptor:
        descriptor = ResourceDescriptor(
            uri=uri,
            fn=handler,
            name=name,
            description=description,
            mime_type=mime_type,
            subscribable=subscribable,
        )
        return self.resources.register(descriptor, replace=replace)

    def unregister_resource(self, uri: str) -> ResourceDescriptor | None:
        return self.resources.unregister(uri)

    def register_resource_template(
        self,
        uri_template: str,
        handler: Callable[..., Any],
        *,
        description: str | None = None,
        mime_type: str | None = None,
        name: str | None = None,
        params: Iterable[ParamDescriptor] | None = None,
        replace: bool = False,
    ) -> ResourceTemplateDescriptor:
        descriptor = ResourceTemplateDescriptor(
            uri_template=uri_template,
            fn=handler,
            name=name,
            description=description,
            mime_type=mime_type,
            params=tuple(sorted(params or (), key=lambda item: item.index)),
        )
        return self.resources.register_template(descriptor, replace=replace)

    def unregister_resource_template(self, uri_template: str) -> ResourceTemplateDescriptor | None:
        return self.resources.unregister_template(uri_template)

    def register_prompt(
        self,
        name: str,
        handler: Callable[..., Any],
        *,
        description: str = "",
        params: ParamsArg = None,
        replace: bool = False,
    ) -> PromptDescriptor:
        descriptor = PromptDescriptor(
            name=name, fn=handler, description=description, params=coerce_params(params, handler)
        )
        return self.prompts.register(descriptor, replace=replace)

    def unregister_prompt(self, name: str) -> PromptDescriptor | None:
        return self.prompts.unregister(name)

    def register_prompt_template(
        self,
        name_template: str,
        handler: Callable[..., Any],
        *,
        description: str | None = None,
        params: Iterable[ParamDescriptor] | None = None,
        replace: bool = False,
    ) -> PromptTemplateDescriptor:
        descriptor = PromptTemplateDescriptor(
            name_template=name_template,
            fn=handler,
            description=description,
            params=tuple(sorted(params or (), key=lambda item: item.index)),
        )
        return self.prompts.register_template(descriptor, replace=replace)

    def unregister_prompt_template(self, name_template: str) -> PromptTemplateDescriptor | None:
        return self.prompts.unregister_template(name_template)

    def register_completion(self, target: CompletionSpec | Callable[..., Any]) -> CompletionSpec:
        """Register a provider given as a spec or a ``@completion``-decorated function."""
        if isinstance(target, CompletionSpec):
            return self.completions.register(target)
        for item in extract_capabilities(target):
            if isinstance(item, CompletionSpec):
                return self.completions.register(item)
        raise RegistrationError(f"{target!r} is not a completion provider")

    @property
    def tool_names(self) -> list[str]:
        return self.tools.tool_names

    @property
    def prompt_names(self) -> list[str]:
        return self.prompts.names

    # //////////////////////////////////////////////////////////////////
    # Notifications
    # //////////////////////////////////////////////////////////////////

    def set_notification_sender(self, sender: NotificationSender | None) -> None:
        self.notifications.set_sender(sender)

    async def notify_resource_update(self, uri: str) -> bool:
        return await self.notifications.notify_resource_update(uri)

    async def notify_list_changed(self, kind: ListKind = "resources") -> bool:
        return await self.notifications.notify_list_changed(kind)

    async def flush_notifications(self) -> None:
        await self.notifications.flush()

    def disconnect_client(self, client_id: str) -> list[str]:
        """Drop every subscription held by ``client_id``."""
        return self.subscriptions.clear_client(client_id)

    # //////////////////////////////////////////////////////////////////
    # Initialization & capability negotiation
    # //////////////////////////////////////////////////////////////////

    def get_capabilities(self) -> types.ServerCapabilities:
        """Advertise exactly the categories that currently have capabilities."""
        for kind in CapabilityKind:
            self.registry.ensure_initialized(kind)

        registry = self.registry
        tools = types.ToolsCapability() if registry.total(CapabilityKind.TOOL) else None
        resources = None
        if registry.total(CapabilityKind.RESOURCE, CapabilityKind.RESOURCE_TEMPLATE):
            resources = types.ResourcesCapability(
                subscribe=True if registry.has_subscribable_resources() else None,
                listChanged=True,
            )
        prompts = None
        if registry.total(CapabilityKind.PROMPT, CapabilityKind.PROMPT_TEMPLATE):
            prompts = types.PromptsCapability()
        completions = types.CompletionsCapability() if self.completions.provider_count else None

        return types.ServerCapabilities(tools=tools, resources=resources, prompts=prompts, completions=completions)

    def handle_initialize(self, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        client = (params or {}).get("clientInfo")
        if isinstance(client, Mapping):
            self._logger.info("Initializing session for %s %s", client.get("name"), client.get("version", ""))

        result = types.InitializeResult(
            protocolVersion=self.protocol_version,
            capabilities=self.get_capabilities(),
            serverInfo=types.Implementation(name=self.name, version=self.version),
            instructions=self.instructions,
        )
        return result.model_dump(by_alias=True, mode="json", exclude_none=True)

    # //////////////////////////////////////////////////////////////////
    # Protocol surface
    # //////////////////////////////////////////////////////////////////

    async def list_tools(self, cursor: str | None = None) -> dict[str, Any]:
        return await self.tools.list_tools(cursor)

    async def call_tool(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return await self.tools.call_tool(name, arguments)

    async def list_resources(self, cursor: str | None = None) -> dict[str, Any]:
        return await self.resources.list_resources(cursor)

    async def list_resource_templates(self, cursor: str | None = None) -> dict[str, Any]:
        return await self.resources.list_templates(cursor)

    async def read_resource(self, uri: str) -> dict[str, Any]:
        return await self.resources.read(uri)

    async def subscribe_resource(self, client_id: str, uri: str) -> None:
        self.resources.subscribe(client_id, uri)

    async def unsubscribe_resource(self, client_id: str, uri: str) -> None:
        self.resources.unsubscribe(client_id, uri)

    async def list_prompts(self, cursor: str | None = None) -> dict[str, Any]:
        return await self.prompts.list_prompts(cursor)

    async def get_prompt(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return await self.prompts.get_prompt(name, arguments)

    async def complete(
        self, ref: Any, argument: Any, context: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        return await self.completions.complete(ref, argument, context)

    async def dispatch(self, method: str, params: Any = None) -> Any:
        """Run one protocol method; errors raise :class:`~mcp.shared.exceptions.McpError`."""
        return await self.dispatcher.dispatch(method, params)

    async def handle_request(self, request: Mapping[str, Any]) -> dict[str, Any] | None:
        """Dispatch a decoded JSON-RPC request and return its response envelope."""
        return await self.dispatcher.handle_request(request)

    # //////////////////////////////////////////////////////////////////
    # Transport helpers
    # //////////////////////////////////////////////////////////////////

    async def serve_stdio(self, *, announce: bool = True) -> None:
        transport = StdioTransport(self)
        if announce:
            self._logger.info("Serving %s via %s", self.name, transport.transport_display_name)
        await transport.run()


__all__ = ["MCPServer", "PROTOCOL_VERSION"]
