# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource capability service.

``resources/read`` resolves a URI in three steps, first hit wins:

1. exact match among static resources,
2. exact match among dynamic resources,
3. the first resource template (in registration order) whose pattern matches.

A template match whose extracted values fail validation is an error; it never
falls through to the next template.
"""

from __future__ import annotations

import logging
from typing import Any

from ..adapters import normalize_resource_payload
from ..binding import coerce_template_values, ensure_valid, template_call_args
from ..errors import not_subscribable, resource_not_found
from ..notifications import NotificationManager
from ..outcome import invoke, unwrap
from ..pagination import paginate_sequence
from ..registry import CapabilityRegistry
from ..subscriptions import SubscriptionManager
from ... import types
from ...descriptors import CapabilityKind, ResourceDescriptor, ResourceTemplateDescriptor
from ...templates import match_first


_RESOURCE = CapabilityKind.RESOURCE
_TEMPLATE = CapabilityKind.RESOURCE_TEMPLATE


class ResourcesService:
    """Manages resources, resource templates and their subscriptions."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        subscriptions: SubscriptionManager,
        notifications: NotificationManager,
        logger: logging.Logger,
        pagination_limit: int,
    ) -> None:
        self._registry = registry
        self._subscriptions = subscriptions
        self._notifications = notifications
        self._logger = logger
        self._pagination_limit = pagination_limit

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self, descriptor: ResourceDescriptor, *, dynamic: bool = True, replace: bool = False
    ) -> ResourceDescriptor:
        self._registry.register(descriptor, dynamic=dynamic, replace=replace)
        if dynamic:
            self._notifications.schedule_list_changed("resources")
        return descriptor

    def register_template(
        self, descriptor: ResourceTemplateDescriptor, *, dynamic: bool = True, replace: bool = False
    ) -> ResourceTemplateDescriptor:
        self._registry.register(descriptor, dynamic=dynamic, replace=replace)
        if dynamic:
            self._notifications.schedule_list_changed("resources")
        return descriptor

    def unregister(self, uri: str) -> ResourceDescriptor | None:
        """Remove a dynamic resource and drop every subscription to it."""
        removed = self._registry.unregister(_RESOURCE, uri)
        if removed is None:
            return None

        for client_id in self._subscriptions.get_subscribers(uri):
            try:
                self._subscriptions.unsubscribe(client_id, uri)
            except Exception as exc:
                self._logger.warning("Failed to unsubscribe %s from %s: %s", client_id, uri, exc)
        self._notifications.schedule_list_changed("resources")
        return removed  # type: ignore[return-value]

    def unregister_template(self, uri_template: str) -> ResourceTemplateDescriptor | None:
        removed = self._registry.unregister(_TEMPLATE, uri_template)
        if removed is not None:
            self._notifications.schedule_list_changed("resources")
        return removed  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def _ensure_initialized(self) -> None:
        self._registry.ensure_initialized(_RESOURCE)
        self._registry.ensure_initialized(_TEMPLATE)

    async def list_resources(self, cursor: str | None = None) -> dict[str, Any]:
        self._ensure_initialized()
        entries = [_resource_entry(descriptor) for descriptor in self._registry.list(_RESOURCE)]  # type: ignore[arg-type]
        return self._page("resources", entries, cursor)

    async def list_templates(self, cursor: str | None = None) -> dict[str, Any]:
        self._ensure_initialized()
        entries = [_template_entry(descriptor) for descriptor in self._registry.list(_TEMPLATE)]  # type: ignore[arg-type]
        return self._page("resourceTemplates", entries, cursor)

    def _page(self, field: str, entries: list[dict[str, Any]], cursor: str | None) -> dict[str, Any]:
        page, next_cursor = paginate_sequence(entries, cursor, limit=self._pagination_limit)
        result: dict[str, Any] = {field: page}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return result

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def resolve(self, uri: str) -> ResourceDescriptor | None:
        """Exact lookup among static, then dynamic resources."""
        self._ensure_initialized()
        return self._registry.resolve(_RESOURCE, uri)  # type: ignore[return-value]

    def match_template(self, uri: str) -> tuple[ResourceTemplateDescriptor, dict[str, str]] | None:
        self._ensure_initialized()
        return match_first(self._registry.list(_TEMPLATE), uri, lambda item: item.template)  # type: ignore[return-value,union-attr]

    async def read(self, uri: str) -> dict[str, Any]:
        descriptor = self.resolve(uri)
        if descriptor is not None:
            outcome = await invoke(descriptor.fn)
            value = unwrap(outcome, logger=self._logger, label=f"Resource '{uri}'")
            return normalize_resource_payload(uri, descriptor.mime_type, value)

        matched = self.match_template(uri)
        if matched is None:
            raise resource_not_found(uri)

        template, params = matched
        if template.params:
            params = coerce_template_values(template.params, params)
            ensure_valid(template.params, params)
        outcome = await invoke(template.fn, *template_call_args(template.fn, params, {}))
        value = unwrap(outcome, logger=self._logger, label=f"Resource template '{template.uri_template}'")
        return normalize_resource_payload(uri, template.mime_type, value, templated=True)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, client_id: str, uri: str) -> None:
        descriptor = self.resolve(uri)
        if descriptor is None:
            raise resource_not_found(uri)
        if not descriptor.subscribable:
            raise not_subscribable(uri)
        if self._subscriptions.subscribe(client_id, uri):
            self._logger.debug("Client %s subscribed to %s", client_id, uri)

    def unsubscribe(self, client_id: str, uri: str) -> None:
        if self._subscriptions.unsubscribe(client_id, uri):
            self._logger.debug("Client %s unsubscribed from %s", client_id, uri)

    async def notify_updated(self, uri: str) -> bool:
        return await self._notifications.notify_resource_update(uri)

    async def notify_list_changed(self) -> bool:
        return await self._notifications.notify_list_changed("resources")


def _resource_entry(descriptor: ResourceDescriptor) -> dict[str, Any]:
    entry: dict[str, Any] = {"uri": descriptor.uri, "name": descriptor.name or descriptor.uri}
    if descriptor.description:
        entry["description"] = descriptor.description
    if descriptor.mime_type:
        entry["mimeType"] = descriptor.mime_type
    return entry


def _template_entry(descriptor: ResourceTemplateDescriptor) -> dict[str, Any]:
    template = types.ResourceTemplate(
        uriTemplate=descriptor.uri_template,
        name=descriptor.name or descriptor.uri_template,
        description=descriptor.description,
        mimeType=descriptor.mime_type,
    )
    return template.model_dump(by_alias=True, mode="json", exclude_none=True)


__all__ = ["ResourcesService"]
