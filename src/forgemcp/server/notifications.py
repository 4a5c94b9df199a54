# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Server-initiated notifications.

:class:`NotificationManager` builds ``notifications/*`` envelopes and hands
them to whatever :class:`NotificationSender` the transport installed.  Delivery
is best-effort: without a sender the notification is dropped, and a sender
failure is logged and reported as ``False``.  Nothing is queued or retried.

Registration APIs are synchronous, so list-changed events raised from them are
scheduled on the running event loop instead of awaited; :meth:`flush` waits for
the ones still in flight.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import logging
from typing import Any, Final, Literal, Protocol, runtime_checkable

from .subscriptions import SubscriptionManager
from .. import types
from ..utils import get_logger


ListKind = Literal["resources", "prompts", "tools"]

RESOURCE_UPDATED: Final[str] = "notifications/resources/updated"
LIST_CHANGED_METHODS: Final[dict[str, str]] = {
    "resources": "notifications/resources/list_changed",
    "prompts": "notifications/prompts/list_changed",
    "tools": "notifications/tools/list_changed",
}


@runtime_checkable
class NotificationSender(Protocol):
    """Transport hook that delivers one JSON-RPC notification envelope."""

    async def send_notification(self, notification: dict[str, Any]) -> None: ...


def build_notification(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    message = types.JSONRPCNotification(jsonrpc="2.0", method=method, params=params)
    return message.model_dump(by_alias=True, mode="json", exclude_none=True)


class NotificationManager:
    """Fan out resource-updated and list-changed notifications."""

    def __init__(
        self,
        subscriptions: SubscriptionManager,
        sender: NotificationSender | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._subscriptions = subscriptions
        self._sender = sender
        self._logger = logger or get_logger("forgemcp.server.notifications")
        self._pending: set[asyncio.Task[bool]] = set()

    @property
    def sender(self) -> NotificationSender | None:
        return self._sender

    @property
    def is_configured(self) -> bool:
        return self._sender is not None

    def set_sender(self, sender: NotificationSender | None) -> None:
        self._sender = sender

    async def notify_resource_update(self, uri: str) -> bool:
        """Tell subscribers of ``uri`` that its contents changed.

        Returns ``True`` only when a notification was delivered.
        """
        if self._sender is None:
            return False
        if not self._subscriptions.has_subscribers(uri):
            return False
        return await self._send(build_notification(RESOURCE_UPDATED, {"uri": uri}))

    async def notify_many(self, uris: Iterable[str]) -> int:
        """Send resource-updated notifications for ``uris``; returns the delivered count."""
        delivered = 0
        for uri in uris:
            if await self.notify_resource_update(uri):
                delivered += 1
        return delivered

    async def notify_list_changed(self, kind: ListKind = "resources") -> bool:
        method = LIST_CHANGED_METHODS.get(kind)
        if method is None:
            raise ValueError(f"Unknown list kind '{kind}'")
        if self._sender is None:
            return False
        return await self._send(build_notification(method))

    def schedule_list_changed(self, kind: ListKind = "resources") -> None:
        """Fire a list-changed notification from synchronous code.

        Without a sender or a running event loop the event is dropped.
        """
        if self._sender is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.debug("No running event loop; dropping %s list_changed", kind)
            return
        task = loop.create_task(self.notify_list_changed(kind))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait for scheduled notifications that are still in flight."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _send(self, notification: dict[str, Any]) -> bool:
        sender = self._sender
        if sender is None:
            return False
        try:
            await sender.send_notification(notification)
        except Exception as exc:
            self._logger.warning("Failed to send %s: %s", notification.get("method"), exc)
            return False
        return True


__all__ = [
    "LIST_CHANGED_METHODS",
    "RESOURCE_UPDATED",
    "ListKind",
    "NotificationManager",
    "NotificationSender",
    "build_notification",
]
