# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Line-delimited JSON-RPC over ``stdin``/``stdout``.

Each line on ``stdin`` is one JSON-RPC message (or batch); each response is
written as one line on ``stdout``.  While the transport runs it is also the
server's notification sender, so ``notifications/*`` envelopes share the same
output stream.  Writes are serialised with a lock so a notification never
interleaves with a response.

Logging must not go to ``stdout``; :func:`forgemcp.utils.setup_logger`
writes to ``stderr`` by default.
"""

from __future__ import annotations

from collections.abc import AsyncIterable
import json
import sys
from typing import TYPE_CHECKING, Any, Protocol

import anyio

from .base import BaseTransport
from ..jsonrpc import handle_jsonrpc_message


if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from ..core import MCPServer


class LineWriter(Protocol):
    async def write(self, data: str) -> Any: ...

    async def flush(self) -> Any: ...


class StdioNotificationSender:
    """:class:`~forgemcp.server.notifications.NotificationSender` bound to a transport."""

    def __init__(self, transport: StdioTransport) -> None:
        self._transport = transport

    async def send_notification(self, notification: dict[str, Any]) -> None:
        await self._transport.write_line(json.dumps(notification))


class StdioTransport(BaseTransport):
    """Run an :class:`~forgemcp.server.MCPServer` over STDIO."""

    TRANSPORT = ("stdio", "STDIO", "Standard IO")

    def __init__(
        self,
        server: MCPServer,
        *,
        reader: AsyncIterable[str] | None = None,
        writer: LineWriter | None = None,
    ) -> None:
        super().__init__(server)
        self._reader = reader
        self._writer = writer
        self._write_lock = anyio.Lock()
        self.sender = StdioNotificationSender(self)

    async def write_line(self, line: str) -> None:
        writer = self._writer
        if writer is None:
            writer = self._writer = anyio.wrap_file(sys.stdout)
        async with self._write_lock:
            await writer.write(line + "\n")
            await writer.flush()

    async def run(self) -> None:
        reader = self._reader if self._reader is not None else anyio.wrap_file(sys.stdin)
        self.server.set_notification_sender(self.sender)
        try:
            async for raw in reader:
                line = raw.strip()
                if not line:
                    continue
                response = await handle_jsonrpc_message(line, self.server.dispatcher)
                if response is not None:
                    await self.write_line(response)
            await self.server.flush_notifications()
        finally:
            if self.server.notifications.sender is self.sender:
                self.server.set_notification_sender(None)


__all__ = ["StdioNotificationSender", "StdioTransport"]
