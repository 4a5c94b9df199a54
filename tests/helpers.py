# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared test helpers for forgemcp server tests."""

from __future__ import annotations

from typing import Any

from mcp.shared.exceptions import McpError
import pytest


class RecordingSender:
    """In-memory notification sender used to capture server notifications."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[dict[str, Any]] = []

    async def send_notification(self, notification: dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("transport closed")
        self.sent.append(notification)

    @property
    def methods(self) -> list[str]:
        return [item["method"] for item in self.sent]


class MemoryWriter:
    """Async line writer collecting everything the stdio transport writes."""

    def __init__(self) -> None:
        self.chunks: list[str] = []

    async def write(self, data: str) -> None:
        self.chunks.append(data)

    async def flush(self) -> None:
        return None

    @property
    def lines(self) -> list[str]:
        return "".join(self.chunks).splitlines()


async def lines_from(*items: str):
    for item in items:
        yield item


async def expect_mcp_error(awaitable: Any, code: int) -> McpError:
    with pytest.raises(McpError) as excinfo:
        await awaitable
    assert excinfo.value.error.code == code
    return excinfo.value
