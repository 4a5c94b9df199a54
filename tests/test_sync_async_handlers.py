# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Sync and async handler support.

Every capability service invokes handlers through the outcome boundary, which
awaits coroutine results and passes plain values through.
"""

from __future__ import annotations

import anyio
from mcp.shared.exceptions import McpError
import pytest

from forgemcp import MCPServer, prompt, prompt_template, resource, resource_template, tool


@pytest.mark.anyio
async def test_mixed_sync_async_capabilities() -> None:
    server = MCPServer(name="test-mixed")

    with server.binding():

        @tool()
        def sync_tool(x: int) -> int:
            return x + 1

        @tool()
        async def async_tool(x: int) -> int:
            await anyio.sleep(0)
            return x * 2

        @resource("file://sync.txt")
        def sync_resource() -> str:
            return "synchronous data"

        @resource("file://async.txt")
        async def async_resource() -> str:
            await anyio.sleep(0)
            return "asynchronous data"

        @resource_template("file://async/{name}")
        async def async_template(params: dict[str, str]) -> str:
            await anyio.sleep(0)
            return params["name"]

        @prompt()
        async def async_prompt(topic: str) -> str:
            await anyio.sleep(0)
            return f"About {topic}"

        @prompt_template("async-{topic}")
        async def async_prompt_template(arguments: dict[str, str]) -> str:
            await anyio.sleep(0)
            return arguments["topic"]

    assert (await server.call_tool("sync_tool", {"x": 1}))["content"][0]["text"] == "2"
    assert (await server.call_tool("async_tool", {"x": 4}))["content"][0]["text"] == "8"
    assert (await server.read_resource("file://sync.txt"))["contents"][0]["text"] == "synchronous data"
    assert (await server.read_resource("file://async.txt"))["contents"][0]["text"] == "asynchronous data"
    assert (await server.read_resource("file://async/readme"))["contents"][0]["text"] == "readme"
    assert (await server.get_prompt("async_prompt", {"topic": "MCP"}))["messages"][0]["content"]["text"] == "About MCP"
    assert (await server.get_prompt("async-python"))["messages"][0]["content"]["text"] == "python"


@pytest.mark.anyio
async def test_async_handler_exception_is_internal_error() -> None:
    server = MCPServer(name="test-async-failure")

    async def failing() -> str:
        await anyio.sleep(0)
        raise ValueError("async failure")

    server.register_resource("file://broken", failing)

    with pytest.raises(McpError) as excinfo:
        await server.read_resource("file://broken")

    assert excinfo.value.error.message == "async failure"
