# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import json
import logging

import anyio
from mcp.shared.exceptions import McpError
import pytest

from forgemcp import Failure, ParamType, Success, param, tool, types
from forgemcp.server import MCPServer, RegistrationError
from tests.helpers import expect_mcp_error


@pytest.mark.anyio
async def test_binding_registers_tools(server: MCPServer) -> None:
    with server.binding():

        @tool(description="Adds two numbers")
        def add(a: int, b: int) -> int:
            return a + b

    assert server.tool_names == ["add"]
    assert add(2, 3) == 5

    result = await server.call_tool("add", {"a": 4, "b": 7})
    assert result == {"content": [{"type": "text", "text": "11"}]}


@pytest.mark.anyio
async def test_list_tools_emits_input_schema(server: MCPServer) -> None:
    with server.binding():

        @tool(title="Search", params={"query": "What to look for"})
        def search(query: str, limit: int = 10, exact: bool = False) -> list[str]:
            """Search the index."""
            return []

    listing = await server.list_tools()

    assert listing == {
        "tools": [
            {
                "name": "search",
                "title": "Search",
                "description": "Search the index.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "What to look for"},
                        "limit": {"type": "number"},
                        "exact": {"type": "boolean"},
                    },
                    "required": ["query"],
                },
            }
        ]
    }


@pytest.mark.anyio
async def test_unknown_tool_is_method_not_found(server: MCPServer) -> None:
    error = await expect_mcp_error(server.call_tool("ghost", {}), types.METHOD_NOT_FOUND)

    assert "not found" in error.error.message


@pytest.mark.anyio
async def test_async_handlers_are_awaited(server: MCPServer) -> None:
    async def slow_echo(text: str) -> dict[str, str]:
        await anyio.sleep(0)
        return {"echo": text}

    server.register_tool("echo", slow_echo)

    result = await server.call_tool("echo", {"text": "hi"})

    assert json.loads(result["content"][0]["text"]) == {"echo": "hi"}


@pytest.mark.anyio
async def test_arguments_are_validated_before_invocation(server: MCPServer) -> None:
    calls: list[object] = []
    server.register_tool("count", lambda n: calls.append(n), params=[param("n", 0, ParamType.NUMBER)])

    error = await expect_mcp_error(server.call_tool("count", {"n": "three"}), types.INVALID_PARAMS)

    assert error.error.data == [{"param": "n", "message": "n must be of type number"}]
    assert calls == []


@pytest.mark.anyio
async def test_keyword_only_parameters_are_passed_by_name(server: MCPServer) -> None:
    def greet(name: str, *, punct: str = "!") -> str:
        return f"hello {name}{punct}"

    server.register_tool("greet", greet)

    asked = await server.call_tool("greet", {"name": "ada", "punct": "?"})
    defaulted = await server.call_tool("greet", {"name": "ada"})

    assert asked["content"][0]["text"] == "hello ada?"
    assert defaulted["content"][0]["text"] == "hello ada!"


@pytest.mark.anyio
async def test_handler_exception_becomes_internal_error(
    server: MCPServer, caplog: pytest.LogCaptureFixture
) -> None:
    def explode() -> None:
        raise RuntimeError("disk on fire")

    server.register_tool("explode", explode)

    with caplog.at_level(logging.ERROR):
        error = await expect_mcp_error(server.call_tool("explode"), types.INTERNAL_ERROR)

    assert error.error.message == "disk on fire"
    assert "Tool 'explode' failed" in caplog.text


@pytest.mark.anyio
async def test_handlers_may_return_outcomes(server: MCPServer) -> None:
    server.register_tool("ok", lambda: Success("fine"))
    server.register_tool("bad", lambda: Failure(ValueError("nope")))
    server.register_tool(
        "denied",
        lambda: Failure(McpError(types.ErrorData(code=types.INVALID_REQUEST, message="denied"))),
    )

    assert (await server.call_tool("ok"))["content"][0]["text"] == "fine"
    error = await expect_mcp_error(server.call_tool("bad"), types.INTERNAL_ERROR)
    assert error.error.message == "nope"
    await expect_mcp_error(server.call_tool("denied"), types.INVALID_REQUEST)


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("value", "text"),
    [("plain", "plain"), (None, "null"), (42, "42"), ([1, "a"], '[1, "a"]'), ({"k": True}, '{"k": true}')],
)
async def test_results_are_rendered_as_text(server: MCPServer, value: object, text: str) -> None:
    server.register_tool("value", lambda: value)

    assert await server.call_tool("value") == {"content": [{"type": "text", "text": text}]}


@pytest.mark.anyio
async def test_call_tool_result_passes_through(server: MCPServer) -> None:
    result = types.CallToolResult(content=[types.TextContent(type="text", text="boom")], isError=True)
    server.register_tool("raw", lambda: result)

    assert await server.call_tool("raw") == {"content": [{"type": "text", "text": "boom"}], "isError": True}


@pytest.mark.anyio
async def test_dynamic_tools_can_be_replaced_and_removed(server: MCPServer) -> None:
    server.register_tool("version", lambda: "v1")
    server.register_tool("version", lambda: "v2")

    assert (await server.call_tool("version"))["content"][0]["text"] == "v2"

    server.unregister_tool("version")
    await expect_mcp_error(server.call_tool("version"), types.METHOD_NOT_FOUND)
    assert server.unregister_tool("version") is None


def test_static_tools_cannot_be_unregistered(server: MCPServer) -> None:
    with server.binding():

        @tool()
        def fixed() -> str:
            return "fixed"

    with pytest.raises(RegistrationError):
        server.unregister_tool("fixed")


@pytest.mark.anyio
async def test_tools_listing_paginates() -> None:
    small = MCPServer("paged", page_size=2)
    for index in range(5):
        small.register_tool(f"t{index}", lambda: None)

    names: list[str] = []
    cursor = None
    while True:
        page = await small.list_tools(cursor)
        names.extend(item["name"] for item in page["tools"])
        cursor = page.get("nextCursor")
        if cursor is None:
            break

    assert names == ["t0", "t1", "t2", "t3", "t4"]
