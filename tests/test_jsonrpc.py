# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import json

import pytest

from forgemcp import types
from forgemcp.server import MCPServer, handle_jsonrpc_message


async def _roundtrip(server: MCPServer, raw: str | bytes):
    response = await handle_jsonrpc_message(raw, server.dispatcher)
    return None if response is None else json.loads(response)


@pytest.mark.anyio
async def test_parse_error_has_null_id(server: MCPServer) -> None:
    response = await _roundtrip(server, "{not json")

    assert response == {"jsonrpc": "2.0", "id": None, "error": {"code": types.PARSE_ERROR, "message": "Parse error"}}


@pytest.mark.anyio
@pytest.mark.parametrize(
    "message",
    [
        "42",
        '"ping"',
        '{"jsonrpc": "1.0", "id": 1, "method": "ping"}',
        '{"jsonrpc": "2.0", "id": 1}',
        '{"jsonrpc": "2.0", "id": 1, "method": 7}',
        '{"jsonrpc": "2.0", "id": 1, "method": "ping", "params": "x"}',
        "[]",
    ],
)
async def test_malformed_envelopes_are_invalid_request(server: MCPServer, message: str) -> None:
    response = await _roundtrip(server, message)

    assert response["error"] == {"code": types.INVALID_REQUEST, "message": "Invalid Request"}


@pytest.mark.anyio
async def test_invalid_request_keeps_usable_id(server: MCPServer) -> None:
    response = await _roundtrip(server, '{"jsonrpc": "2.0", "id": "abc"}')

    assert response["id"] == "abc"


@pytest.mark.anyio
async def test_single_request_and_notification(server: MCPServer) -> None:
    assert await _roundtrip(server, b'{"jsonrpc": "2.0", "id": "p1", "method": "ping"}') == {
        "jsonrpc": "2.0",
        "id": "p1",
        "result": {},
    }
    assert await _roundtrip(server, '{"jsonrpc": "2.0", "method": "notifications/initialized"}') is None


@pytest.mark.anyio
async def test_batches_answer_requests_only(server: MCPServer) -> None:
    batch = json.dumps(
        [
            {"jsonrpc": "2.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "nope"},
            "garbage",
        ]
    )

    responses = await _roundtrip(server, batch)

    assert [item["id"] for item in responses] == [1, 2, None]
    assert responses[0]["result"] == {}
    assert responses[1]["error"]["code"] == types.METHOD_NOT_FOUND
    assert responses[2]["error"]["code"] == types.INVALID_REQUEST


@pytest.mark.anyio
async def test_batch_of_notifications_produces_nothing(server: MCPServer) -> None:
    batch = json.dumps([{"jsonrpc": "2.0", "method": "notifications/initialized"}])

    assert await handle_jsonrpc_message(batch, server.dispatcher) is None
