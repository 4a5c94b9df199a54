# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import base64
from dataclasses import dataclass

from forgemcp import types
from forgemcp.server.adapters import (
    JSON_MIME,
    TEXT_MIME,
    normalize_prompt_result,
    normalize_resource_payload,
    normalize_tool_result,
    to_text_content,
)


@dataclass
class Opaque:
    value: int


def test_to_text_content_variants() -> None:
    assert to_text_content("hello") == "hello"
    assert to_text_content(None) == "null"
    assert to_text_content({"a": [1, 2]}) == '{"a": [1, 2]}'
    assert to_text_content(types.TextContent(type="text", text="x")) == '{"type": "text", "text": "x"}'
    assert to_text_content(Opaque(3)) == "Opaque(value=3)"


def test_normalize_tool_result_from_string() -> None:
    assert normalize_tool_result("hello") == {"content": [{"type": "text", "text": "hello"}]}


def test_normalize_resource_payload_bytes() -> None:
    data = b"\x00\x01demo"

    result = normalize_resource_payload("resource://demo/blob", "image/png", data)

    content = result["contents"][0]
    assert content["mimeType"] == "image/png"
    assert base64.b64decode(content["blob"]) == data


def test_normalize_resource_payload_mime_defaults() -> None:
    text = normalize_resource_payload("resource://demo/text", None, "hello")
    structured = normalize_resource_payload("resource://demo/json", None, [1])
    templated = normalize_resource_payload("resource://demo/1", None, "hello", templated=True)

    assert text["contents"][0]["mimeType"] == TEXT_MIME
    assert structured["contents"][0] == {"uri": "resource://demo/json", "mimeType": JSON_MIME, "text": "[1]"}
    assert templated["contents"][0]["mimeType"] == JSON_MIME


def test_resource_uri_is_echoed_verbatim() -> None:
    uri = "File:///Logs/2025-01-01"

    assert normalize_resource_payload(uri, None, "x")["contents"][0]["uri"] == uri


def test_read_resource_result_passes_through() -> None:
    payload = types.ReadResourceResult(
        contents=[types.TextResourceContents(uri="resource://demo/x", mimeType="text/markdown", text="# hi")]
    )

    result = normalize_resource_payload("resource://demo/x", None, payload)

    assert result["contents"][0]["text"] == "# hi"
    assert result["contents"][0]["mimeType"] == "text/markdown"


def test_prompt_mapping_keeps_description() -> None:
    result = normalize_prompt_result({"description": "Greeting", "messages": ["hi"]})

    assert result == {
        "description": "Greeting",
        "messages": [{"role": "user", "content": {"type": "text", "text": "hi"}}],
    }
