# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Normalization helpers for handler results.

The adapters keep the capability services thin while making sure every
outbound payload has the response shape the protocol expects:

* ``tools/call``: ``{"content": [{"type": "text", "text": ...}]}``
* ``resources/read``: ``{"contents": [{"uri", "mimeType", "text" | "blob"}]}``
* ``prompts/get``: ``{"messages": [...], "description"?: ...}``

Resource payloads are built as plain dicts rather than validated models so the
``uri`` echoes the requested URI byte for byte.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
import json
from typing import Any, Final

from pydantic import BaseModel

from .. import types


JSON_MIME: Final[str] = "application/json"
TEXT_MIME: Final[str] = "text/plain"
BINARY_MIME: Final[str] = "application/octet-stream"

_DUMP_OPTIONS: Final[dict[str, Any]] = {"by_alias": True, "mode": "json", "exclude_none": True}


def to_text_content(value: Any) -> str:
    """Render ``value`` as text: strings verbatim, everything else as JSON."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, BaseModel):
        value = value.model_dump(**_DUMP_OPTIONS)
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def normalize_tool_result(value: Any) -> dict[str, Any]:
    """Coerce tool handler output into a ``tools/call`` result payload.

    A handler returning a ``CallToolResult`` is passed through unchanged.
    """
    if isinstance(value, types.CallToolResult):
        return value.model_dump(**_DUMP_OPTIONS)
    block = types.TextContent(type="text", text=to_text_content(value))
    return {"content": [block.model_dump(**_DUMP_OPTIONS)]}


def normalize_resource_payload(
    uri: str, declared_mime: str | None, payload: Any, *, templated: bool = False
) -> dict[str, Any]:
    """Coerce resource handler output into a ``resources/read`` result payload.

    The MIME type is the declared one when present; otherwise templates default
    to JSON, and static resources to plain text for strings and JSON for
    structured values.  ``bytes`` become a base64 ``blob`` entry.
    """
    if isinstance(payload, types.ReadResourceResult):
        return payload.model_dump(**_DUMP_OPTIONS)

    if isinstance(payload, (bytes, bytearray)):
        encoded = base64.b64encode(bytes(payload)).decode("ascii")
        entry = {"uri": uri, "mimeType": declared_mime or BINARY_MIME, "blob": encoded}
        return {"contents": [entry]}

    if declared_mime:
        mime = declared_mime
    elif templated or not isinstance(payload, str):
        mime = JSON_MIME
    else:
        mime = TEXT_MIME
    return {"contents": [{"uri": uri, "mimeType": mime, "text": to_text_content(payload)}]}


def normalize_prompt_result(value: Any) -> dict[str, Any]:
    """Coerce prompt handler output into a ``prompts/get`` result payload.

    Mappings with ``messages`` pass through, a list is taken as the message
    list, and any other value becomes a single user text message.
    """
    if isinstance(value, types.GetPromptResult):
        payload = value.model_dump(**_DUMP_OPTIONS)
    elif isinstance(value, Mapping) and "messages" in value:
        payload = dict(value)
        payload["messages"] = [_message(item) for item in value["messages"]]
    elif isinstance(value, (list, tuple)):
        payload = {"messages": [_message(item) for item in value]}
    else:
        payload = {"messages": [_user_text(to_text_content(value))]}

    return payload


def _message(item: Any) -> Any:
    if isinstance(item, BaseModel):
        return item.model_dump(**_DUMP_OPTIONS)
    if isinstance(item, str):
        return _user_text(item)
    return item


def _user_text(text: str) -> dict[str, Any]:
    message = types.PromptMessage(role="user", content=types.TextContent(type="text", text=text))
    return message.model_dump(**_DUMP_OPTIONS)


__all__ = [
    "BINARY_MIME",
    "JSON_MIME",
    "TEXT_MIME",
    "normalize_prompt_result",
    "normalize_resource_payload",
    "normalize_tool_result",
    "to_text_content",
]
