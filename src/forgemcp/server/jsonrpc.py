# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""JSON-RPC 2.0 framing.

:func:`handle_jsonrpc_message` takes one raw message (a request, a
notification, or a batch of them), validates the envelope and hands each
request to the dispatcher.  Framing problems are answered here: undecodable
JSON gets ``ParseError`` and a malformed envelope gets ``InvalidRequest``,
both with a ``null`` id.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, ValidationError

from .. import types


if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .dispatcher import Dispatcher


RequestId = Union[StrictInt, StrictStr, None]


class RequestEnvelope(BaseModel):
    """Shape every incoming request or notification must have."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"]
    method: StrictStr
    id: RequestId = None
    params: dict[str, Any] | list[Any] | None = None


def build_result(request_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result if result is not None else {}}


def build_error(request_id: Any, error: types.ErrorData) -> dict[str, Any]:
    payload: dict[str, Any] = {"code": error.code, "message": error.message}
    if error.data is not None:
        payload["data"] = error.data
    return {"jsonrpc": "2.0", "id": request_id, "error": payload}


def _framing_error(code: int, message: str, request_id: Any = None) -> dict[str, Any]:
    return build_error(request_id, types.ErrorData(code=code, message=message))


def parse_envelope(message: Any) -> RequestEnvelope | dict[str, Any]:
    """Validate one decoded message; returns an error response when malformed."""
    if not isinstance(message, dict):
        return _framing_error(types.INVALID_REQUEST, "Invalid Request")
    try:
        return RequestEnvelope.model_validate(message)
    except ValidationError:
        request_id = message.get("id")
        if isinstance(request_id, bool) or not isinstance(request_id, (int, str)):
            request_id = None
        return _framing_error(types.INVALID_REQUEST, "Invalid Request", request_id)


async def _handle_one(message: Any, dispatcher: Dispatcher) -> dict[str, Any] | None:
    envelope = parse_envelope(message)
    if isinstance(envelope, dict):
        return envelope
    return await dispatcher.handle_request(envelope.model_dump(exclude_unset=True))


async def handle_jsonrpc_message(raw: str | bytes, dispatcher: Dispatcher) -> str | None:
    """Process one raw JSON-RPC message and return the serialized response.

    Returns ``None`` when nothing must be written back (a notification, or a
    batch made only of notifications).
    """
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        return json.dumps(_framing_error(types.PARSE_ERROR, "Parse error"))

    if isinstance(decoded, list):
        if not decoded:
            return json.dumps(_framing_error(types.INVALID_REQUEST, "Invalid Request"))
        responses = [response for item in decoded if (response := await _handle_one(item, dispatcher)) is not None]
        return json.dumps(responses) if responses else None

    response = await _handle_one(decoded, dispatcher)
    return json.dumps(response) if response is not None else None


__all__ = [
    "RequestEnvelope",
    "build_error",
    "build_result",
    "handle_jsonrpc_message",
    "parse_envelope",
]
