# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""JSON Schema generation from parameter descriptors.

Tools advertise an ``inputSchema`` and prompts an ``arguments`` list.  Both are
derived from the ordered :class:`~forgemcp.descriptors.ParamDescriptor` list
registered with the capability.  Per-type schemas come from
:class:`pydantic.TypeAdapter` so the output matches what pydantic would emit
for the equivalent annotation, minus cosmetic ``title`` noise.
"""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter

from .. import types
from ..descriptors import ParamDescriptor, ParamType


JsonSchema = dict[str, Any]

_ANNOTATIONS: dict[ParamType, Any] = {
    ParamType.STRING: str,
    ParamType.NUMBER: float,
    ParamType.BOOLEAN: bool,
    ParamType.ARRAY: list[Any],
    ParamType.OBJECT: dict[str, Any],
    ParamType.ANY: Any,
}


class SchemaError(TypeError):
    """Raised when a schema cannot be derived for a type tag."""


@lru_cache(maxsize=None)
def _cached_schema(tag: ParamType) -> tuple[tuple[str, Any], ...]:
    try:
        schema = TypeAdapter(_ANNOTATIONS[tag]).json_schema()
    except Exception as exc:  # pragma: no cover - surface the original failure
        raise SchemaError(f"Unable to derive JSON schema for {tag!r}") from exc
    _strip_field(schema, "title")
    return tuple(schema.items())


def schema_for(tag: ParamType | str) -> JsonSchema:
    """Return a fresh JSON Schema fragment for ``tag``."""
    return _clone_schema(dict(_cached_schema(ParamType(tag))))


def build_input_schema(params: Iterable[ParamDescriptor]) -> JsonSchema:
    """Build a tool ``inputSchema`` object from ``params``."""
    properties: dict[str, JsonSchema] = {}
    required: list[str] = []
    for param in sorted(params, key=lambda item: item.index):
        fragment = schema_for(param.type)
        if param.description:
            fragment["description"] = param.description
        properties[param.name] = fragment
        if param.required:
            required.append(param.name)

    schema: JsonSchema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def build_prompt_arguments(params: Iterable[ParamDescriptor]) -> list[types.PromptArgument]:
    """Translate ``params`` into ``PromptArgument`` entries for ``prompts/list``."""
    return [
        types.PromptArgument(name=param.name, description=param.description, required=param.required)
        for param in sorted(params, key=lambda item: item.index)
    ]


def _clone_schema(schema: Any) -> Any:
    if isinstance(schema, dict):
        return {key: _clone_schema(value) for key, value in schema.items()}
    if isinstance(schema, list):
        return [_clone_schema(item) for item in schema]
    return schema


def _strip_field(node: Any, field_name: str) -> None:
    """Remove ``field_name`` wherever it appears in ``node``."""
    if isinstance(node, MutableMapping):
        node.pop(field_name, None)
        for value in node.values():
            _strip_field(value, field_name)
    elif isinstance(node, list):
        for value in node:
            _strip_field(value, field_name)


__all__ = ["JsonSchema", "SchemaError", "build_input_schema", "build_prompt_arguments", "schema_for"]
