# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import pytest

from forgemcp import types
from forgemcp.descriptors import ParamType, param
from forgemcp.utils.schema import build_input_schema, build_prompt_arguments, schema_for


class TestSchemaFragments:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            (ParamType.STRING, {"type": "string"}),
            (ParamType.NUMBER, {"type": "number"}),
            (ParamType.BOOLEAN, {"type": "boolean"}),
            (ParamType.ARRAY, {"type": "array", "items": {}}),
            (ParamType.OBJECT, {"type": "object", "additionalProperties": True}),
            (ParamType.ANY, {}),
        ],
    )
    def test_schema_for_each_tag(self, tag: ParamType, expected: dict) -> None:
        assert schema_for(tag) == expected

    def test_schema_for_accepts_string_tags(self) -> None:
        assert schema_for("string") == {"type": "string"}

    def test_schema_for_returns_fresh_copies(self) -> None:
        first = schema_for(ParamType.STRING)
        first["description"] = "mutated"

        assert schema_for(ParamType.STRING) == {"type": "string"}


class TestInputSchema:
    def test_builds_object_schema_in_index_order(self) -> None:
        params = [
            param("limit", 1, ParamType.NUMBER, required=False),
            param("query", 0, ParamType.STRING, description="Search text"),
        ]

        schema = build_input_schema(params)

        assert list(schema["properties"]) == ["query", "limit"]
        assert schema["properties"]["query"] == {"type": "string", "description": "Search text"}
        assert schema["required"] == ["query"]

    def test_omits_required_when_everything_is_optional(self) -> None:
        assert build_input_schema([param("x", 0, required=False)]) == {"type": "object", "properties": {"x": {}}}

    def test_empty_parameter_list(self) -> None:
        assert build_input_schema([]) == {"type": "object", "properties": {}}


def test_prompt_arguments() -> None:
    arguments = build_prompt_arguments([param("b", 1, required=False), param("a", 0, description="First")])

    assert arguments == [
        types.PromptArgument(name="a", description="First", required=True),
        types.PromptArgument(name="b", required=False),
    ]
