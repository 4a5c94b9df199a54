# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Decorator metadata collection and signature introspection."""

from __future__ import annotations

from typing import Any, Optional

import pytest

from forgemcp import (
    CollectedMetadata,
    MetadataProvider,
    ParamType,
    collecting,
    completion,
    dynamic_prompts,
    dynamic_resources,
    prompt,
    prompt_template,
    resource,
    resource_template,
    tool,
)
from forgemcp.descriptors import CapabilityKind, params_from_signature, type_tag_for
from forgemcp.metadata import extract_capabilities, get_active_collector
from forgemcp.server import MCPServer, RegistrationError
from forgemcp.tool import extract_tool_spec


def test_collecting_gathers_every_decorator_kind() -> None:
    with collecting() as metadata:

        @tool()
        def a_tool() -> None: ...

        @resource("x://r")
        def a_resource() -> str:
            """Resource docs."""
            return ""

        @resource_template("x://t/{id}")
        def a_template(params: dict[str, str]) -> str:
            return ""

        @prompt()
        def a_prompt() -> str:
            return ""

        @prompt_template("p-{id}")
        def a_prompt_template(arguments: dict[str, str]) -> str:
            return ""

        @dynamic_resources(description="More resources")
        def more_resources(server: Any) -> None: ...

        @dynamic_prompts
        def more_prompts(server: Any) -> None: ...

        @completion(prompt="a_prompt")
        def a_completion(argument: Any, context: Any) -> list[str]:
            return []

    assert isinstance(metadata, MetadataProvider)
    assert [item.name for item in metadata.get_static_tools_metadata()] == ["a_tool"]
    assert metadata.get_static_resources_metadata()[0].description == "Resource docs."
    assert metadata.get_static_resource_templates_metadata()[0].uri_template == "x://t/{id}"
    assert metadata.get_static_prompts_metadata()[0].name == "a_prompt"
    assert metadata.get_static_prompt_templates_metadata()[0].name_template == "p-{id}"
    generators = metadata.get_dynamic_generators()
    assert [(item.kind, item.description) for item in generators] == [
        (CapabilityKind.RESOURCE, "More resources"),
        (CapabilityKind.PROMPT, None),
    ]
    assert metadata.get_completion_providers()[0].key == "a_prompt"
    assert get_active_collector() is None


def test_decorators_outside_a_collector_only_attach_metadata() -> None:
    @tool("renamed", description="Explicit")
    def plain_name() -> str:
        return "x"

    spec = extract_tool_spec(plain_name)

    assert spec is not None
    assert spec.name == "renamed"
    assert spec.description == "Explicit"
    assert plain_name() == "x"


def test_stacked_decorators_attach_every_item() -> None:
    @tool()
    @prompt()
    def both() -> str:
        return ""

    kinds = [type(item).__name__ for item in extract_capabilities(both)]

    assert kinds == ["PromptDescriptor", "ToolDescriptor"]


@pytest.mark.anyio
async def test_include_registers_predecorated_functions() -> None:
    @tool()
    def later(value: int) -> int:
        return value * 2

    server = MCPServer("include")
    server.include(later)

    assert server.tool_names == ["later"]
    assert (await server.call_tool("later", {"value": 4}))["content"][0]["text"] == "8"

    with pytest.raises(RegistrationError):
        server.include(lambda: None)


def test_collected_metadata_include() -> None:
    @resource("x://included")
    def included() -> str:
        return ""

    metadata = CollectedMetadata()
    metadata.include(included)

    assert [item.uri for item in metadata.get_static_resources_metadata()] == ["x://included"]
    with pytest.raises(TypeError):
        metadata.collect(object())


@pytest.mark.anyio
async def test_async_generators_are_rejected() -> None:
    server = MCPServer("async-gen")

    with server.binding():

        @dynamic_resources
        async def not_allowed(target: MCPServer) -> None: ...

    with pytest.raises(RegistrationError, match="must be synchronous"):
        await server.list_resources()


@pytest.mark.parametrize(
    ("annotation", "tag"),
    [
        (str, ParamType.STRING),
        (int, ParamType.NUMBER),
        (float, ParamType.NUMBER),
        (bool, ParamType.BOOLEAN),
        (list[int], ParamType.ARRAY),
        (tuple, ParamType.ARRAY),
        (dict[str, Any], ParamType.OBJECT),
        (Optional[str], ParamType.STRING),
        (int | None, ParamType.NUMBER),
        (int | str, ParamType.ANY),
        (Any, ParamType.ANY),
        (bytes, ParamType.ANY),
    ],
)
def test_type_tags(annotation: Any, tag: ParamType) -> None:
    assert type_tag_for(annotation) is tag


def test_params_from_signature() -> None:
    def handler(query: str, limit: int = 5, *args: Any, flag: bool = False, **kwargs: Any) -> None: ...

    params = params_from_signature(handler, {"query": "Search text"})

    assert [(p.name, p.index, p.type, p.required, p.description) for p in params] == [
        ("query", 0, ParamType.STRING, True, "Search text"),
        ("limit", 1, ParamType.NUMBER, False, None),
        ("flag", 2, ParamType.BOOLEAN, False, None),
    ]
