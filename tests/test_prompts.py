# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import pytest

from forgemcp import ParamType, dynamic_prompts, param, prompt, prompt_template, types
from forgemcp.server import MCPServer
from tests.helpers import RecordingSender, expect_mcp_error


def _user(text: str) -> dict[str, object]:
    return {"role": "user", "content": {"type": "text", "text": text}}


@pytest.mark.anyio
async def test_prompt_renders_messages(server: MCPServer) -> None:
    with server.binding():

        @prompt("summarize", description="Summarize a document", params={"topic": "Subject to cover"})
        def summarize(topic: str, style: str | None = None) -> dict[str, object]:
            return {"messages": [_user(f"Summarize {topic} ({style or 'brief'})")]}

    listing = await server.list_prompts()
    rendered = await server.get_prompt("summarize", {"topic": "MCP"})

    assert listing == {
        "prompts": [
            {
                "name": "summarize",
                "description": "Summarize a document",
                "arguments": [
                    {"name": "topic", "description": "Subject to cover", "required": True},
                    {"name": "style", "required": False},
                ],
            }
        ]
    }
    assert rendered == {"messages": [_user("Summarize MCP (brief)")]}


@pytest.mark.anyio
async def test_prompt_return_shapes_are_normalized(server: MCPServer) -> None:
    server.register_prompt("text", lambda: "just text")
    server.register_prompt("listed", lambda: ["first", _user("second")])
    server.register_prompt(
        "model",
        lambda: types.GetPromptResult(
            description="modelled",
            messages=[types.PromptMessage(role="assistant", content=types.TextContent(type="text", text="hi"))],
        ),
    )

    assert await server.get_prompt("text") == {"messages": [_user("just text")]}
    assert await server.get_prompt("listed") == {"messages": [_user("first"), _user("second")]}
    assert await server.get_prompt("model") == {
        "description": "modelled",
        "messages": [{"role": "assistant", "content": {"type": "text", "text": "hi"}}],
    }


@pytest.mark.anyio
async def test_missing_required_argument_is_invalid_params(server: MCPServer) -> None:
    server.register_prompt("greet", lambda name: f"Hello {name}")

    error = await expect_mcp_error(server.get_prompt("greet", {}), types.INVALID_PARAMS)

    assert error.error.data == [{"param": "name", "message": "name is required"}]


@pytest.mark.anyio
async def test_unknown_prompt_is_method_not_found(server: MCPServer) -> None:
    error = await expect_mcp_error(server.get_prompt("nope"), types.METHOD_NOT_FOUND)

    assert error.error.message == "Prompt 'nope' not found"


@pytest.mark.anyio
async def test_prompt_templates_merge_extracted_values(server: MCPServer) -> None:
    with server.binding():

        @prompt_template("review-{language}")
        def review(arguments: dict[str, str]) -> str:
            return f"Review {arguments['language']} code, focus {arguments.get('focus', 'all')}"

    rendered = await server.get_prompt("review-python", {"language": "rust", "focus": "safety"})

    assert rendered == {"messages": [_user("Review python code, focus safety")]}
    # Templates are resolved on demand, never listed.
    assert await server.list_prompts() == {"prompts": []}


@pytest.mark.anyio
async def test_prompt_template_with_two_parameters(server: MCPServer) -> None:
    server.register_prompt_template(
        "translate-{target}",
        lambda extracted, rest: f"{extracted['target']}:{rest.get('text', '')}",
    )

    rendered = await server.get_prompt("translate-fr", {"target": "de", "text": "hello"})

    assert rendered["messages"][0]["content"]["text"] == "fr:hello"


@pytest.mark.anyio
async def test_prompt_template_arguments_are_validated(server: MCPServer) -> None:
    calls: list[object] = []

    def greet(arguments: dict[str, object]) -> str:
        calls.append(arguments)
        return f"hi {arguments['who']} x{arguments['n'] + 1}"

    server.register_prompt_template(
        "greet-{who}",
        greet,
        params=[param("who", 0, ParamType.STRING), param("n", 1, ParamType.NUMBER)],
    )

    error = await expect_mcp_error(server.get_prompt("greet-bob", {"n": "x"}), types.INVALID_PARAMS)
    rendered = await server.get_prompt("greet-bob", {"n": 2})

    assert error.error.data == [{"param": "n", "message": "n must be of type number"}]
    assert rendered == {"messages": [_user("hi bob x3")]}
    assert len(calls) == 1


@pytest.mark.anyio
async def test_exact_prompt_wins_over_template(server: MCPServer) -> None:
    server.register_prompt_template("daily-{topic}", lambda: "template")
    server.register_prompt("daily-news", lambda: "exact")

    assert (await server.get_prompt("daily-news"))["messages"][0]["content"]["text"] == "exact"
    assert (await server.get_prompt("daily-sports"))["messages"][0]["content"]["text"] == "template"


@pytest.mark.anyio
async def test_dynamic_prompts_run_lazily_once(server: MCPServer) -> None:
    runs: list[int] = []

    def renderer(label: str):
        return lambda: f"prompt {label}"

    with server.binding():

        @dynamic_prompts
        def register_generated(target: MCPServer) -> None:
            runs.append(1)
            for name in ("alpha", "beta"):
                target.register_prompt(name, renderer(name))

    assert runs == []

    first = await server.list_prompts()
    second = await server.list_prompts()

    assert runs == [1]
    assert [item["name"] for item in first["prompts"]] == ["alpha", "beta"]
    assert first == second
    assert (await server.get_prompt("beta"))["messages"][0]["content"]["text"] == "prompt beta"


@pytest.mark.anyio
async def test_prompt_registration_announces_list_changes(server: MCPServer, sender: RecordingSender) -> None:
    server.set_notification_sender(sender)

    server.register_prompt("one", lambda: "1")
    server.register_prompt_template("two-{x}", lambda: "2")
    server.unregister_prompt("one")
    await server.flush_notifications()

    assert sender.methods == ["notifications/prompts/list_changed"] * 3
