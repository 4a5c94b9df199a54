# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Capability metadata collection.

The decorators in :mod:`forgemcp.tool`, :mod:`forgemcp.resource` and friends
do not touch a server directly.  Each one builds a descriptor, attaches it to
the decorated function, and hands it to the *active collector*, if any.  A
collector is anything with a ``collect(item)`` method; an
:class:`~forgemcp.server.MCPServer` inside :meth:`binding()
<forgemcp.server.MCPServer.binding>` is one, :class:`CollectedMetadata` is
another.

:class:`CollectedMetadata` implements the :class:`MetadataProvider` protocol
that the server consumes at construction, so capabilities can be declared
once and bound to several servers.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar, runtime_checkable

from .descriptors import (
    CompletionSpec,
    GeneratorSpec,
    PromptDescriptor,
    PromptTemplateDescriptor,
    ResourceDescriptor,
    ResourceTemplateDescriptor,
    ToolDescriptor,
)


CapabilityItem = Any
F = TypeVar("F", bound=Callable[..., Any])


@runtime_checkable
class MetadataProvider(Protocol):
    """Source of statically declared capabilities."""

    def get_static_tools_metadata(self) -> Sequence[ToolDescriptor]: ...

    def get_static_resources_metadata(self) -> Sequence[ResourceDescriptor]: ...

    def get_static_resource_templates_metadata(self) -> Sequence[ResourceTemplateDescriptor]: ...

    def get_static_prompts_metadata(self) -> Sequence[PromptDescriptor]: ...

    def get_static_prompt_templates_metadata(self) -> Sequence[PromptTemplateDescriptor]: ...

    def get_dynamic_generators(self) -> Sequence[GeneratorSpec]: ...

    def get_completion_providers(self) -> Sequence[CompletionSpec]: ...


class Collector(Protocol):
    def collect(self, item: CapabilityItem) -> None: ...


@dataclass(slots=True)
class CollectedMetadata:
    """In-memory :class:`MetadataProvider` filled by the decorators."""

    tools: list[ToolDescriptor] = field(default_factory=list)
    resources: list[ResourceDescriptor] = field(default_factory=list)
    resource_templates: list[ResourceTemplateDescriptor] = field(default_factory=list)
    prompts: list[PromptDescriptor] = field(default_factory=list)
    prompt_templates: list[PromptTemplateDescriptor] = field(default_factory=list)
    generators: list[GeneratorSpec] = field(default_factory=list)
    completions: list[CompletionSpec] = field(default_factory=list)

    def collect(self, item: CapabilityItem) -> None:
        if isinstance(item, ToolDescriptor):
            self.tools.append(item)
        elif isinstance(item, ResourceDescriptor):
            self.resources.append(item)
        elif isinstance(item, ResourceTemplateDescriptor):
            self.resource_templates.append(item)
        elif isinstance(item, PromptDescriptor):
            self.prompts.append(item)
        elif isinstance(item, PromptTemplateDescriptor):
            self.prompt_templates.append(item)
        elif isinstance(item, GeneratorSpec):
            self.generators.append(item)
        elif isinstance(item, CompletionSpec):
            self.completions.append(item)
        else:
            raise TypeError(f"Cannot collect {item!r}")

    def include(self, *targets: Callable[..., Any]) -> None:
        """Collect the metadata attached to already-decorated functions."""
        for target in targets:
            for item in extract_capabilities(target):
                self.collect(item)

    def get_static_tools_metadata(self) -> Sequence[ToolDescriptor]:
        return tuple(self.tools)

    def get_static_resources_metadata(self) -> Sequence[ResourceDescriptor]:
        return tuple(self.resources)

    def get_static_resource_templates_metadata(self) -> Sequence[ResourceTemplateDescriptor]:
        return tuple(self.resource_templates)

    def get_static_prompts_metadata(self) -> Sequence[PromptDescriptor]:
        return tuple(self.prompts)

    def get_static_prompt_templates_metadata(self) -> Sequence[PromptTemplateDescriptor]:
        return tuple(self.prompt_templates)

    def get_dynamic_generators(self) -> Sequence[GeneratorSpec]:
        return tuple(self.generators)

    def get_completion_providers(self) -> Sequence[CompletionSpec]:
        return tuple(self.completions)


# ---------------------------------------------------------------------------
# Ambient collector
# ---------------------------------------------------------------------------

_CAPABILITY_ATTR = "__forgemcp_capabilities__"
_ACTIVE_COLLECTOR: ContextVar[Collector | None] = ContextVar("_forgemcp_active_collector", default=None)


def get_active_collector() -> Collector | None:
    """Return the collector currently receiving decorated capabilities, if any."""
    return _ACTIVE_COLLECTOR.get()


def set_active_collector(collector: Collector | None) -> Token[Collector | None]:
    """Activate ``collector`` for ambient registration (internal helper)."""
    return _ACTIVE_COLLECTOR.set(collector)


def reset_active_collector(token: Token[Collector | None]) -> None:
    """Restore the previous collector (internal helper)."""
    _ACTIVE_COLLECTOR.reset(token)


@contextmanager
def collecting(collector: Collector | None = None) -> Iterator[Any]:
    """Route decorated capabilities to ``collector`` (a fresh :class:`CollectedMetadata` by default)."""
    target = collector if collector is not None else CollectedMetadata()
    token = set_active_collector(target)
    try:
        yield target
    finally:
        reset_active_collector(token)


def announce(fn: F, item: CapabilityItem) -> F:
    """Attach ``item`` to ``fn`` and hand it to the active collector."""
    attached = getattr(fn, _CAPABILITY_ATTR, None)
    if not isinstance(attached, list):
        attached = []
        setattr(fn, _CAPABILITY_ATTR, attached)
    attached.append(item)

    collector = get_active_collector()
    if collector is not None:
        collector.collect(item)
    return fn


def extract_capabilities(fn: Callable[..., Any]) -> list[CapabilityItem]:
    """Return every capability item attached to ``fn`` by a decorator."""
    attached = getattr(fn, _CAPABILITY_ATTR, None)
    return list(attached) if isinstance(attached, list) else []


__all__ = [
    "CollectedMetadata",
    "MetadataProvider",
    "announce",
    "collecting",
    "extract_capabilities",
    "get_active_collector",
    "reset_active_collector",
    "set_active_collector",
]
