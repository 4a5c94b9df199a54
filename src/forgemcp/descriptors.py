# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Capability descriptors.

Descriptors are the registered metadata records for tools, resources,
resource templates, prompts and prompt templates.  They are plain dataclasses
produced either by the ambient decorators (:mod:`forgemcp.tool`,
:mod:`forgemcp.resource`, ...) or by explicit registration calls, and are owned
by :class:`~forgemcp.server.registry.CapabilityRegistry`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
import inspect
import types as pytypes
from typing import Any, ClassVar, Union, get_args, get_origin, get_type_hints

from .templates import UriTemplate


HandlerFn = Callable[..., Any]


class CapabilityKind(str, Enum):
    """Registry partitions."""

    TOOL = "tool"
    RESOURCE = "resource"
    RESOURCE_TEMPLATE = "resource_template"
    PROMPT = "prompt"
    PROMPT_TEMPLATE = "prompt_template"

    @property
    def is_template(self) -> bool:
        return self in (CapabilityKind.RESOURCE_TEMPLATE, CapabilityKind.PROMPT_TEMPLATE)


class ParamType(str, Enum):
    """Semantic type tags understood by the validator and schema generator."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"


@dataclass(frozen=True, slots=True)
class ParamDescriptor:
    """One handler parameter.

    ``index`` drives positional binding, ``name`` is the lookup key inside the
    request's ``arguments`` object.
    """

    name: str
    index: int
    type: ParamType = ParamType.ANY
    required: bool = True
    description: str | None = None


# ---------------------------------------------------------------------------
# Capability descriptors
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ToolDescriptor:
    kind: ClassVar[CapabilityKind] = CapabilityKind.TOOL

    name: str
    fn: HandlerFn
    description: str = ""
    params: tuple[ParamDescriptor, ...] = ()
    title: str | None = None

    @property
    def key(self) -> str:
        return self.name


@dataclass(slots=True)
class ResourceDescriptor:
    kind: ClassVar[CapabilityKind] = CapabilityKind.RESOURCE

    uri: str
    fn: HandlerFn
    name: str | None = None
    description: str | None = None
    mime_type: str | None = None
    subscribable: bool = False

    @property
    def key(self) -> str:
        return self.uri


@dataclass(slots=True)
class ResourceTemplateDescriptor:
    """Resource addressed by a ``{param}`` URI template.

    ``params`` is optional; when present the extracted values are validated
    against it before the handler runs.
    """

    kind: ClassVar[CapabilityKind] = CapabilityKind.RESOURCE_TEMPLATE

    uri_template: str
    fn: HandlerFn
    name: str | None = None
    description: str | None = None
    mime_type: str | None = None
    params: tuple[ParamDescriptor, ...] = ()
    template: UriTemplate = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.template = UriTemplate(self.uri_template)

    @property
    def key(self) -> str:
        return self.uri_template


@dataclass(slots=True)
class PromptDescriptor:
    kind: ClassVar[CapabilityKind] = CapabilityKind.PROMPT

    name: str
    fn: HandlerFn
    description: str = ""
    params: tuple[ParamDescriptor, ...] = ()

    @property
    def key(self) -> str:
        return self.name


@dataclass(slots=True)
class PromptTemplateDescriptor:
    kind: ClassVar[CapabilityKind] = CapabilityKind.PROMPT_TEMPLATE

    name_template: str
    fn: HandlerFn
    description: str | None = None
    params: tuple[ParamDescriptor, ...] = ()
    template: UriTemplate = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.template = UriTemplate(self.name_template)

    @property
    def key(self) -> str:
        return self.name_template


Descriptor = Union[
    ToolDescriptor,
    ResourceDescriptor,
    ResourceTemplateDescriptor,
    PromptDescriptor,
    PromptTemplateDescriptor,
]


@dataclass(slots=True)
class GeneratorSpec:
    """A one-time setup hook that registers dynamic capabilities.

    The function receives the owning server and is executed lazily, the first
    time capabilities of ``kind`` are listed or resolved.
    """

    kind: CapabilityKind
    fn: Callable[[Any], Any]
    description: str | None = None


@dataclass(slots=True)
class CompletionSpec:
    """Registered completion provider.

    ``ref_type`` is ``"prompt"`` or ``"resource"``; ``key`` is the prompt name
    or the resource template URI the provider answers for.
    """

    ref_type: str
    key: str
    fn: Callable[..., Any]


# ---------------------------------------------------------------------------
# Signature introspection
# ---------------------------------------------------------------------------

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def type_tag_for(annotation: Any) -> ParamType:
    """Map a Python annotation onto a :class:`ParamType`."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return ParamType.ANY

    origin = get_origin(annotation)
    if origin is Union or origin is pytypes.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return type_tag_for(members[0])
        return ParamType.ANY

    target = origin or annotation
    if not isinstance(target, type):
        return ParamType.ANY
    if issubclass(target, bool):
        return ParamType.BOOLEAN
    if issubclass(target, (int, float)):
        return ParamType.NUMBER
    if issubclass(target, str):
        return ParamType.STRING
    if issubclass(target, (list, tuple, set, frozenset)):
        return ParamType.ARRAY
    if issubclass(target, (dict, Mapping)):
        return ParamType.OBJECT
    return ParamType.ANY


def params_from_signature(
    fn: HandlerFn,
    descriptions: Mapping[str, str] | None = None,
) -> tuple[ParamDescriptor, ...]:
    """Derive ordered :class:`ParamDescriptor` entries from ``fn``'s signature.

    Parameters with defaults are optional; ``*args``/``**kwargs`` are skipped.
    ``descriptions`` supplies per-parameter help text keyed by name.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return ()

    try:
        hints = get_type_hints(fn)
    except Exception:
        hints = {}

    descriptions = descriptions or {}
    params: list[ParamDescriptor] = []
    for param in signature.parameters.values():
        if param.kind in _SKIPPED_KINDS:
            continue
        annotation = hints.get(param.name, param.annotation)
        params.append(
            ParamDescriptor(
                name=param.name,
                index=len(params),
                type=type_tag_for(annotation),
                required=param.default is inspect.Parameter.empty,
                description=descriptions.get(param.name),
            )
        )
    return tuple(params)


def param(
    name: str,
    index: int,
    type: ParamType | str = ParamType.ANY,
    *,
    required: bool = True,
    description: str | None = None,
) -> ParamDescriptor:
    """Shorthand for declaring a :class:`ParamDescriptor` by hand."""
    return ParamDescriptor(name=name, index=index, type=ParamType(type), required=required, description=description)


def coerce_params(
    params: Iterable[ParamDescriptor] | Mapping[str, str] | None,
    fn: HandlerFn,
) -> tuple[ParamDescriptor, ...]:
    """Normalise the ``params`` argument accepted by decorators and ``register_*``.

    ``None`` introspects ``fn``; a mapping is treated as name -> description
    overrides on top of introspection; an iterable of descriptors is used
    verbatim (sorted by index).
    """
    if params is None:
        return params_from_signature(fn)
    if isinstance(params, Mapping):
        return params_from_signature(fn, params)
    return tuple(sorted(params, key=lambda item: item.index))


__all__ = [
    "CapabilityKind",
    "CompletionSpec",
    "Descriptor",
    "GeneratorSpec",
    "HandlerFn",
    "ParamDescriptor",
    "ParamType",
    "PromptDescriptor",
    "PromptTemplateDescriptor",
    "ResourceDescriptor",
    "ResourceTemplateDescriptor",
    "ToolDescriptor",
    "coerce_params",
    "param",
    "params_from_signature",
    "type_tag_for",
]
