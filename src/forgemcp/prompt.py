# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Prompt and prompt template registration."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from .descriptors import ParamDescriptor, PromptDescriptor, PromptTemplateDescriptor, coerce_params
from .metadata import announce


PromptFn = TypeVar("PromptFn", bound=Callable[..., Any])


def prompt(
    name: str | None = None,
    *,
    description: str | None = None,
    params: Iterable[ParamDescriptor] | Mapping[str, str] | None = None,
) -> Callable[[PromptFn], PromptFn]:
    """Register a prompt renderer.

    The handler is called positionally with the declared arguments and returns
    ``{"messages": [...]}``, a list of messages, or a string that becomes a
    single user message.
    """

    def decorator(fn: PromptFn) -> PromptFn:
        desc = (description if description is not None else (fn.__doc__ or "")).strip()
        descriptor = PromptDescriptor(
            name=name or fn.__name__,
            fn=fn,
            description=desc,
            params=coerce_params(params, fn),
        )
        return announce(fn, descriptor)

    return decorator


def prompt_template(
    name_template: str,
    *,
    description: str | None = None,
    params: Iterable[ParamDescriptor] | None = None,
) -> Callable[[PromptFn], PromptFn]:
    """Register a prompt addressed by a ``{param}`` name template.

    Values extracted from the requested name win over explicit arguments of
    the same name.  When ``params`` is given the merged arguments are
    validated before the handler runs.  Prompt templates are not listed by
    ``prompts/list``.
    """

    def decorator(fn: PromptFn) -> PromptFn:
        descriptor = PromptTemplateDescriptor(
            name_template=name_template,
            fn=fn,
            description=description if description is not None else (fn.__doc__ or "").strip() or None,
            params=tuple(sorted(params or (), key=lambda item: item.index)),
        )
        return announce(fn, descriptor)

    return decorator


__all__ = ["prompt", "prompt_template"]
