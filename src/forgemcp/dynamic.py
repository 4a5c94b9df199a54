# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Generators for dynamically registered capabilities.

A generator is a plain function that receives the server and registers
capabilities through its runtime API (``server.register_resource(...)``,
``server.register_prompt(...)``).  It runs once, lazily, the first time its
kind is listed or resolved.  Generators must be synchronous.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar, overload

from .descriptors import CapabilityKind, GeneratorSpec
from .metadata import announce


GeneratorFn = TypeVar("GeneratorFn", bound=Callable[[Any], Any])


def _generator(kind: CapabilityKind, fn: Any, description: str | None) -> Any:
    def decorator(target: GeneratorFn) -> GeneratorFn:
        desc = description if description is not None else (target.__doc__ or "").strip() or None
        return announce(target, GeneratorSpec(kind=kind, fn=target, description=desc))

    if fn is not None:
        return decorator(fn)
    return decorator


@overload
def dynamic_resources(fn: GeneratorFn) -> GeneratorFn: ...


@overload
def dynamic_resources(*, description: str | None = None) -> Callable[[GeneratorFn], GeneratorFn]: ...


def dynamic_resources(fn: Any = None, *, description: str | None = None) -> Any:
    """Mark a function that registers resources at first use."""
    return _generator(CapabilityKind.RESOURCE, fn, description)


@overload
def dynamic_prompts(fn: GeneratorFn) -> GeneratorFn: ...


@overload
def dynamic_prompts(*, description: str | None = None) -> Callable[[GeneratorFn], GeneratorFn]: ...


def dynamic_prompts(fn: Any = None, *, description: str | None = None) -> Any:
    """Mark a function that registers prompts at first use."""
    return _generator(CapabilityKind.PROMPT, fn, description)


__all__ = ["dynamic_prompts", "dynamic_resources"]
