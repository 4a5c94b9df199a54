# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Completion provider registration.

Registered callables answer ``completion/complete`` for one prompt or one
resource template.  A provider receives the ``CompletionArgument`` being
completed and the optional ``CompletionContext``, and returns candidate
values: strings, :class:`~forgemcp.server.ranking.CompletionCandidate`
objects, or a ``Completion``.  The server ranks and caps the candidates, so
providers may return everything they know.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from .descriptors import CompletionSpec
from .metadata import announce


if TYPE_CHECKING:
    from . import types
    from .server.ranking import CompletionCandidate


class CompletionFunction(Protocol):
    def __call__(
        self, argument: types.CompletionArgument, context: types.CompletionContext | None
    ) -> (
        Iterable[str | CompletionCandidate]
        | types.Completion
        | None
        | Awaitable[Iterable[str | CompletionCandidate] | types.Completion | None]
    ): ...


ProviderFn = TypeVar("ProviderFn", bound=Callable[..., Any])


def completion(*, prompt: str | None = None, resource: str | None = None) -> Callable[[ProviderFn], ProviderFn]:
    """Register a completion provider.

    Exactly one of ``prompt`` or ``resource`` must be supplied.
    """
    if (prompt is None) == (resource is None):
        raise ValueError("Provide exactly one of 'prompt' or 'resource'.")

    ref_type = "prompt" if prompt is not None else "resource"
    key = prompt if prompt is not None else resource

    def decorator(fn: ProviderFn) -> ProviderFn:
        return announce(fn, CompletionSpec(ref_type=ref_type, key=key, fn=fn))  # type: ignore[arg-type]

    return decorator


__all__ = ["CompletionFunction", "completion"]
