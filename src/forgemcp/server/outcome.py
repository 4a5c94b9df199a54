# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Invocation boundary between the dispatcher and user handlers.

:func:`invoke` runs a sync or async handler and never raises: the call ends as
either :class:`Success` or :class:`Failure`.  Handlers may also return those
types themselves to report an error without raising.  :func:`unwrap` turns the
outcome back into a value or a protocol error.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Any, Generic, TypeVar, Union

from mcp.shared.exceptions import McpError

from .errors import internal_error
from ..utils import maybe_await_with_args


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Failure:
    error: BaseException


Outcome = Union[Success[Any], Failure]


async def invoke(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Outcome:
    """Call ``fn(*args, **kwargs)`` and capture the result as an :data:`Outcome`."""
    try:
        result = await maybe_await_with_args(fn, *args, **kwargs)
    except Exception as exc:
        return Failure(exc)
    if isinstance(result, (Success, Failure)):
        return result
    return Success(result)


def unwrap(outcome: Outcome, *, logger: logging.Logger | None = None, label: str = "handler") -> Any:
    """Return the success value or raise the failure as :class:`McpError`.

    A failure that already is an :class:`McpError` keeps its code; anything
    else becomes ``InternalError`` carrying the original message.
    """
    if isinstance(outcome, Success):
        return outcome.value

    error = outcome.error
    if isinstance(error, McpError):
        raise error
    if logger is not None:
        logger.error("%s failed: %s", label, error, exc_info=error)
    raise internal_error(str(error) or type(error).__name__) from error


__all__ = ["Failure", "Outcome", "Success", "invoke", "unwrap"]
