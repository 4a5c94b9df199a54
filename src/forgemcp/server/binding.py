# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Argument validation and positional binding.

Handlers are called positionally in the order of their
:class:`~forgemcp.descriptors.ParamDescriptor` list, while requests carry an
``arguments`` object keyed by name.  This module checks that object against
the descriptors and produces the positional argument list.  Keyword-only
handler parameters are passed by name instead.

Template-addressed handlers additionally receive the values extracted from
the URI or prompt name, converted to the type declared for them when a
descriptor exists.  Extracted values always win over explicit arguments
of the same name.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import asdict, dataclass
import inspect
import math
from typing import Any

from .errors import invalid_params
from ..descriptors import ParamDescriptor, ParamType


@dataclass(frozen=True, slots=True)
class ParamViolation:
    param: str | None
    message: str


def _matches(tag: ParamType, value: Any) -> bool:
    if tag is ParamType.ANY:
        return True
    if tag is ParamType.STRING:
        return isinstance(value, str)
    if tag is ParamType.BOOLEAN:
        return isinstance(value, bool)
    if tag is ParamType.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if tag is ParamType.ARRAY:
        return isinstance(value, (list, tuple))
    if tag is ParamType.OBJECT:
        return isinstance(value, Mapping)
    return False


def _label(param: ParamDescriptor) -> str:
    return param.description or param.name


def validate(params: Iterable[ParamDescriptor], args: Any) -> list[ParamViolation]:
    """Return every violation of ``params`` by ``args``; empty means valid."""
    if args is None:
        args = {}
    if not isinstance(args, Mapping):
        return [ParamViolation(None, "Parameters must be an object")]

    violations: list[ParamViolation] = []
    for param in params:
        value = args.get(param.name)
        if value is None:
            if param.required:
                violations.append(ParamViolation(param.name, f"{_label(param)} is required"))
            continue
        if not _matches(param.type, value):
            violations.append(
                ParamViolation(param.name, f"{_label(param)} must be of type {param.type.value}")
            )
        elif param.type is ParamType.NUMBER and isinstance(value, float) and not math.isfinite(value):
            violations.append(ParamViolation(param.name, f"{_label(param)} must be a finite number"))
    return violations


def ensure_valid(params: Iterable[ParamDescriptor], args: Any) -> None:
    """Raise ``InvalidParams`` listing each violation when ``args`` is invalid."""
    violations = validate(params, args)
    if violations:
        raise invalid_params(data=[asdict(violation) for violation in violations])


def bind(params: Iterable[ParamDescriptor], args: Mapping[str, Any] | None) -> list[Any]:
    """Return the positional argument list for ``params``; absent names bind ``None``."""
    args = args or {}
    return [args.get(param.name) for param in sorted(params, key=lambda item: item.index)]


def bind_call(
    fn: Callable[..., Any],
    params: Iterable[ParamDescriptor],
    args: Mapping[str, Any] | None,
) -> tuple[list[Any], dict[str, Any]]:
    """Return ``(positional, keywords)`` for calling ``fn`` with ``args``.

    Keyword-only parameters of ``fn`` are passed by name, and only when a
    value is present so the handler's own default applies otherwise.
    """
    keyword_only = _keyword_only_names(fn)
    args = args or {}
    params = list(params)
    positional = [param for param in params if param.name not in keyword_only]
    keywords = {
        param.name: args[param.name]
        for param in params
        if param.name in keyword_only and args.get(param.name) is not None
    }
    return bind(positional, args), keywords


def _keyword_only_names(fn: Callable[..., Any]) -> frozenset[str]:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return frozenset()
    return frozenset(
        name for name, param in signature.parameters.items() if param.kind is inspect.Parameter.KEYWORD_ONLY
    )


def coerce_template_values(
    params: Iterable[ParamDescriptor],
    values: Mapping[str, str],
) -> dict[str, Any]:
    """Convert extracted template values to the type declared for them.

    Values that do not parse are left as strings so validation reports them.
    """
    tags = {param.name: param.type for param in params}
    coerced: dict[str, Any] = dict(values)
    for name, raw in values.items():
        tag = tags.get(name)
        if tag is ParamType.NUMBER:
            coerced[name] = _parse_number(raw)
        elif tag is ParamType.BOOLEAN and raw.lower() in ("true", "false"):
            coerced[name] = raw.lower() == "true"
    return coerced


def _parse_number(raw: str) -> Any:
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def merge_template_arguments(
    template_params: Mapping[str, Any],
    args: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Merge explicit ``args`` under the template-extracted values."""
    merged: dict[str, Any] = dict(args or {})
    merged.update(template_params)
    return merged


def split_template_arguments(
    template_params: Mapping[str, Any],
    args: Mapping[str, Any] | None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return ``(template_params, remaining)`` where ``remaining`` omits template keys."""
    remaining = {key: value for key, value in (args or {}).items() if key not in template_params}
    return dict(template_params), remaining


_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def handler_arity(fn: Callable[..., Any]) -> int:
    """Count the positional parameters ``fn`` accepts.

    ``*args`` makes the handler accept anything, which counts as two.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return 1
    count = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return max(count, 2)
        if param.kind in _POSITIONAL:
            count += 1
    return count


def template_call_args(
    fn: Callable[..., Any],
    template_params: Mapping[str, Any],
    args: Mapping[str, Any] | None,
) -> tuple[Any, ...]:
    """Build the call arguments for a template handler according to its arity."""
    arity = handler_arity(fn)
    if arity == 0:
        return ()
    if arity >= 2:
        return split_template_arguments(template_params, args)
    return (merge_template_arguments(template_params, args),)


__all__ = [
    "ParamViolation",
    "bind",
    "bind_call",
    "coerce_template_values",
    "ensure_valid",
    "handler_arity",
    "merge_template_arguments",
    "split_template_arguments",
    "template_call_args",
    "validate",
]
