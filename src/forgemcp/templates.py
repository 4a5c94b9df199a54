# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""``{param}`` templates for resource URIs and prompt names.

A template such as ``file:///logs/{date}`` compiles to an anchored regular
expression in which every placeholder captures exactly one non-empty path
segment.  Literal text is escaped, so ``.`` or ``?`` inside a URI match only
themselves.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import re
from typing import Any, TypeVar


__all__ = ["TemplateError", "UriTemplate", "match_first"]


_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")
_SEGMENT = "[^/]+"
_SEPARATOR = "/"

T = TypeVar("T")


class TemplateError(ValueError):
    """Raised when a template string cannot be compiled."""


class UriTemplate:
    """Compiled ``{param}`` template."""

    __slots__ = ("template", "parameters", "_pattern")

    def __init__(self, template: str) -> None:
        if not isinstance(template, str) or not template:
            raise TemplateError("Template must be a non-empty string")

        pieces: list[str] = []
        names: list[str] = []
        position = 0
        for found in _PLACEHOLDER.finditer(template):
            pieces.append(_escape_literal(template, template[position : found.start()]))
            name = found.group(1)
            if not name.isidentifier():
                raise TemplateError(f"Invalid placeholder '{{{name}}}' in template '{template}'")
            if name in names:
                raise TemplateError(f"Duplicate placeholder '{{{name}}}' in template '{template}'")
            names.append(name)
            pieces.append(f"(?P<{name}>{_SEGMENT})")
            position = found.end()
        pieces.append(_escape_literal(template, template[position:]))

        self.template = template
        self.parameters: tuple[str, ...] = tuple(names)
        self._pattern = re.compile("".join(pieces))

    def __repr__(self) -> str:
        return f"UriTemplate({self.template!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UriTemplate):
            return NotImplemented
        return self.template == other.template

    def __hash__(self) -> int:
        return hash(self.template)

    @property
    def is_parametrized(self) -> bool:
        return bool(self.parameters)

    @property
    def literal_prefix(self) -> str:
        """Text before the first placeholder."""
        return self.template.split("{", 1)[0]

    def match(self, candidate: str) -> dict[str, str] | None:
        """Return the extracted parameters, or ``None`` when ``candidate`` does not match."""
        if not isinstance(candidate, str):
            return None
        found = self._pattern.fullmatch(candidate)
        if found is None:
            return None
        params = found.groupdict()
        for value in params.values():
            if not value or _SEPARATOR in value:
                return None
        return params

    def expand(self, params: Mapping[str, Any]) -> str:
        """Substitute ``params`` into the template.

        Raises:
            ValueError: If a placeholder is missing, or its value is empty or
                contains ``/`` (such a value could never be matched back).
        """
        missing = [name for name in self.parameters if name not in params]
        if missing:
            raise ValueError(f"Missing template parameters: {', '.join(missing)}")

        def _substitute(found: re.Match[str]) -> str:
            value = str(params[found.group(1)])
            if not value or _SEPARATOR in value:
                raise ValueError(f"Invalid value for template parameter '{found.group(1)}': {value!r}")
            return value

        return _PLACEHOLDER.sub(_substitute, self.template)


def _escape_literal(template: str, literal: str) -> str:
    if "{" in literal or "}" in literal:
        raise TemplateError(f"Unbalanced braces in template '{template}'")
    return re.escape(literal)


def match_first(
    items: Iterable[T],
    candidate: str,
    template_of: Callable[[T], UriTemplate],
) -> tuple[T, dict[str, str]] | None:
    """Return the first item (in iteration order) whose template matches ``candidate``."""
    for item in items:
        params = template_of(item).match(candidate)
        if params is not None:
            return item, params
    return None
