# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource template registration.

A template such as ``file:///logs/{date}`` serves every URI it matches.  The
handler receives the extracted values: handlers taking one positional
argument get them as a single mapping, handlers taking two get
``(template_params, arguments)``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .descriptors import ParamDescriptor, ResourceTemplateDescriptor
from .metadata import announce


TemplateFn = TypeVar("TemplateFn", bound=Callable[..., Any])


def resource_template(
    uri_template: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str | None = None,
    params: Iterable[ParamDescriptor] | None = None,
) -> Callable[[TemplateFn], TemplateFn]:
    """Register a templated resource handler.

    ``params`` optionally declares the placeholders so extracted values are
    validated before the handler runs.  Malformed templates raise
    :class:`~forgemcp.templates.TemplateError` immediately.
    """

    def decorator(fn: TemplateFn) -> TemplateFn:
        descriptor = ResourceTemplateDescriptor(
            uri_template=uri_template,
            fn=fn,
            name=name,
            description=description if description is not None else (fn.__doc__ or "").strip() or None,
            mime_type=mime_type,
            params=tuple(sorted(params or (), key=lambda item: item.index)),
        )
        return announce(fn, descriptor)

    return decorator


__all__ = ["resource_template"]
