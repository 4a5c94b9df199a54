# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Capability registry.

The registry owns every descriptor, partitioned by
:class:`~forgemcp.descriptors.CapabilityKind` and split into a static group
(built from the metadata provider when the server is bound) and a dynamic
group (registered at runtime).  Its per-kind ``{key: descriptor}`` maps are the
handler table: each descriptor carries its handler in ``fn``.

The registry is pure bookkeeping.  Notifications and subscription cleanup are
side effects owned by the capability services.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
import logging
from typing import Any

from ..descriptors import CapabilityKind, Descriptor, HandlerFn
from ..templates import UriTemplate


class RegistrationError(ValueError):
    """Raised when a descriptor cannot be registered or removed."""


Generator = Callable[[], Any]


class CapabilityRegistry:
    """Static and dynamic descriptors per capability kind."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._static: dict[CapabilityKind, dict[str, Descriptor]] = {kind: {} for kind in CapabilityKind}
        self._dynamic: dict[CapabilityKind, dict[str, Descriptor]] = {kind: {} for kind in CapabilityKind}
        self._generators: dict[CapabilityKind, list[Generator]] = {kind: [] for kind in CapabilityKind}
        self._initialized: set[CapabilityKind] = set()
        self._logger = logger

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register(self, descriptor: Descriptor, *, dynamic: bool = True, replace: bool = False) -> Descriptor:
        """Add ``descriptor`` to the static or dynamic group of its kind.

        Re-registering a dynamic key replaces the old entry in place.  A static
        key can only be overwritten with ``replace=True``; a key is never
        allowed in both groups at once.
        """
        kind = getattr(descriptor, "kind", None)
        if not isinstance(kind, CapabilityKind):
            raise RegistrationError(f"Unsupported capability descriptor: {descriptor!r}")
        key = descriptor.key
        if not isinstance(key, str) or not key:
            raise RegistrationError(f"{kind.value} key must be a non-empty string")

        target, other = (self._dynamic, self._static) if dynamic else (self._static, self._dynamic)
        if key in other[kind]:
            if not replace:
                raise RegistrationError(f"{kind.value} '{key}' is already registered")
            del other[kind][key]
        elif key in target[kind] and not (dynamic or replace):
            raise RegistrationError(f"{kind.value} '{key}' is already registered")

        target[kind][key] = descriptor
        return descriptor

    def unregister(self, kind: CapabilityKind, key: str) -> Descriptor | None:
        """Remove a dynamic descriptor; returns it, or ``None`` if absent.

        Static descriptors belong to the server definition and cannot be
        removed at runtime.
        """
        if key in self._static[kind]:
            raise RegistrationError(f"Cannot unregister static {kind.value} '{key}'")
        return self._dynamic[kind].pop(key, None)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, kind: CapabilityKind, key: str) -> Descriptor | None:
        """Exact lookup: static first, then dynamic."""
        return self._static[kind].get(key) or self._dynamic[kind].get(key)

    def resolve_static(self, kind: CapabilityKind, key: str) -> Descriptor | None:
        return self._static[kind].get(key)

    def handler(self, kind: CapabilityKind, key: str) -> HandlerFn | None:
        descriptor = self.resolve(kind, key)
        return descriptor.fn if descriptor is not None else None

    def list(self, kind: CapabilityKind) -> list[Descriptor]:
        """Static descriptors, then dynamic ones, each in insertion order."""
        return [*self._static[kind].values(), *self._dynamic[kind].values()]

    def __iter__(self) -> Iterator[Descriptor]:
        for kind in CapabilityKind:
            yield from self.list(kind)

    def contains(self, kind: CapabilityKind, key: str) -> bool:
        return key in self._static[kind] or key in self._dynamic[kind]

    def is_dynamic(self, kind: CapabilityKind, key: str) -> bool:
        return key in self._dynamic[kind]

    def templates(self, kind: CapabilityKind) -> list[tuple[Descriptor, UriTemplate]]:
        """``(descriptor, compiled template)`` pairs in registration order."""
        if not kind.is_template:
            raise RegistrationError(f"{kind.value} is not a template kind")
        return [(descriptor, descriptor.template) for descriptor in self.list(kind)]  # type: ignore[union-attr]

    def counts(self, kind: CapabilityKind) -> tuple[int, int]:
        """Return ``(static, dynamic)`` counts for ``kind``."""
        return len(self._static[kind]), len(self._dynamic[kind])

    def total(self, *kinds: CapabilityKind) -> int:
        return sum(sum(self.counts(kind)) for kind in kinds)

    def has_subscribable_resources(self) -> bool:
        return any(getattr(item, "subscribable", False) for item in self.list(CapabilityKind.RESOURCE))

    # ------------------------------------------------------------------
    # Lazy dynamic generators
    # ------------------------------------------------------------------

    def add_generator(self, kind: CapabilityKind, generator: Generator) -> None:
        """Queue ``generator`` to run on the first lookup of ``kind``.

        Generators added after ``kind`` was initialized run on the next
        :meth:`ensure_initialized` call.
        """
        self._generators[kind].append(generator)
        self._initialized.discard(kind)

    def is_initialized(self, kind: CapabilityKind) -> bool:
        return kind in self._initialized

    def ensure_initialized(self, kind: CapabilityKind) -> None:
        """Run the pending generators for ``kind`` exactly once.

        The latch is set before the generators run, so a generator that lists
        its own kind does not recurse.  Generator exceptions propagate.
        """
        if kind in self._initialized:
            return
        self._initialized.add(kind)
        pending, self._generators[kind] = self._generators[kind], []
        for generator in pending:
            if self._logger is not None:
                self._logger.debug("Running dynamic %s generator %s", kind.value, _describe(generator))
            generator()


def _describe(fn: Callable[..., Any]) -> str:
    target = getattr(fn, "func", fn)
    return getattr(target, "__qualname__", None) or repr(target)


__all__ = ["CapabilityRegistry", "RegistrationError"]
