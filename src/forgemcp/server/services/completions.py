# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Completion capability service.

Answers ``completion/complete``.  Candidates come from providers registered
with :func:`forgemcp.completion.completion`; for resource references the URIs of
registered resources that share the reference's literal prefix are offered
as well.  Everything is then ranked by :func:`~forgemcp.server.ranking.rank`
against the partial value and capped at 100 entries.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from pydantic import ValidationError

from ..errors import invalid_params, invalid_request, prompt_not_found
from ..outcome import invoke, unwrap
from ..ranking import CompletionCandidate, rank
from ..registry import CapabilityRegistry
from ... import types
from ...descriptors import CapabilityKind, CompletionSpec


_REF_TYPES = {"ref/prompt": "prompt", "ref/resource": "resource"}


class CompletionService:
    """Registry of completion providers plus the ranking pipeline."""

    def __init__(self, registry: CapabilityRegistry, *, logger: logging.Logger) -> None:
        self._registry = registry
        self._logger = logger
        self._providers: dict[tuple[str, str], CompletionSpec] = {}

    def register(self, spec: CompletionSpec) -> CompletionSpec:
        if spec.ref_type not in _REF_TYPES.values():
            raise ValueError(f"Unsupported completion reference type '{spec.ref_type}'")
        self._providers[(spec.ref_type, spec.key)] = spec
        return spec

    def unregister(self, ref_type: str, key: str) -> CompletionSpec | None:
        return self._providers.pop((ref_type, key), None)

    @property
    def provider_count(self) -> int:
        return len(self._providers)

    def provider(self, ref_type: str, key: str) -> CompletionSpec | None:
        return self._providers.get((ref_type, key))

    async def complete(
        self,
        ref: Any,
        argument: Any,
        context: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not isinstance(ref, Mapping) or not ref.get("type"):
            raise invalid_request("Invalid completion reference")
        ref_type = _REF_TYPES.get(ref["type"])
        if ref_type is None:
            raise invalid_request(f"Unknown completion reference type '{ref['type']}'")
        if not isinstance(argument, Mapping) or not isinstance(argument.get("name"), str):
            raise invalid_params("Completion argument name is required")

        completion_argument = types.CompletionArgument(name=argument["name"], value=str(argument.get("value") or ""))
        try:
            completion_context = types.CompletionContext.model_validate(context) if context else None
        except ValidationError as exc:
            raise invalid_params("Invalid completion context") from exc

        if ref_type == "prompt":
            candidates = await self._prompt_candidates(ref, completion_argument, completion_context)
        else:
            candidates = await self._resource_candidates(ref, completion_argument, completion_context)

        page = rank(candidates, completion_argument.value)
        completion = types.Completion(values=page.values, total=page.total, hasMore=page.has_more)
        return {"completion": completion.model_dump(by_alias=True, mode="json", exclude_none=True)}

    async def _prompt_candidates(
        self,
        ref: Mapping[str, Any],
        argument: types.CompletionArgument,
        context: types.CompletionContext | None,
    ) -> list[CompletionCandidate]:
        name = ref.get("name")
        if not isinstance(name, str) or not name:
            raise invalid_request("Prompt reference requires a name")
        self._registry.ensure_initialized(CapabilityKind.PROMPT)
        if self._registry.resolve(CapabilityKind.PROMPT, name) is None:
            raise prompt_not_found(name)

        spec = self._providers.get(("prompt", name))
        if spec is None:
            return []
        return await self._call_provider(spec, argument, context)

    async def _resource_candidates(
        self,
        ref: Mapping[str, Any],
        argument: types.CompletionArgument,
        context: types.CompletionContext | None,
    ) -> list[CompletionCandidate]:
        uri = ref.get("uri")
        if not isinstance(uri, str) or not uri:
            raise invalid_request("Resource reference requires a uri")

        candidates: list[CompletionCandidate] = []
        spec = self._providers.get(("resource", uri))
        if spec is not None:
            candidates.extend(await self._call_provider(spec, argument, context))

        self._registry.ensure_initialized(CapabilityKind.RESOURCE)
        prefix = uri.split("{", 1)[0]
        for descriptor in self._registry.list(CapabilityKind.RESOURCE):
            if descriptor.key.startswith(prefix):
                candidates.append(CompletionCandidate(descriptor.key, getattr(descriptor, "description", None)))
        return _dedupe(candidates)

    async def _call_provider(
        self,
        spec: CompletionSpec,
        argument: types.CompletionArgument,
        context: types.CompletionContext | None,
    ) -> list[CompletionCandidate]:
        outcome = await invoke(spec.fn, argument, context)
        value = unwrap(outcome, logger=self._logger, label=f"Completion provider for {spec.ref_type} '{spec.key}'")
        return list(_coerce_candidates(value))


def _coerce_candidates(value: Any) -> Iterable[CompletionCandidate]:
    if value is None:
        return
    if isinstance(value, types.Completion):
        value = value.values
    elif isinstance(value, Mapping):
        value = value.get("values", ())
    elif isinstance(value, str):
        value = [value]
    for item in value:
        if isinstance(item, CompletionCandidate):
            yield item
        elif isinstance(item, Mapping) and "value" in item:
            yield CompletionCandidate(str(item["value"]), item.get("description"))
        else:
            yield CompletionCandidate(str(item))


def _dedupe(candidates: Iterable[CompletionCandidate]) -> list[CompletionCandidate]:
    seen: set[str] = set()
    unique: list[CompletionCandidate] = []
    for candidate in candidates:
        if candidate.value in seen:
            continue
        seen.add(candidate.value)
        unique.append(candidate)
    return unique


__all__ = ["CompletionService"]
