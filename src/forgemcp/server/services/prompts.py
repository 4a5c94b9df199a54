# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Prompt capability service."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from ..adapters import normalize_prompt_result
from ..binding import bind_call, coerce_template_values, ensure_valid, merge_template_arguments, template_call_args
from ..errors import prompt_not_found
from ..notifications import NotificationManager
from ..outcome import invoke, unwrap
from ..pagination import paginate_sequence
from ..registry import CapabilityRegistry
from ... import types
from ...descriptors import CapabilityKind, PromptDescriptor, PromptTemplateDescriptor
from ...templates import match_first
from ...utils.schema import build_prompt_arguments


_PROMPT = CapabilityKind.PROMPT
_TEMPLATE = CapabilityKind.PROMPT_TEMPLATE


class PromptsService:
    """Manages prompts and prompt templates."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        notifications: NotificationManager,
        logger: logging.Logger,
        pagination_limit: int,
    ) -> None:
        self._registry = registry
        self._notifications = notifications
        self._logger = logger
        self._pagination_limit = pagination_limit

    @property
    def names(self) -> list[str]:
        return [descriptor.key for descriptor in self._registry.list(_PROMPT)]

    def register(self, descriptor: PromptDescriptor, *, dynamic: bool = True, replace: bool = False) -> PromptDescriptor:
        self._registry.register(descriptor, dynamic=dynamic, replace=replace)
        if dynamic:
            self._notifications.schedule_list_changed("prompts")
        return descriptor

    def register_template(
        self, descriptor: PromptTemplateDescriptor, *, dynamic: bool = True, replace: bool = False
    ) -> PromptTemplateDescriptor:
        self._registry.register(descriptor, dynamic=dynamic, replace=replace)
        if dynamic:
            self._notifications.schedule_list_changed("prompts")
        return descriptor

    def unregister(self, name: str) -> PromptDescriptor | None:
        removed = self._registry.unregister(_PROMPT, name)
        if removed is not None:
            self._notifications.schedule_list_changed("prompts")
        return removed  # type: ignore[return-value]

    def unregister_template(self, name_template: str) -> PromptTemplateDescriptor | None:
        removed = self._registry.unregister(_TEMPLATE, name_template)
        if removed is not None:
            self._notifications.schedule_list_changed("prompts")
        return removed  # type: ignore[return-value]

    def _ensure_initialized(self) -> None:
        self._registry.ensure_initialized(_PROMPT)
        self._registry.ensure_initialized(_TEMPLATE)

    def resolve(self, name: str) -> PromptDescriptor | None:
        self._ensure_initialized()
        return self._registry.resolve(_PROMPT, name)  # type: ignore[return-value]

    async def list_prompts(self, cursor: str | None = None) -> dict[str, Any]:
        """List concrete prompts.  Templates are resolved on ``prompts/get`` only."""
        self._ensure_initialized()
        prompts = []
        for descriptor in self._registry.list(_PROMPT):
            prompt = types.Prompt(
                name=descriptor.name,  # type: ignore[union-attr]
                description=descriptor.description or None,  # type: ignore[union-attr]
                arguments=build_prompt_arguments(descriptor.params) or None,  # type: ignore[union-attr]
            )
            prompts.append(prompt.model_dump(by_alias=True, mode="json", exclude_none=True))

        page, next_cursor = paginate_sequence(prompts, cursor, limit=self._pagination_limit)
        result: dict[str, Any] = {"prompts": page}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return result

    async def get_prompt(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict[str, Any]:
        descriptor = self.resolve(name)
        if descriptor is not None:
            if descriptor.params:
                ensure_valid(descriptor.params, arguments)
            explicit = arguments if isinstance(arguments, Mapping) else None
            args, kwargs = bind_call(descriptor.fn, descriptor.params, explicit)
            outcome = await invoke(descriptor.fn, *args, **kwargs)
            return normalize_prompt_result(unwrap(outcome, logger=self._logger, label=f"Prompt '{name}'"))

        matched = match_first(self._registry.list(_TEMPLATE), name, lambda item: item.template)  # type: ignore[union-attr]
        if matched is None:
            raise prompt_not_found(name)

        template, params = matched
        explicit = arguments if isinstance(arguments, Mapping) else None
        if template.params:
            params = coerce_template_values(template.params, params)
            ensure_valid(template.params, merge_template_arguments(params, explicit))
        call_args = template_call_args(template.fn, params, explicit)
        outcome = await invoke(template.fn, *call_args)
        value = unwrap(outcome, logger=self._logger, label=f"Prompt template '{template.key}'")
        return normalize_prompt_result(value)

    async def notify_list_changed(self) -> bool:
        return await self._notifications.notify_list_changed("prompts")


__all__ = ["PromptsService"]
