# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""forgemcp framework primitives."""

from __future__ import annotations

from . import types
from .completion import completion
from .descriptors import CapabilityKind, ParamDescriptor, ParamType, param
from .dynamic import dynamic_prompts, dynamic_resources
from .metadata import CollectedMetadata, MetadataProvider, collecting
from .prompt import prompt, prompt_template
from .resource import resource
from .resource_template import resource_template
from .server import CompletionCandidate, Failure, MCPServer, RegistrationError, Success
from .templates import TemplateError, UriTemplate
from .tool import tool


__all__ = [
    "CapabilityKind",
    "CollectedMetadata",
    "CompletionCandidate",
    "Failure",
    "MCPServer",
    "MetadataProvider",
    "ParamDescriptor",
    "ParamType",
    "RegistrationError",
    "Success",
    "TemplateError",
    "UriTemplate",
    "collecting",
    "completion",
    "dynamic_prompts",
    "dynamic_resources",
    "param",
    "prompt",
    "prompt_template",
    "resource",
    "resource_template",
    "tool",
    "types",
]
