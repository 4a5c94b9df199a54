# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Public server-side surface for forgemcp.

The heavy lifting lives in :mod:`forgemcp.server.core`; this module re-exports
the primitives host applications are expected to import.
"""

from __future__ import annotations

from .core import PROTOCOL_VERSION, MCPServer
from .dispatcher import Dispatcher
from .jsonrpc import handle_jsonrpc_message
from .notifications import NotificationManager, NotificationSender
from .outcome import Failure, Success
from .ranking import CompletionCandidate, CompletionPage, rank
from .registry import CapabilityRegistry, RegistrationError
from .subscriptions import SubscriptionManager


__all__ = [
    "PROTOCOL_VERSION",
    "CapabilityRegistry",
    "CompletionCandidate",
    "CompletionPage",
    "Dispatcher",
    "Failure",
    "MCPServer",
    "NotificationManager",
    "NotificationSender",
    "RegistrationError",
    "Success",
    "SubscriptionManager",
    "handle_jsonrpc_message",
    "rank",
]
