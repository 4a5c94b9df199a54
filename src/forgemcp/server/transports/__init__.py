# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Transport adapters for :class:`~forgemcp.server.MCPServer`."""

from __future__ import annotations

from .base import BaseTransport
from .stdio import StdioNotificationSender, StdioTransport


__all__ = ["BaseTransport", "StdioNotificationSender", "StdioTransport"]
