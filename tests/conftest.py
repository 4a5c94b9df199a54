# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import pytest

from forgemcp.server import MCPServer
from tests.helpers import RecordingSender


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def server() -> MCPServer:
    return MCPServer("test-server", version="1.2.3")
