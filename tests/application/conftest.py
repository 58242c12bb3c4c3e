from __future__ import annotations

import pytest
from mediaroom_fakes import FakeSessionGateway

from mediaroom_client.infrastructure.state.session_registry import InMemorySessionRegistry


@pytest.fixture
def gateway() -> FakeSessionGateway:
    return FakeSessionGateway()


@pytest.fixture
def registry() -> InMemorySessionRegistry:
    return InMemorySessionRegistry()
