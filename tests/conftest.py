"""Pytest configuration and shared fixtures."""

import pytest

from sse_bridge.bridge import Bridge
from sse_bridge.config import BridgeConfig
from sse_bridge.dispatcher import RequestIdGenerator
from sse_bridge.registry import SessionRegistry


@pytest.fixture
def config() -> BridgeConfig:
    """Small queue and short timeouts so tests stay fast."""
    return BridgeConfig(queue_size=3, request_timeout=1.0, heartbeat_interval=0.05)


@pytest.fixture
def bridge(config: BridgeConfig) -> Bridge:
    return Bridge(config, id_generator=RequestIdGenerator(prefix="test"))


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry(queue_size=3)
