"""Tests for BridgeConfig and environment overrides."""

import pytest

from sse_bridge.config import BridgeConfig


class TestBridgeConfig:
    def test_defaults(self) -> None:
        config = BridgeConfig()
        assert config.queue_size == 10
        assert config.request_timeout == 30.0
        assert config.heartbeat_interval == 15.0
        assert config.allow_origins == ["*"]

    def test_from_empty_env_uses_defaults(self) -> None:
        assert BridgeConfig.from_env({}) == BridgeConfig()

    def test_from_env_overrides(self) -> None:
        config = BridgeConfig.from_env(
            {
                "SSE_BRIDGE_QUEUE_SIZE": "25",
                "SSE_BRIDGE_REQUEST_TIMEOUT": "2.5",
                "SSE_BRIDGE_HEARTBEAT_INTERVAL": "5",
                "SSE_BRIDGE_ALLOW_ORIGINS": "http://a.test, http://b.test",
            }
        )
        assert config.queue_size == 25
        assert config.request_timeout == 2.5
        assert config.heartbeat_interval == 5.0
        assert config.allow_origins == ["http://a.test", "http://b.test"]

    def test_from_env_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SSE_BRIDGE_QUEUE_SIZE", "7")
        assert BridgeConfig.from_env().queue_size == 7

    def test_invalid_env_value_names_variable(self) -> None:
        with pytest.raises(ValueError, match="SSE_BRIDGE_QUEUE_SIZE"):
            BridgeConfig.from_env({"SSE_BRIDGE_QUEUE_SIZE": "lots"})

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"queue_size": 0},
            {"request_timeout": 0},
            {"request_timeout": float("nan")},
            {"request_timeout": float("inf")},
            {"heartbeat_interval": -1},
            {"heartbeat_interval": float("nan")},
        ],
    )
    def test_rejects_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            BridgeConfig(**kwargs)
