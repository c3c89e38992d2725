"""Server configuration.

Defaults can be overridden through ``SSE_BRIDGE_*`` environment variables,
which is also how the CLI hands options to the uvicorn app factory.
"""

from __future__ import annotations

import math
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")

ENV_PREFIX = "SSE_BRIDGE_"


def _parse_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def _read(env: Mapping[str, str], name: str, parse: Callable[[str], T], default: T) -> T:
    key = f"{ENV_PREFIX}{name}"
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return parse(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {key}: {raw!r}") from e


@dataclass
class BridgeConfig:
    """Bridge server configuration."""

    # Push channel capacity per client
    queue_size: int = 10

    # Default seconds a dispatch waits for the correlated response
    request_timeout: float = 30.0

    # Seconds of idle stream between heartbeat comments
    heartbeat_interval: float = 15.0

    allow_origins: list[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        if self.queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        if not math.isfinite(self.request_timeout) or self.request_timeout <= 0:
            raise ValueError("request_timeout must be a positive number of seconds")
        if not math.isfinite(self.heartbeat_interval) or self.heartbeat_interval <= 0:
            raise ValueError("heartbeat_interval must be a positive number of seconds")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> BridgeConfig:
        """Build a config from environment variables.

        Args:
            env: Mapping to read from (defaults to ``os.environ``)

        Raises:
            ValueError: If a variable is present but cannot be parsed
        """
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            queue_size=_read(env, "QUEUE_SIZE", int, defaults.queue_size),
            request_timeout=_read(env, "REQUEST_TIMEOUT", float, defaults.request_timeout),
            heartbeat_interval=_read(
                env, "HEARTBEAT_INTERVAL", float, defaults.heartbeat_interval
            ),
            allow_origins=_read(env, "ALLOW_ORIGINS", _parse_origins, defaults.allow_origins),
        )
