"""Dispatcher - sends a request to a connected client and waits for its response."""

from __future__ import annotations

import asyncio
import itertools
import logging
import math
import uuid
from collections.abc import Mapping
from typing import Any

from .models import RpcRequest, RpcResponse
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class RequestIdGenerator:
    """Generates request ids unique within this process.

    Ids combine a random per-generator prefix with a monotonically
    increasing counter, so they never depend on wall-clock time.
    """

    def __init__(self, prefix: str = "req") -> None:
        self._prefix = f"{prefix}_{uuid.uuid4().hex[:8]}"
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}_{next(self._counter)}"


class Dispatcher:
    """Public entry point for server-originated requests.

    ``dispatch`` is the only blocking operation of the bridge; it never
    waits longer than its timeout.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        default_timeout: float = 30.0,
        id_generator: RequestIdGenerator | None = None,
    ) -> None:
        self._registry = registry
        self._default_timeout = default_timeout
        self._next_id = id_generator or RequestIdGenerator()

    async def dispatch(
        self,
        client_id: str,
        payload: Mapping[str, Any],
        timeout: float | None = None,
    ) -> RpcResponse:
        """Send ``payload`` to ``client_id`` and wait for the correlated response.

        Args:
            client_id: Target client
            payload: Request body; must include ``method``. Any ``id`` is replaced.
            timeout: Seconds to wait (defaults to the configured request timeout)

        Returns:
            The client's response

        Raises:
            ClientNotFoundError: If the client is not connected
            BackpressureError: If the client's push channel is full
            RequestTimeoutError: If no response arrives in time
            RequestCancelledError: If the client disconnects or is replaced first
            ValueError: If the timeout is not finite and positive, or the payload
                is not a valid request (e.g. no ``method``)
        """
        timeout = self._default_timeout if timeout is None else timeout
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError(f"timeout must be a positive number of seconds, got {timeout}")

        session = self._registry.require(client_id)
        request = RpcRequest(**{**payload, "id": self._next_id()})

        loop = asyncio.get_running_loop()
        pending = session.send(request, deadline=loop.time() + timeout)
        logger.debug(f"Dispatched {request.id} ({request.method}) to {client_id}")

        response = await session.correlator.wait(pending)
        logger.info(f"Request {request.id} to {client_id} resolved")
        return response
