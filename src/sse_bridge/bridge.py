"""Bridge - wires registry, dispatcher and response intake together."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .config import BridgeConfig
from .dispatcher import Dispatcher, RequestIdGenerator
from .intake import ResponseIntake
from .models import RpcResponse
from .registry import ClientSession, SessionRegistry


class Bridge:
    """Request/response bridge over a push stream and a submission endpoint.

    This is what the transport layer talks to: the stream handler calls
    ``register``/``unregister`` and drains the session, the submission
    handler calls ``submit``, and initiators call ``dispatch``.
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        id_generator: RequestIdGenerator | None = None,
    ) -> None:
        self.config = config or BridgeConfig()
        self.registry = SessionRegistry(queue_size=self.config.queue_size)
        self.dispatcher = Dispatcher(
            self.registry,
            default_timeout=self.config.request_timeout,
            id_generator=id_generator,
        )
        self.intake = ResponseIntake(self.registry)

    async def register(self, client_id: str | None = None) -> ClientSession:
        return await self.registry.register(client_id)

    async def unregister(self, client_id: str, session: ClientSession | None = None) -> bool:
        return await self.registry.unregister(client_id, session)

    def lookup(self, client_id: str) -> ClientSession | None:
        return self.registry.lookup(client_id)

    async def dispatch(
        self,
        client_id: str,
        payload: Mapping[str, Any],
        timeout: float | None = None,
    ) -> RpcResponse:
        return await self.dispatcher.dispatch(client_id, payload, timeout)

    def submit(self, client_id: str | None, response: RpcResponse) -> bool:
        return self.intake.submit(client_id, response)

    async def shutdown(self) -> int:
        return await self.registry.close_all()
