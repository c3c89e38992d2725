"""Unit tests for response intake."""

from __future__ import annotations

import asyncio

import pytest

from sse_bridge.errors import UnknownClientError
from sse_bridge.intake import ResponseIntake
from sse_bridge.models import RpcRequest, RpcResponse
from sse_bridge.registry import SessionRegistry


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_resolves_pending(self, registry: SessionRegistry) -> None:
        intake = ResponseIntake(registry)
        session = await registry.register("c1")
        deadline = asyncio.get_running_loop().time() + 1.0
        pending = session.send(RpcRequest(id="req_1", method="analyze"), deadline)

        matched = intake.submit("c1", RpcResponse(id="req_1", result="ok"))

        assert matched is True
        assert (await session.correlator.wait(pending)).result == "ok"

    def test_submit_unknown_client_raises(self, registry: SessionRegistry) -> None:
        """Submitting for a never-registered client fails with UnknownClientError."""
        intake = ResponseIntake(registry)

        with pytest.raises(UnknownClientError) as exc_info:
            intake.submit("c2", RpcResponse(id="req_1", result="x"))

        assert exc_info.value.client_id == "c2"

    def test_submit_without_client_id_raises(self, registry: SessionRegistry) -> None:
        with pytest.raises(UnknownClientError):
            ResponseIntake(registry).submit(None, RpcResponse(id="req_1"))

    @pytest.mark.asyncio
    async def test_unmatched_response_is_acknowledged(self, registry: SessionRegistry) -> None:
        """Responses with no pending request are dropped, not errors."""
        intake = ResponseIntake(registry)
        await registry.register("c1")

        assert intake.submit("c1", RpcResponse(id="unknown", result="x")) is False

    @pytest.mark.asyncio
    async def test_response_cannot_resolve_other_clients_request(
        self, registry: SessionRegistry
    ) -> None:
        intake = ResponseIntake(registry)
        owner = await registry.register("c1")
        await registry.register("c2")
        deadline = asyncio.get_running_loop().time() + 1.0
        owner.send(RpcRequest(id="req_1", method="analyze"), deadline)

        assert intake.submit("c2", RpcResponse(id="req_1", result="x")) is False
        assert "req_1" in owner.correlator
        owner.close()
