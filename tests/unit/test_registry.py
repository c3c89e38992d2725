"""Unit tests for the session registry."""

from __future__ import annotations

import asyncio

import pytest

from sse_bridge.errors import (
    BackpressureError,
    ClientNotFoundError,
    ClientReplacedError,
    RequestCancelledError,
)
from sse_bridge.models import RpcRequest
from sse_bridge.registry import SessionRegistry, generate_client_id


def deadline_in(seconds: float) -> float:
    return asyncio.get_running_loop().time() + seconds


class TestRegister:
    """Tests for register/lookup."""

    @pytest.mark.asyncio
    async def test_register_then_lookup(self, registry: SessionRegistry) -> None:
        session = await registry.register("c1")

        assert registry.lookup("c1") is session
        assert registry.require("c1") is session
        assert "c1" in registry
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_register_generates_id(self, registry: SessionRegistry) -> None:
        session = await registry.register()

        assert session.client_id.startswith("client_")
        assert registry.lookup(session.client_id) is session

    def test_generated_ids_are_unique(self) -> None:
        assert len({generate_client_id() for _ in range(100)}) == 100

    def test_lookup_missing_returns_none(self, registry: SessionRegistry) -> None:
        assert registry.lookup("ghost") is None
        assert registry.lookup(None) is None

    def test_require_missing_raises(self, registry: SessionRegistry) -> None:
        with pytest.raises(ClientNotFoundError) as exc_info:
            registry.require("ghost")
        assert exc_info.value.client_id == "ghost"

    @pytest.mark.asyncio
    async def test_session_uses_configured_capacity(self, registry: SessionRegistry) -> None:
        session = await registry.register("c1")
        assert session.channel.capacity == 3


class TestReplace:
    """A reconnect with the same id supersedes the old session."""

    @pytest.mark.asyncio
    async def test_reregister_replaces_session(self, registry: SessionRegistry) -> None:
        old = await registry.register("c1")
        new = await registry.register("c1")

        assert new is not old
        assert registry.lookup("c1") is new
        assert old.closed is True
        assert new.closed is False
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_reregister_cancels_pending_with_client_replaced(
        self, registry: SessionRegistry
    ) -> None:
        old = await registry.register("c1")
        pending = old.send(RpcRequest(id="req_1", method="analyze"), deadline_in(1.0))

        await registry.register("c1")

        with pytest.raises(ClientReplacedError):
            await old.correlator.wait(pending)

    @pytest.mark.asyncio
    async def test_stale_unregister_keeps_new_session(self, registry: SessionRegistry) -> None:
        """A replaced stream closing late must not evict its successor."""
        old = await registry.register("c1")
        new = await registry.register("c1")

        removed = await registry.unregister("c1", old)

        assert removed is False
        assert registry.lookup("c1") is new


class TestUnregister:
    """Tests for unregister."""

    @pytest.mark.asyncio
    async def test_unregister_removes_and_closes(self, registry: SessionRegistry) -> None:
        session = await registry.register("c1")

        assert await registry.unregister("c1") is True

        assert registry.lookup("c1") is None
        assert session.closed is True
        with pytest.raises(ClientNotFoundError):
            registry.require("c1")

    @pytest.mark.asyncio
    async def test_unregister_is_idempotent(self, registry: SessionRegistry) -> None:
        await registry.register("c1")

        assert await registry.unregister("c1") is True
        assert await registry.unregister("c1") is False
        assert await registry.unregister("never") is False

    @pytest.mark.asyncio
    async def test_unregister_cancels_pending(self, registry: SessionRegistry) -> None:
        session = await registry.register("c1")
        pending = session.send(RpcRequest(id="req_1", method="analyze"), deadline_in(1.0))

        await registry.unregister("c1")

        with pytest.raises(RequestCancelledError) as exc_info:
            await session.correlator.wait(pending)
        assert not isinstance(exc_info.value, ClientReplacedError)

    @pytest.mark.asyncio
    async def test_unregister_wakes_drain_loop(self, registry: SessionRegistry) -> None:
        session = await registry.register("c1")
        reader = asyncio.create_task(session.next_request())
        await asyncio.sleep(0)

        await registry.unregister("c1")

        assert await asyncio.wait_for(reader, timeout=1.0) is None

    @pytest.mark.asyncio
    async def test_close_all(self, registry: SessionRegistry) -> None:
        sessions = [await registry.register(f"c{n}") for n in range(3)]

        assert await registry.close_all() == 3

        assert len(registry) == 0
        assert all(s.closed for s in sessions)


class TestClientSession:
    """Tests for ClientSession.send."""

    @pytest.mark.asyncio
    async def test_send_enqueues_and_registers(self, registry: SessionRegistry) -> None:
        session = await registry.register("c1")
        request = RpcRequest(id="req_1", method="analyze", message="hi")

        pending = session.send(request, deadline_in(1.0))

        assert pending.request_id == "req_1"
        assert "req_1" in session.correlator
        assert await session.next_request() == request
        session.correlator.cancel("req_1")
        with pytest.raises(RequestCancelledError):
            await session.correlator.wait(pending)

    @pytest.mark.asyncio
    async def test_send_on_closed_session_is_cancelled(self, registry: SessionRegistry) -> None:
        session = await registry.register("c1")
        await registry.unregister("c1")

        with pytest.raises(RequestCancelledError):
            session.send(RpcRequest(id="req_1", method="analyze"), deadline_in(1.0))
        assert session.correlator.pending_count == 0

    @pytest.mark.asyncio
    async def test_send_on_full_channel_leaves_nothing_pending(
        self, registry: SessionRegistry
    ) -> None:
        session = await registry.register("c1")
        for n in range(3):
            session.send(RpcRequest(id=f"req_{n}", method="analyze"), deadline_in(1.0))

        with pytest.raises(BackpressureError):
            session.send(RpcRequest(id="req_x", method="analyze"), deadline_in(1.0))

        assert "req_x" not in session.correlator
        assert session.correlator.pending_count == 3
        session.close()

    @pytest.mark.asyncio
    async def test_to_dict(self, registry: SessionRegistry) -> None:
        session = await registry.register("c1")
        session.send(RpcRequest(id="req_1", method="analyze"), deadline_in(1.0))

        info = session.to_dict()

        assert info["client_id"] == "c1"
        assert info["queued"] == 1
        assert info["pending"] == 1
        assert "connected_at" in info
        session.close()
