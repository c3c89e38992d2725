"""Session registry.

Owns the mapping from client id to that client's live session. Exactly one
session exists per client id: registering an id that is already live
terminates the old session first, so a reconnect supersedes a stale
connection instead of coexisting with it.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .channel import PushChannel
from .correlator import Correlator, PendingCorrelation
from .errors import ClientNotFoundError, ClientReplacedError, RequestCancelledError
from .models import RpcRequest

logger = logging.getLogger(__name__)


def generate_client_id() -> str:
    """Generate an id for a client that connected without one."""
    return f"client_{uuid.uuid4().hex[:12]}"


@dataclass
class ClientSession:
    """Server-side state of one connected client.

    Owns the client's push channel and the correlator for requests sent
    over it.
    """

    client_id: str
    channel: PushChannel
    correlator: Correlator = field(default_factory=Correlator)
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def closed(self) -> bool:
        return self.channel.closed

    def send(self, request: RpcRequest, deadline: float) -> PendingCorrelation:
        """Register ``request`` as pending and enqueue it for delivery.

        Both steps happen without yielding to the event loop, so the session
        cannot be torn down between them.

        Raises:
            RequestCancelledError: If the session is already closed
            BackpressureError: If the push channel is full
        """
        if self.closed:
            raise RequestCancelledError(request.id)
        pending = self.correlator.expect(request.id, deadline)
        try:
            self.channel.put(request)
        except Exception:
            self.correlator.cancel(request.id)
            # Nobody will await the slot now
            pending.future.exception()
            raise
        return pending

    async def next_request(self) -> RpcRequest | None:
        """Wait for the next request to deliver, or None once closed."""
        return await self.channel.get()

    def close(self, reason: type[RequestCancelledError] = RequestCancelledError) -> int:
        """Close the push channel and cancel every pending request.

        Returns:
            Number of pending requests cancelled
        """
        undelivered = self.channel.close()
        if undelivered:
            logger.debug(f"Dropped {len(undelivered)} undelivered requests for {self.client_id}")
        return self.correlator.cancel_all(reason)

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_id": self.client_id,
            "connected_at": self.connected_at.isoformat(),
            "queued": len(self.channel),
            "pending": self.correlator.pending_count,
        }


class SessionRegistry:
    """Registry of live client sessions.

    All map mutations run under a single lock, and no critical section
    awaits while holding a session, so a dispatch can never use a session
    concurrently with its teardown.
    """

    def __init__(self, queue_size: int = 10) -> None:
        self._queue_size = queue_size
        self._sessions: dict[str, ClientSession] = {}
        self._lock = asyncio.Lock()

    async def register(self, client_id: str | None = None) -> ClientSession:
        """Create and install a session for ``client_id``.

        Args:
            client_id: Client-chosen id, or None to generate one

        Returns:
            The new session
        """
        client_id = client_id or generate_client_id()
        session = ClientSession(
            client_id=client_id,
            channel=PushChannel(client_id, capacity=self._queue_size),
        )

        async with self._lock:
            previous = self._sessions.pop(client_id, None)
            if previous is not None:
                cancelled = previous.close(ClientReplacedError)
                logger.info(
                    f"Client {client_id} reconnected, replaced previous session "
                    f"({cancelled} pending requests cancelled)"
                )
            self._sessions[client_id] = session

        logger.info(f"Client connected: {client_id}")
        return session

    async def unregister(self, client_id: str, session: ClientSession | None = None) -> bool:
        """Remove and close the session for ``client_id``.

        Safe to call repeatedly.

        Args:
            client_id: The client id to remove
            session: If given, only remove when it is still the live session

        Returns:
            True if a session was removed
        """
        async with self._lock:
            current = self._sessions.get(client_id)
            if current is None or (session is not None and current is not session):
                return False
            del self._sessions[client_id]
            cancelled = current.close()

        logger.info(f"Client disconnected: {client_id} ({cancelled} pending requests cancelled)")
        return True

    def lookup(self, client_id: str | None) -> ClientSession | None:
        """Get the live session for ``client_id``, if any."""
        if client_id is None:
            return None
        return self._sessions.get(client_id)

    def require(self, client_id: str) -> ClientSession:
        """Get the live session for ``client_id``.

        Raises:
            ClientNotFoundError: If the client is not connected
        """
        session = self.lookup(client_id)
        if session is None:
            raise ClientNotFoundError(client_id)
        return session

    async def close_all(self) -> int:
        """Close every session (server shutdown).

        Returns:
            Number of sessions closed
        """
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            for session in sessions:
                session.close()
        if sessions:
            logger.info(f"Closed {len(sessions)} client sessions")
        return len(sessions)

    def list_sessions(self) -> list[dict[str, Any]]:
        return [session.to_dict() for session in self._sessions.values()]

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
