"""Per-client push channel.

A bounded FIFO of requests waiting to be written onto the client's event
stream. Enqueueing never blocks: a full channel rejects the request with
``BackpressureError`` so a client that stops reading cannot stall callers.
"""

from __future__ import annotations

import asyncio
import logging

from .errors import BackpressureError, RequestCancelledError
from .models import RpcRequest

logger = logging.getLogger(__name__)


class PushChannel:
    """Bounded, ordered queue of requests for one client.

    One slot beyond ``capacity`` is reserved for the close marker, so
    ``close()`` can always wake a reader blocked in ``get()``.
    """

    def __init__(self, client_id: str, capacity: int = 10) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.client_id = client_id
        self.capacity = capacity
        self._queue: asyncio.Queue[RpcRequest | None] = asyncio.Queue(maxsize=capacity + 1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        if self._closed:
            return 0
        return self._queue.qsize()

    def put(self, request: RpcRequest) -> None:
        """Enqueue a request without blocking.

        Raises:
            RequestCancelledError: If the channel is closed
            BackpressureError: If ``capacity`` requests are already queued
        """
        if self._closed:
            raise RequestCancelledError(request.id)
        if self._queue.qsize() >= self.capacity:
            logger.warning(f"Push channel full for {self.client_id}, rejecting {request.id}")
            raise BackpressureError(self.client_id, self.capacity)
        self._queue.put_nowait(request)

    async def get(self) -> RpcRequest | None:
        """Wait for the next request.

        Returns:
            The next request in enqueue order, or None once the channel is closed
        """
        if self._closed:
            return None
        request = await self._queue.get()
        if request is None:
            # Leave the marker for any other reader
            self._queue.put_nowait(None)
        return request

    def close(self) -> list[RpcRequest]:
        """Close the channel and wake any waiting reader.

        Returns:
            Requests that were queued but never delivered
        """
        if self._closed:
            return []
        self._closed = True
        undelivered: list[RpcRequest] = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is not None:
                undelivered.append(item)
        self._queue.put_nowait(None)
        return undelivered
