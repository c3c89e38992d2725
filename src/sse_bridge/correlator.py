"""Request/response correlation.

Matches responses to the requests that caused them by identifier. Each
pending entry owns a single-use future and an absolute deadline on the
event loop clock; a loop timer expires the entry even if nobody is
awaiting it.

State machine per request id::

    PENDING -> RESOLVED | TIMED_OUT | CANCELLED

Terminal states remove the entry. Only the first transition out of
PENDING has any effect.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import BridgeError, RequestCancelledError, RequestTimeoutError
from .models import RpcResponse

logger = logging.getLogger(__name__)


class CorrelationState(str, Enum):
    """Lifecycle states of a pending correlation."""

    PENDING = "pending"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class PendingCorrelation:
    """A request waiting for its response."""

    request_id: str
    deadline: float
    future: asyncio.Future[RpcResponse]
    state: CorrelationState = CorrelationState.PENDING
    created_at: float = field(default_factory=lambda: asyncio.get_running_loop().time())
    timer: asyncio.TimerHandle | None = None


class Correlator:
    """Pending-request table with deadline enforcement."""

    def __init__(self) -> None:
        self._pending: dict[str, PendingCorrelation] = {}

    def expect(self, request_id: str, deadline: float) -> PendingCorrelation:
        """Register a PENDING entry for ``request_id``.

        Args:
            request_id: Identifier unique among pending requests
            deadline: Absolute time on the running loop's clock

        Raises:
            ValueError: If ``request_id`` is already pending
        """
        if request_id in self._pending:
            raise ValueError(f"Request id already pending: {request_id}")

        loop = asyncio.get_running_loop()
        pending = PendingCorrelation(
            request_id=request_id,
            deadline=deadline,
            future=loop.create_future(),
        )
        pending.timer = loop.call_at(deadline, self._expire, request_id)
        self._pending[request_id] = pending
        return pending

    async def wait(self, pending: PendingCorrelation) -> RpcResponse:
        """Suspend until ``pending`` is resolved, timed out or cancelled.

        Raises:
            RequestTimeoutError: If the deadline elapsed first
            RequestCancelledError: If the owning session ended first
        """
        try:
            return await pending.future
        finally:
            # Waiter itself was cancelled; don't leave the entry behind
            if pending.state is CorrelationState.PENDING:
                self._finish(pending.request_id, CorrelationState.CANCELLED)

    async def await_response(self, request_id: str, deadline: float) -> RpcResponse:
        """Register ``request_id`` and wait for its response."""
        return await self.wait(self.expect(request_id, deadline))

    def resolve(self, request_id: str, response: RpcResponse) -> bool:
        """Deliver a response to its pending request.

        Returns:
            True if it was delivered, False for late, duplicate or unknown ids
        """
        handled = self._finish(request_id, CorrelationState.RESOLVED, result=response)
        if not handled:
            logger.debug(f"No pending request for response {request_id}, dropping")
        return handled

    def cancel(self, request_id: str, error: BridgeError | None = None) -> bool:
        """Cancel one pending request."""
        return self._finish(
            request_id,
            CorrelationState.CANCELLED,
            error=error or RequestCancelledError(request_id),
        )

    def cancel_all(self, reason: type[RequestCancelledError] = RequestCancelledError) -> int:
        """Cancel every pending request.

        Args:
            reason: Error type raised to each waiter, built from its request id

        Returns:
            Number of requests cancelled
        """
        count = 0
        for request_id in list(self._pending):
            if self._finish(request_id, CorrelationState.CANCELLED, error=reason(request_id)):
                count += 1
        return count

    def _expire(self, request_id: str) -> None:
        if self._finish(
            request_id, CorrelationState.TIMED_OUT, error=RequestTimeoutError(request_id)
        ):
            logger.warning(f"Request {request_id} timed out")

    def _finish(
        self,
        request_id: str,
        state: CorrelationState,
        result: Any = None,
        error: BaseException | None = None,
    ) -> bool:
        pending = self._pending.get(request_id)
        if pending is None or pending.state is not CorrelationState.PENDING:
            return False

        pending.state = state
        del self._pending[request_id]
        if pending.timer is not None:
            pending.timer.cancel()

        if not pending.future.done():
            if error is not None:
                pending.future.set_exception(error)
            else:
                pending.future.set_result(result)
        return True

    def get(self, request_id: str) -> PendingCorrelation | None:
        return self._pending.get(request_id)

    def __contains__(self, request_id: str) -> bool:
        return request_id in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)
