"""Server-Sent Events framing and the session drain loop."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from ..models import ClientIdMessage
from ..registry import ClientSession

logger = logging.getLogger(__name__)

RECORD_PREFIX = "data: "
RECORD_TERMINATOR = "\n\n"
HEARTBEAT_RECORD = ": heartbeat\n\n"

# Header identifying the submitting client on response POSTs
CLIENT_ID_HEADER = "Client-ID"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
    "Access-Control-Allow-Origin": "*",
}


def format_record(payload: dict[str, Any]) -> str:
    """Frame ``payload`` as one SSE data record."""
    return f"{RECORD_PREFIX}{json.dumps(payload, separators=(',', ':'))}{RECORD_TERMINATOR}"


def parse_record(line: str) -> dict[str, Any] | None:
    """Parse one line of an event stream.

    Returns:
        The decoded payload for ``data:`` lines, None for blank lines,
        comments and other fields

    Raises:
        ValueError: If a data line does not hold a JSON object
    """
    if not line.startswith(RECORD_PREFIX):
        return None
    payload = json.loads(line[len(RECORD_PREFIX) :])
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got: {line}")
    return payload


async def session_stream(
    session: ClientSession,
    is_disconnected: Callable[[], Awaitable[bool]],
    heartbeat_interval: float = 15.0,
) -> AsyncIterator[str]:
    """Yield the SSE records for one client session.

    Announces the client id, then drains the session's push channel in
    order, one record per request. Emits a heartbeat comment whenever the
    channel stays idle for ``heartbeat_interval`` seconds. Ends when the
    session is closed or the peer disconnects.

    Args:
        session: The session to drain
        is_disconnected: Async check for peer disconnect
        heartbeat_interval: Idle seconds between heartbeats
    """
    yield format_record(ClientIdMessage(id=session.client_id).model_dump())

    while True:
        try:
            request = await asyncio.wait_for(session.next_request(), timeout=heartbeat_interval)
        except TimeoutError:
            if await is_disconnected():
                logger.debug(f"Stream for {session.client_id} disconnected")
                return
            yield HEARTBEAT_RECORD
            continue

        if request is None:
            logger.debug(f"Session {session.client_id} closed, ending stream")
            return

        logger.debug(f"Pushing {request.id} to {session.client_id}")
        yield format_record(request.to_wire())
