"""SSE endpoint - the per-client push stream."""

from starlette.requests import Request
from starlette.responses import StreamingResponse
from starlette.routing import Route

from ..transport.sse import SSE_HEADERS, session_stream
from .base import get_bridge


async def events_endpoint(request: Request) -> StreamingResponse:
    """Open the push stream for a client.

    The client may choose its id with ``?client_id=``; otherwise one is
    generated and announced in the first record. Connecting with the id of
    a live session replaces that session.
    """
    bridge = get_bridge(request)
    client_id = request.query_params.get("client_id") or None

    async def event_stream():
        session = await bridge.register(client_id)
        try:
            async for record in session_stream(
                session,
                request.is_disconnected,
                heartbeat_interval=bridge.config.heartbeat_interval,
            ):
                yield record
        finally:
            await bridge.unregister(session.client_id, session)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


event_routes = [
    Route("/events", events_endpoint, methods=["GET"]),
]
