"""Bridge client - answers server requests pushed over SSE.

Handles:
- Parsing SSE records (data: {...}\\n\\n)
- Learning the client id from the first record
- Running a handler per request and POSTing the response
- Automatic reconnection with backoff for intermittent connectivity
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from ..models import RpcRequest, RpcResponse
from ..transport.sse import CLIENT_ID_HEADER, parse_record

logger = logging.getLogger(__name__)

# Handlers may be sync or async
RequestHandler = Callable[[RpcRequest], Any]


@dataclass
class ClientConfig:
    """Client connection configuration."""

    base_url: str = "http://localhost:8082"
    client_id: str | None = None

    # Timeout for response POSTs; the stream itself has no read timeout
    timeout: float = 10.0

    # Reconnection settings
    reconnect: bool = True
    reconnect_delay: float = 1.0
    max_reconnect_delay: float = 30.0
    reconnect_backoff: float = 2.0


def analyze_handler(request: RpcRequest) -> str:
    """Demo request processor."""
    message = request.message or ""
    if request.method == "analyze":
        return (
            f"Analysis result for '{message}': This message contains {len(message)} "
            f"characters and appears to be a {request.method} request."
        )
    return f"Processed '{message}' using method '{request.method}'"


class BridgeClient:
    """Connects to a bridge server and answers its requests.

    Usage:
        client = BridgeClient(ClientConfig(client_id="demo"), analyze_handler)
        await client.run()
    """

    def __init__(
        self,
        config: ClientConfig,
        handler: RequestHandler,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.client_id = config.client_id
        self._handler = handler
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._closed = False
        self._reconnect_delay = config.reconnect_delay

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout, read=None),  # No read timeout for SSE
                transport=self._transport,
            )
        return self._client

    async def run(self) -> None:
        """Consume the stream until closed, reconnecting when enabled."""
        while not self._closed:
            try:
                await self._consume()
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                if self._closed:
                    break
                if not self.config.reconnect:
                    raise
                logger.warning(
                    f"SSE connection lost: {e}. Reconnecting in {self._reconnect_delay}s..."
                )
                await asyncio.sleep(self._reconnect_delay)
                self._reconnect_delay = min(
                    self._reconnect_delay * self.config.reconnect_backoff,
                    self.config.max_reconnect_delay,
                )
                continue

            if not self.config.reconnect:
                break
            logger.info("SSE stream ended")
            await asyncio.sleep(self._reconnect_delay)

    async def _consume(self) -> None:
        client = await self._ensure_client()
        params = {"client_id": self.client_id} if self.client_id else None
        request = client.build_request(
            "GET",
            "/events",
            params=params,
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
        )
        response = await client.send(request, stream=True)
        try:
            response.raise_for_status()
            logger.info(f"Connected to SSE stream at {self.config.base_url}")
            self._reconnect_delay = self.config.reconnect_delay  # Reset on success

            async for line in response.aiter_lines():
                if self._closed:
                    break
                await self._handle_line(line)
        finally:
            await response.aclose()

    async def _handle_line(self, line: str) -> None:
        try:
            payload = parse_record(line)
        except ValueError:
            logger.warning(f"Failed to parse SSE data: {line}")
            return
        if payload is None:
            return

        if payload.get("type") == "client_id":
            self.client_id = payload.get("id")
            logger.info(f"Got client ID: {self.client_id}")
            return

        try:
            request = RpcRequest.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Failed to parse request: {e}")
            return

        response = await self.handle_request(request)
        await self.send_response(response)

    async def handle_request(self, request: RpcRequest) -> RpcResponse:
        """Run the handler for ``request`` and build its response.

        Handler exceptions are reported back in the response's ``error``.
        """
        logger.debug(f"Processing request {request.id} ({request.method})")
        try:
            result = self._handler(request)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.exception(f"Handler failed for request {request.id}")
            return RpcResponse(id=request.id, error=str(e))
        return RpcResponse(id=request.id, result=result)

    async def send_response(self, response: RpcResponse) -> bool:
        """POST ``response`` to the server.

        Returns:
            True if the server acknowledged it
        """
        client = await self._ensure_client()
        try:
            reply = await client.post(
                "/response",
                json=response.model_dump(exclude_none=True),
                headers={CLIENT_ID_HEADER: self.client_id or ""},
            )
            reply.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send response {response.id}: {e}")
            return False
        logger.debug(f"Sent response {response.id}")
        return True

    async def close(self) -> None:
        """Stop consuming and release the HTTP client."""
        self._closed = True
        if self._client:
            await self._client.aclose()
            self._client = None
