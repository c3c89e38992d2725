"""SSE Bridge CLI.

Usage:
    sse-bridge serve                          # Run the bridge server
    sse-bridge serve --port 9000 --queue-size 20
    sse-bridge health                         # Check server health
    sse-bridge trigger demo_client hello      # Send a request to a client
    sse-bridge client --client-id demo_client # Run the demo responder
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

import click
import httpx

from .config import ENV_PREFIX

DEFAULT_URL = "http://localhost:8082"


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
def main(log_level: str) -> None:
    """SSE Bridge - request/response over Server-Sent Events and HTTP POST."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8082, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--queue-size", type=int, help="Push queue capacity per client")
@click.option("--request-timeout", type=float, help="Default seconds to wait for a response")
@click.option("--heartbeat-interval", type=float, help="Idle seconds between heartbeats")
def serve(
    host: str,
    port: int,
    reload: bool,
    queue_size: int | None,
    request_timeout: float | None,
    heartbeat_interval: float | None,
) -> None:
    """Run the bridge server."""
    import uvicorn

    # Pass options via environment variables for the app factory
    overrides = {
        "QUEUE_SIZE": queue_size,
        "REQUEST_TIMEOUT": request_timeout,
        "HEARTBEAT_INTERVAL": heartbeat_interval,
    }
    for name, value in overrides.items():
        if value is not None:
            os.environ[f"{ENV_PREFIX}{name}"] = str(value)

    click.echo(f"Starting SSE bridge on http://{host}:{port}", err=True)
    click.echo(f"  SSE endpoint: http://{host}:{port}/events?client_id=test", err=True)
    click.echo(f"  Trigger: http://{host}:{port}/trigger?client_id=test&message=hello", err=True)
    click.echo("Press Ctrl+C to stop", err=True)

    uvicorn.run(
        "sse_bridge.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@main.command()
@click.option("--url", default=DEFAULT_URL, help="Server URL")
def health(url: str) -> None:
    """Check server health."""

    async def check() -> None:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(f"{url}/health")
        except httpx.RequestError as e:
            click.echo(f"Cannot connect to server: {e}", err=True)
            sys.exit(1)

        if response.status_code != 200:
            click.echo(f"Server returned {response.status_code}", err=True)
            sys.exit(1)
        click.echo(f"Server is healthy: {response.json()}")

    asyncio.run(check())


@main.command()
@click.argument("client_id")
@click.argument("message")
@click.option("--url", default=DEFAULT_URL, help="Server URL")
@click.option("--method", default="analyze", help="Request method")
@click.option("--timeout", type=float, help="Seconds the server waits for the client")
def trigger(client_id: str, message: str, url: str, method: str, timeout: float | None) -> None:
    """Send MESSAGE to CLIENT_ID and print the response."""
    params: dict[str, str] = {"client_id": client_id, "message": message, "method": method}
    if timeout is not None:
        params["timeout"] = str(timeout)

    async def send() -> httpx.Response:
        # Leave headroom over the server-side wait
        wait = (timeout or 30.0) + 5.0
        async with httpx.AsyncClient(timeout=wait) as client:
            return await client.get(f"{url}/trigger", params=params)

    try:
        response = asyncio.run(send())
    except httpx.RequestError as e:
        click.echo(f"Cannot connect to server: {e}", err=True)
        sys.exit(1)

    try:
        body = response.json()
    except json.JSONDecodeError:
        body = {"error": response.text}

    if response.status_code != 200:
        click.echo(f"Request failed ({response.status_code}): {body.get('error')}", err=True)
        sys.exit(1)
    click.echo(json.dumps(body, indent=2))


@main.command()
@click.option("--url", default=DEFAULT_URL, help="Server URL")
@click.option("--client-id", help="Client id to connect with (generated if omitted)")
@click.option("--no-reconnect", is_flag=True, help="Exit when the stream ends")
def client(url: str, client_id: str | None, no_reconnect: bool) -> None:
    """Run the demo client that answers requests."""
    from .sdk import BridgeClient, ClientConfig, analyze_handler

    config = ClientConfig(base_url=url, client_id=client_id, reconnect=not no_reconnect)
    bridge_client = BridgeClient(config, analyze_handler)

    async def run() -> None:
        try:
            await bridge_client.run()
        finally:
            await bridge_client.close()

    click.echo(f"Connecting to {url}", err=True)
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        click.echo("\nShutting down", err=True)


if __name__ == "__main__":
    main()
