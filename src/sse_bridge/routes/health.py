"""Health and status endpoints."""

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .base import get_bridge


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "ok", "clients": len(get_bridge(request).registry)})


async def list_clients(request: Request) -> JSONResponse:
    """List connected clients."""
    return JSONResponse(get_bridge(request).registry.list_sessions())


health_routes = [
    Route("/health", health_check, methods=["GET"]),
    Route("/clients", list_clients, methods=["GET"]),
]
