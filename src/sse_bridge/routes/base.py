"""Shared helpers for route handlers."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import JSONResponse

from ..bridge import Bridge
from ..errors import BridgeError


def get_bridge(request: Request) -> Bridge:
    """Get the bridge attached to the application."""
    return request.app.state.bridge


def error_response(error: BridgeError) -> JSONResponse:
    """Render a bridge error as a JSON response."""
    return JSONResponse(error.to_dict(), status_code=error.status_code)


def bad_request(message: str) -> JSONResponse:
    return JSONResponse({"error": message, "code": "bad_request"}, status_code=400)
