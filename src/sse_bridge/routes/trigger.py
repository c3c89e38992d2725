"""Trigger endpoint - send a request to a client and return its response."""

import logging
import math

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..errors import BridgeError
from .base import bad_request, error_response, get_bridge

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "analyze"


async def trigger_request(request: Request) -> JSONResponse:
    """Dispatch ``message`` to ``client_id`` and wait for the answer.

    Query params: ``client_id`` and ``message`` (required), ``method``
    (default "analyze"), ``timeout`` in seconds (default from config).
    """
    params = request.query_params
    client_id = params.get("client_id")
    message = params.get("message")
    if not client_id or not message:
        return bad_request("Need client_id and message parameters")

    timeout: float | None = None
    if "timeout" in params:
        try:
            timeout = float(params["timeout"])
        except ValueError:
            return bad_request("Invalid timeout parameter")
        if not math.isfinite(timeout) or timeout <= 0:
            return bad_request("Invalid timeout parameter")

    method = params.get("method") or DEFAULT_METHOD
    logger.info(f"Sending {method} request to client {client_id}: {message}")

    try:
        response = await get_bridge(request).dispatch(
            client_id,
            {"method": method, "message": message},
            timeout=timeout,
        )
    except BridgeError as e:
        logger.info(f"Request to {client_id} failed: {e.code}")
        return error_response(e)

    return JSONResponse(response.model_dump())


trigger_routes = [
    Route("/trigger", trigger_request, methods=["GET"]),
]
