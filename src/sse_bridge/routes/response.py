"""Submission endpoint - clients POST responses here."""

import logging

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..errors import UnknownClientError
from ..models import RpcResponse
from ..transport.sse import CLIENT_ID_HEADER
from .base import bad_request, error_response, get_bridge

logger = logging.getLogger(__name__)


async def submit_response(request: Request) -> JSONResponse:
    """Accept a response from a client.

    The client is identified by the ``Client-ID`` header. Receipt is
    acknowledged whether or not the response matched a pending request.
    """
    try:
        body = await request.json()
    except ValueError:
        # Malformed JSON or a body that is not valid UTF-8
        return bad_request("Invalid JSON body")

    try:
        response = RpcResponse.model_validate(body)
    except ValidationError as e:
        return bad_request(f"Invalid response: {e.errors(include_url=False)}")

    client_id = request.headers.get(CLIENT_ID_HEADER)
    try:
        matched = get_bridge(request).submit(client_id, response)
    except UnknownClientError as e:
        return error_response(e)

    logger.info(f"Received response {response.id} from {client_id} (matched={matched})")
    return JSONResponse({"received": True, "matched": matched})


response_routes = [
    Route("/response", submit_response, methods=["POST"]),
]
