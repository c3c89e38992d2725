"""Error taxonomy for the request/response bridge.

Every error is scoped to one client or one request; none of them is fatal
to the server. Routes translate them to HTTP responses using ``status_code``
and ``code``.
"""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    """Base class for all bridge errors."""

    code = "bridge_error"
    status_code = 500

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for a JSON response body."""
        return {"error": self.message, "code": self.code, **self.details}


class ClientNotFoundError(BridgeError):
    """Raised when a dispatch targets a client with no live session."""

    code = "client_not_found"
    status_code = 404

    def __init__(self, client_id: str) -> None:
        super().__init__(f"Client not found: {client_id}", client_id=client_id)
        self.client_id = client_id


class BackpressureError(BridgeError):
    """Raised when a client's push queue is full."""

    code = "backpressure"
    status_code = 503

    def __init__(self, client_id: str, capacity: int) -> None:
        super().__init__(
            f"Client {client_id} is busy ({capacity} requests queued)",
            client_id=client_id,
        )
        self.client_id = client_id
        self.capacity = capacity


class RequestTimeoutError(BridgeError):
    """Raised when no response arrives before the request deadline."""

    code = "timeout"
    status_code = 408

    def __init__(self, request_id: str) -> None:
        super().__init__(f"Request {request_id} timed out", request_id=request_id)
        self.request_id = request_id


class RequestCancelledError(BridgeError):
    """Raised when the owning session ends while a request is pending."""

    code = "cancelled"
    status_code = 410

    def __init__(self, request_id: str | None = None, reason: str = "client disconnected") -> None:
        message = f"Request {request_id} cancelled: {reason}" if request_id else reason
        super().__init__(message, reason=reason)
        self.request_id = request_id
        self.reason = reason


class ClientReplacedError(RequestCancelledError):
    """Raised for requests of a session superseded by a reconnect."""

    code = "client_replaced"

    def __init__(self, request_id: str | None = None) -> None:
        super().__init__(request_id, reason="client replaced")


class UnknownClientError(BridgeError):
    """Raised when a response is submitted for a client with no session."""

    code = "unknown_client"
    status_code = 404

    def __init__(self, client_id: str | None) -> None:
        super().__init__(f"Unknown client: {client_id}", client_id=client_id)
        self.client_id = client_id
