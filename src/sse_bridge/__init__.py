"""SSE Bridge - server-to-client requests over Server-Sent Events.

Requests are pushed to a connected client over a long-lived SSE stream;
the client answers with HTTP POSTs that are correlated back to the
waiting caller by request id.
"""

from .bridge import Bridge
from .config import BridgeConfig
from .correlator import CorrelationState, Correlator, PendingCorrelation
from .dispatcher import Dispatcher, RequestIdGenerator
from .errors import (
    BackpressureError,
    BridgeError,
    ClientNotFoundError,
    ClientReplacedError,
    RequestCancelledError,
    RequestTimeoutError,
    UnknownClientError,
)
from .intake import ResponseIntake
from .models import RpcRequest, RpcResponse
from .registry import ClientSession, SessionRegistry

__version__ = "0.1.0"

__all__ = [
    "BackpressureError",
    "Bridge",
    "BridgeConfig",
    "BridgeError",
    "ClientNotFoundError",
    "ClientReplacedError",
    "ClientSession",
    "CorrelationState",
    "Correlator",
    "Dispatcher",
    "PendingCorrelation",
    "RequestCancelledError",
    "RequestIdGenerator",
    "RequestTimeoutError",
    "ResponseIntake",
    "RpcRequest",
    "RpcResponse",
    "SessionRegistry",
    "UnknownClientError",
]
