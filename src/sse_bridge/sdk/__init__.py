"""Client SDK for answering bridge requests."""

from .client import BridgeClient, ClientConfig, RequestHandler, analyze_handler

__all__ = [
    "BridgeClient",
    "ClientConfig",
    "RequestHandler",
    "analyze_handler",
]
