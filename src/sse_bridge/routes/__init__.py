"""HTTP routes for the bridge server."""

from .events import event_routes
from .health import health_routes
from .response import response_routes
from .trigger import trigger_routes

__all__ = [
    "event_routes",
    "health_routes",
    "response_routes",
    "trigger_routes",
]
