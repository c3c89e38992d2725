"""Bridge Server Application.

Creates the Starlette ASGI application with all routes:
- /health, /clients - Health and status
- /events - SSE push stream (server -> client requests)
- /response - Response submission (client -> server)
- /trigger - Dispatch a request to a client and wait for the response
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from .bridge import Bridge
from .config import BridgeConfig
from .routes import event_routes, health_routes, response_routes, trigger_routes


def create_app(config: BridgeConfig | None = None, bridge: Bridge | None = None) -> Starlette:
    """Create the bridge server application.

    Args:
        config: Server configuration (read from the environment if omitted)
        bridge: Pre-built bridge to serve (takes precedence over ``config``)

    Returns:
        Configured Starlette application, with the bridge at ``app.state.bridge``
    """
    bridge = bridge or Bridge(config or BridgeConfig.from_env())

    routes: list[Route] = []
    routes.extend(health_routes)
    routes.extend(event_routes)
    routes.extend(response_routes)
    routes.extend(trigger_routes)

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=bridge.config.allow_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
    ]

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        yield
        await bridge.shutdown()

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.bridge = bridge
    return app
