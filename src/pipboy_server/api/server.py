"""
FastAPI application for the Pip-Boy party server.

``create_app`` builds a fully wired application:
- CORS middleware from the ``[security]`` config section
- The service context (bus, auth, ledger, registry) on ``app.state.context``
- The viewer hub subscribed to the bus for the lifetime of the app
- Service error handlers and all routes

Start-up (lifespan) applies logging config, creates the schema and seeds the
default catalog, and hands the running event loop to the bus so events
published from worker threads reach WebSocket viewers.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pipboy_server import __version__
from pipboy_server.api.errors import install_exception_handlers
from pipboy_server.api.hub import ViewerHub
from pipboy_server.api.routes.register import register_routes
from pipboy_server.config import config, configure_logging
from pipboy_server.core.context import ServiceContext, build_context
from pipboy_server.db.schema import init_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    if config.is_production and config.uses_default_secret:
        raise RuntimeError(
            "Refusing to start in production with the built-in JWT secret. "
            "Set PIPBOY_JWT_SECRET or [auth] jwt_secret."
        )
    if config.uses_default_secret:
        logger.warning("Using the built-in JWT secret; set PIPBOY_JWT_SECRET outside development")

    init_database()

    context: ServiceContext = app.state.context
    hub: ViewerHub = app.state.hub
    context.bus.bind_loop(asyncio.get_running_loop())
    hub.attach(context.bus)
    logger.info("Pip-Boy party server %s ready", __version__)
    try:
        yield
    finally:
        hub.detach()
        context.bus.bind_loop(None)


def create_app(context: ServiceContext | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    context = context or build_context()
    hub = ViewerHub()

    app = FastAPI(title="Pip-Boy Party Server", version=__version__, lifespan=_lifespan)
    app.state.context = context
    app.state.hub = hub

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_origins,
        allow_credentials=config.security.cors_allow_credentials,
        allow_methods=config.security.cors_allow_methods,
        allow_headers=config.security.cors_allow_headers,
    )

    install_exception_handlers(app)
    register_routes(app, context, hub)
    return app


def start_server(host: str | None = None, port: int | None = None) -> None:
    """Run the API under uvicorn with config defaults for host and port."""
    import uvicorn

    configure_logging()
    uvicorn.run(
        create_app(),
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=config.logging.level.lower(),
    )


# Module-level app for ``uvicorn pipboy_server.api.server:app``.
app = create_app()
