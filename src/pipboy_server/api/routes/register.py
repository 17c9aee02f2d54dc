"""
Route registration entry point for the FastAPI application.

Each router module exposes a ``router(...)`` factory that receives the
objects it needs, so nothing is looked up from module globals.
"""

from fastapi import FastAPI

from pipboy_server.api.hub import ViewerHub
from pipboy_server.api.routes import auth, catalog, health, lines, markers, ws
from pipboy_server.config import config
from pipboy_server.core.context import ServiceContext


def register_routes(app: FastAPI, context: ServiceContext, hub: ViewerHub) -> None:
    """Register all API routes with the FastAPI app."""
    app.include_router(health.router)
    app.include_router(auth.router(context))
    app.include_router(catalog.router(context))
    app.include_router(lines.router(context))
    app.include_router(markers.router(context))
    if config.features.websocket_enabled:
        app.include_router(ws.router(hub))
