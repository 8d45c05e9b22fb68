"""FastAPI application factory and server startup."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from neurelay.relay import Relay

logger = logging.getLogger(__name__)


def create_api(relay: Relay) -> FastAPI:
    """Create the relay app around an already constructed :class:`Relay`."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        logger.info("Shutting down relay...")
        await relay.shutdown()

    app = FastAPI(
        title="Neural Terminal Relay",
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # Store shared references on app.state
    app.state.relay = relay

    from neurelay.api.routes import health, publish, status, ws

    app.include_router(health.router)
    app.include_router(publish.router)
    app.include_router(status.router)
    app.include_router(ws.router)

    return app


async def serve(app: FastAPI, host: str = "0.0.0.0", port: int = 3000) -> None:
    """Run uvicorn until interrupted (SIGINT/SIGTERM shut it down gracefully)."""
    import uvicorn

    cfg = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="info",
        access_log=False,
    )
    server = uvicorn.Server(cfg)
    relay: Relay = app.state.relay

    logger.info("Relay listening on %s:%d", host, port)
    logger.info("Health check: http://localhost:%d/health", port)
    logger.info(
        "Log history enabled - storing last %d entries", relay.log_history.capacity
    )
    try:
        await server.serve()
    except Exception:
        logger.error("Relay server crashed", exc_info=True)
        raise
    logger.info("Server closed")
