"""
FastAPI application for the Ladder access-control core.

Wires the storage collaborators, the auth gate, the reset flow, the
connection graph and the privacy filter into one app, and renders every
LadderError as the standard error envelope.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ladder import __version__
from ladder.auth.gate import AuthGate
from ladder.auth.jwt import TokenCodec
from ladder.auth.password_reset import NotificationSender, PasswordResetFlow
from ladder.auth.routes import router as auth_router
from ladder.config import Settings, get_settings
from ladder.connections.graph import ConnectionGraph
from ladder.connections.routes import router as connections_router
from ladder.core.errors import LadderError
from ladder.core.utils import utc_now
from ladder.integrations.email import EmailService
from ladder.integrations.sentry import init_sentry
from ladder.privacy.filter import PrivacyFilter
from ladder.privacy.routes import router as privacy_router
from ladder.storage import StorageProvider, create_local_storage

logger = logging.getLogger(__name__)


# =============================================================================
# Error rendering
# =============================================================================


def error_body(status: int, message: str) -> dict:
    return {
        "success": False,
        "error": {
            "message": message,
            "status": status,
            "timestamp": utc_now().isoformat(),
        },
    }


async def handle_ladder_error(request: Request, exc: LadderError) -> JSONResponse:
    """Render a LadderError with its generic message only."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message),
        headers=headers,
    )


# =============================================================================
# App factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
    sender: NotificationSender | None = None,
) -> FastAPI:
    """
    Build the API.

    Services are attached to app.state here rather than in the lifespan so
    the app is usable under test transports that skip lifespan events.
    """
    settings = settings or get_settings()
    storage = storage or create_local_storage()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_sentry(settings):
            logger.info("Sentry error tracking enabled")
        logger.info(f"Ladder API starting in {settings.environment} mode")

        yield

        await app.state.reset_flow.drain()
        logger.info("Ladder API shutting down")

    app = FastAPI(
        title="Ladder API",
        description="Authentication, connections and content privacy for Ladder",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    graph = ConnectionGraph(storage.connections)
    app.state.settings = settings
    app.state.storage = storage
    app.state.auth_gate = AuthGate(TokenCodec.from_settings(settings), storage.identities)
    app.state.reset_flow = PasswordResetFlow.from_settings(
        settings,
        storage.identities,
        storage.reset_tokens,
        sender or EmailService(settings),
    )
    app.state.connection_graph = graph
    app.state.privacy_filter = PrivacyFilter(graph, storage.settings)

    app.add_exception_handler(LadderError, handle_ladder_error)

    app.include_router(auth_router)
    app.include_router(connections_router)
    app.include_router(privacy_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
