"""
Roadie User Service — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application used for local runs
       (`uvicorn roadie_user.main:app`) and for the HTTP-level tests.
How:   create_app() wires logging, middleware, the catch-all exception
       handlers and the routes. The deployed entry point is
       `roadie_user.handler.lambda_handler`; both share the dispatcher.

Lifecycle:
    Startup:
    1. Initialize logging
    2. Create the `users` table when DB_CREATE_SCHEMA is set
    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from roadie_user import __version__
from roadie_user.config import settings
from roadie_user.database import create_schema, dispose_engine
from roadie_user.exceptions import RoadieUserError
from roadie_user.logging_setup import setup_logging
from roadie_user.middleware.logging import RequestLoggingMiddleware
from roadie_user.middleware.request_id import RequestIDMiddleware, request_id_var
from roadie_user.routes import health, users
from roadie_user.schemas.user import ErrorResponse
from roadie_user.services.memory_store import InMemoryUserStore
from roadie_user.services.store_base import UserStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Roadie user service %s starting (store=%s)", __version__, settings.store_backend)

    if getattr(app.state, "memory_store", None) is None and settings.db_create_schema:
        await create_schema()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Roadie user service shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Handlers for failures the dispatcher chose not to answer.

    The dispatcher maps every recoverable error itself; anything reaching
    these handlers is a failure propagated under the `raise` policies (or a
    bug), so both answer 500 with a generic message and log the details.
    """

    def _server_error(rid: str) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="internal_server_error",
                message="An unexpected error occurred. Please try again or contact support.",
                request_id=rid,
            ).model_dump(),
        )

    @app.exception_handler(RoadieUserError)
    async def handle_app_error(request: Request, exc: RoadieUserError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unhandled %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _server_error(rid)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _server_error(rid)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(memory_store: Optional[UserStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        memory_store: Store shared by every request of this app. When omitted,
                      an InMemoryUserStore is created for STORE_BACKEND=memory;
                      with the database backend each request opens its own
                      session instead.
    """
    app = FastAPI(
        title="Roadie User API",
        description="CRUD handler for the users resource.",
        version=__version__,
        lifespan=lifespan,
    )

    if memory_store is None and settings.store_backend == "memory":
        memory_store = InMemoryUserStore()
    app.state.memory_store = memory_store

    # Last added runs first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(health.router)

    return app


app = create_app()
