from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from course_booking.api.errors import register_exception_handlers
from course_booking.api.routes import register_routes
from course_booking.core.auth import get_token_service
from course_booking.core.config import get_settings
from course_booking.core.errors import UnauthorizedError
from course_booking.core.logging import setup_logging
from course_booking.domain import AuthenticatedContext
from course_booking.infrastructure.db.session import dispose_engine
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger()


def create_app() -> FastAPI:
    """Application factory for the public API."""
    settings = get_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
        )
        yield
        await dispose_engine()
        logger.info("service_shutdown", service=settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)

    @app.middleware("http")
    async def session_identity_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        # Populate the session identity when a valid token is presented; the
        # request is never rejected here. A verification failure is kept for
        # `authenticate` so the token is decoded once per request.
        request.state.identity = None
        request.state.token_error = None
        header = request.headers.get("authorization")
        if header is not None:
            try:
                claims = get_token_service().verify(header)
            except UnauthorizedError as exc:
                request.state.token_error = exc
            else:
                request.state.identity = AuthenticatedContext.from_claims(claims)
        return await call_next(request)

    @app.middleware("http")
    async def correlation_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid4()))
        bind_contextvars(
            request_id=request_id,
            path=str(request.url.path),
            method=request.method,
        )
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_contextvars()

    return app


app = create_app()
