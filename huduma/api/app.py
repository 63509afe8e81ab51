"""
FastAPI application for the Huduma API.

REST:
- /api/auth, /api/users: registration and lookup
- /api/jobs: bookings and their lifecycle
- /api/messages: job conversations
- /api/payments, /api/reviews, /api/favorites

Realtime:
- /ws?userId=: per-user push channel

Service:
- GET /health, GET /stats
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from huduma.api.routes import favorites, jobs, messages, payments, reviews, users, ws
from huduma.common.constants import TypeMsg
from huduma.common.errors import HudumaError, NotFoundError, PaymentError, ValidationError
from huduma.common.logger import log_error, log_info, setup_logging
from huduma.config import settings
from huduma.infra.database import close_db, get_db, init_db
from huduma.infra.redis_client import close_redis, get_redis, init_redis
from huduma.realtime.dispatcher import Dispatcher
from huduma.realtime.redis_relay import RedisRelay
from huduma.realtime.registry import ConnectionRegistry, registry as default_registry
from huduma.shared.models.common import ErrorResponse, HealthStatus

SERVICE_NAME = "huduma-api"


# =============================================================================
# LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifecycle."""
    setup_logging()
    await log_info("Huduma API starting...", type_msg=TypeMsg.INFO)

    await init_db()

    relay: Optional[RedisRelay] = None
    if settings.realtime.REALTIME_BACKEND == "redis":
        await init_redis()
        relay = RedisRelay(
            get_redis(),
            app.state.registry,
            channel_prefix=settings.realtime.PUSH_CHANNEL_PREFIX,
            send_timeout=settings.realtime.PUSH_SEND_TIMEOUT,
        )
        await relay.start()
        app.state.dispatcher = Dispatcher(
            app.state.registry,
            publisher=relay,
            send_timeout=settings.realtime.PUSH_SEND_TIMEOUT,
        )

    yield

    if relay is not None:
        await relay.stop()
        await close_redis()
    await close_db()
    await log_info("Huduma API stopped", type_msg=TypeMsg.INFO)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _status_for(exc: HudumaError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, PaymentError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_handler(request: Request, exc: HudumaError) -> JSONResponse:
    body = ErrorResponse(error_code=exc.error_code, message=exc.message, details=exc.details or None)
    return JSONResponse(status_code=_status_for(exc), content=jsonable_encoder(body))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ErrorResponse(
        error_code=ValidationError.error_code,
        message="Invalid request",
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=jsonable_encoder(body))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    await log_error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    body = ErrorResponse(error_code="internal_error", message="Internal server error")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=jsonable_encoder(body))


# =============================================================================
# APPLICATION
# =============================================================================

def create_app(registry: Optional[ConnectionRegistry] = None) -> FastAPI:
    """
    Builds the application.

    Args:
        registry: Connection registry (the process-wide one by default)
    """
    app = FastAPI(
        title="Huduma API",
        description="Service marketplace: jobs, chat and realtime notifications.",
        version=settings.system.VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.registry = registry if registry is not None else default_registry
    app.state.dispatcher = Dispatcher(
        app.state.registry,
        send_timeout=settings.realtime.PUSH_SEND_TIMEOUT,
    )
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.deployment.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HudumaError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(users.router)
    app.include_router(jobs.router)
    app.include_router(messages.router)
    app.include_router(payments.router)
    app.include_router(reviews.router)
    app.include_router(favorites.router)
    app.include_router(ws.router)

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check() -> HealthStatus:
        deps = {"postgres": "healthy" if await get_db().health_check() else "unhealthy"}
        if settings.realtime.REALTIME_BACKEND == "redis":
            deps["redis"] = "healthy" if await get_redis().health_check() else "unhealthy"

        overall = "healthy" if all(v == "healthy" for v in deps.values()) else "degraded"

        return HealthStatus(
            service=SERVICE_NAME,
            status=overall,
            version=settings.system.VERSION,
            uptime_seconds=round(time.monotonic() - app.state.started_at, 3),
            dependencies=deps,
        )

    @app.get("/stats", tags=["Stats"])
    async def get_stats() -> dict[str, Any]:
        return {
            **app.state.registry.get_stats(),
            **app.state.dispatcher.get_stats(),
            "realtime_backend": settings.realtime.REALTIME_BACKEND,
        }

    return app


app = create_app()
