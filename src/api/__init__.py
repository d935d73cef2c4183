"""
HTTP Layer for the Maker Update bot.

Provides:
- FastAPI application factory
- Slack webhook router (/slack/commands, /slack/interactions)
- Root-level health check
- Global exception handlers (401 on failed signature, 500 envelope otherwise)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.api.routes import router
from src.api.schemas import HealthCheckResponse, error_response
from src.bot.delivery import Delivery
from src.bot.state_token import StateTokenCodec
from src.bot.webhook import SlackInteractionHandler
from src.bot.wizard import WizardController
from src.config.settings import Settings
from src.lib.errors import AUTH_FAILED, INTERNAL_ERROR
from src.lib.exceptions import AuthenticationError
from src.lib.security import create_security_middleware
from src.services.dedup_cache import IdempotencyCache
from src.services.redis_service import RedisService
from src.services.slack_client import SlackClient

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


def build_handler(
    settings: Settings,
    slack_client: SlackClient | None = None,
    redis_service: RedisService | None = None,
) -> SlackInteractionHandler:
    """
    Wire the wizard components from settings.

    Args:
        settings: Application settings
        slack_client: Pre-built Slack client (tests inject one)
        redis_service: Redis backend for the idempotency cache

    Returns:
        Handler ready to serve Slack requests
    """
    client = slack_client or SlackClient(
        settings.slack_bot_token,
        base_url=settings.slack_api_base_url,
        timeout=settings.slack_api_timeout,
    )
    controller = WizardController(
        codec=StateTokenCodec(max_chars=settings.state_token_max_chars),
        catalog=settings.catalog,
        variant=settings.variant,
        delivery=Delivery(client),
        dedup_cache=IdempotencyCache(
            ttl=settings.dedup_ttl_seconds,
            redis_service=redis_service or RedisService(settings.redis_url),
        ),
    )
    return SlackInteractionHandler(controller, client, slash_command=settings.slash_command)


def create_app(
    settings: Settings | None = None,
    handler: SlackInteractionHandler | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Includes:
    - Settings validation (fail-fast in production)
    - Security headers middleware
    - Exception handlers for authentication and unhandled errors
    - Slack router and root health check
    - Production: /docs and /redoc disabled

    Args:
        settings: Settings (read from the environment if None)
        handler: Pre-built handler (built from settings if None)

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or Settings.from_env()
    settings.validate_secrets()
    handler = handler or build_handler(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Maker Update bot started",
            extra={
                "catalog": settings.catalog_version,
                "variant": settings.form_variant,
                "environment": settings.environment,
            },
        )
        yield
        await handler.slack.aclose()
        await handler.controller.close()

    app = FastAPI(
        title="Maker Biweekly Update",
        description="Slack wizard for squad biweekly updates",
        version=APP_VERSION,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.handler = handler

    # -------------------------------------------------------------------------
    # Exception handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(AuthenticationError)
    async def authentication_exception_handler(
        request: Request, exc: AuthenticationError,
    ) -> JSONResponse:
        # Reason is already logged as a security event; never echo it back.
        return JSONResponse(status_code=401, content=error_response(AUTH_FAILED))

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path,
        )
        return JSONResponse(status_code=500, content=error_response(INTERNAL_ERROR))

    create_security_middleware(app)

    app.include_router(router)

    @app.get("/health")
    async def root_health_check() -> HealthCheckResponse:
        """Root health check for infrastructure probes."""
        return HealthCheckResponse(
            status="ok", version=APP_VERSION, timestamp=datetime.now(UTC)
        )

    return app


__all__ = ["build_handler", "create_app", "router"]
