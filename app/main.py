"""
Twitch EventSub Relay - Main FastAPI application entry point.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.router import api_router
from app.core.config import settings
from app.integrations.twitch.registry import HandlerRegistry
from app.integrations.twitch.webhooks import WebhookDispatcher
from app.core.dependencies import get_twitch_config
from app.utils.error_handlers import (
    relay_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler,
)
from app.utils.exceptions import EventSubRelayException

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format=settings.LOG_FORMAT,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Twitch EventSub Relay application...")
    yield
    logger.info("Shutting down Twitch EventSub Relay application...")


def create_app() -> FastAPI:
    """
    Build the FastAPI application.

    Each application gets its own handler registry and webhook dispatcher,
    reachable through app.state and the dependencies in app.core.dependencies.
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Twitch EventSub webhook receiver and subscription manager",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    secret = get_twitch_config().signing_secret
    if not secret:
        logger.warning("No webhook secret configured, every EventSub delivery will be rejected")

    registry = HandlerRegistry()
    app.state.handler_registry = registry
    app.state.webhook_dispatcher = WebhookDispatcher(registry, secret=secret)

    # Add exception handlers
    app.add_exception_handler(EventSubRelayException, relay_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id_header(request: Request, call_next):
        """Add request ID header for tracing."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health_check():
        """Basic health check endpoint."""
        return {"status": "healthy", "service": "twitch-eventsub-relay"}

    return app


app = create_app()
