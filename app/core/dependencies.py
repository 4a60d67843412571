"""
FastAPI dependency functions.
"""

from typing import AsyncGenerator

from fastapi import Request

from app.core.config import settings
from app.integrations.twitch.client import TwitchClient
from app.integrations.twitch.models import TwitchConfig
from app.integrations.twitch.registry import HandlerRegistry
from app.integrations.twitch.webhooks import WebhookDispatcher


def get_twitch_config() -> TwitchConfig:
    """
    Dependency to get Twitch configuration.

    Returns the current Twitch configuration from settings.
    """
    return TwitchConfig(
        client_id=settings.TWITCH_CLIENT_ID,
        client_secret=settings.TWITCH_CLIENT_SECRET or None,
        access_token=settings.TWITCH_ACCESS_TOKEN or None,
        callback=settings.TWITCH_WEBHOOK_CALLBACK,
        webhook_secret=settings.TWITCH_WEBHOOK_SECRET or None,
        api_url=settings.TWITCH_API_URL,
        auth_url=settings.TWITCH_AUTH_URL,
        timeout=settings.TWITCH_REQUEST_TIMEOUT
    )


def get_handler_registry(request: Request) -> HandlerRegistry:
    """Handler registry owned by the running application."""
    return request.app.state.handler_registry


def get_webhook_dispatcher(request: Request) -> WebhookDispatcher:
    """Webhook dispatcher owned by the running application."""
    return request.app.state.webhook_dispatcher


async def get_twitch_client() -> AsyncGenerator[TwitchClient, None]:
    """
    Dependency to get a Twitch client instance.

    Handles proper lifecycle management with async context manager.
    """
    async with TwitchClient(get_twitch_config()) as client:
        yield client
