"""
Twitch EventSub webhook API endpoints.
"""

from fastapi import APIRouter, Depends, Request, Response

from app.core.dependencies import get_handler_registry, get_twitch_config, get_webhook_dispatcher
from app.integrations.twitch.models import EventType, TwitchConfig
from app.integrations.twitch.registry import HandlerRegistry
from app.integrations.twitch.webhooks import WebhookDispatcher

router = APIRouter(prefix="/twitch/webhooks", tags=["twitch-webhooks"])


@router.post("/callback")
async def receive_webhook(
    request: Request,
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher)
):
    """
    Receive and process webhooks from Twitch EventSub.

    Verifies the delivery signature, answers callback verification
    challenges and dispatches notifications to registered handlers.
    Exceptions raised by handlers are left to the application's
    exception handlers.
    """
    body = await request.body()
    result = await dispatcher.process_webhook(request.headers, body)

    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers
    )


@router.get("/info")
async def webhook_info(
    config: TwitchConfig = Depends(get_twitch_config),
    registry: HandlerRegistry = Depends(get_handler_registry)
):
    """
    Get information about webhook configuration.

    Returns details about the current webhook setup and registered handlers.
    """
    return {
        "callback": config.callback,
        "webhook_secret_configured": bool(config.signing_secret),
        "supported_event_types": [event_type.value for event_type in EventType],
        "registered_handlers": sorted(registry.keys()),
    }
