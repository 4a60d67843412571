"""
Twitch EventSub webhook verification and dispatch.
"""

import asyncio
import inspect
import json
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError

from .models import MessageType, NotificationEnvelope, WebhookResult
from .registry import WILDCARD, EventHandler, HandlerRegistry
from .signature import build_signature, constant_time_equals

MESSAGE_ID_HEADER = "twitch-eventsub-message-id"
MESSAGE_TIMESTAMP_HEADER = "twitch-eventsub-message-timestamp"
MESSAGE_SIGNATURE_HEADER = "twitch-eventsub-message-signature"
MESSAGE_TYPE_HEADER = "twitch-eventsub-message-type"


def error_result(status_code: int, message: str) -> WebhookResult:
    """Build a JSON error response in the shape Twitch integrations expect."""
    return WebhookResult(
        status_code=status_code,
        headers={"content-type": "application/json"},
        body=json.dumps({"error": message})
    )


async def _call_handler(handler: EventHandler, envelope: NotificationEnvelope) -> Any:
    result = handler(envelope)
    if inspect.isawaitable(result):
        return await result
    return result


async def _fan_out(handlers: Iterable[EventHandler], envelope: NotificationEnvelope):
    """Run a group of handlers concurrently and wait for all of them."""
    handlers = list(handlers)
    if handlers:
        await asyncio.gather(*(_call_handler(handler, envelope) for handler in handlers))


class WebhookDispatcher:
    """Verifies EventSub deliveries and routes notifications to handlers."""

    def __init__(self, registry: HandlerRegistry, secret: Optional[str] = None):
        """Initialize the dispatcher."""
        self.registry = registry
        self.secret = secret

    async def process_webhook(
        self,
        headers: Mapping[str, str],
        body: Union[str, bytes],
        secret: Optional[str] = None,
        handlers: Optional[Dict[str, EventHandler]] = None,
        on_unknown_event: Optional[EventHandler] = None,
    ) -> WebhookResult:
        """
        Process an incoming webhook from Twitch EventSub.

        Args:
            headers: HTTP headers from the webhook request (any case)
            body: Raw webhook body, unmodified
            secret: Signing secret; defaults to the dispatcher's secret
            handlers: One direct handler per event type for this call
            on_unknown_event: Called when no direct handler matches the event type

        Returns:
            The response to send back to Twitch

        Handler exceptions are not caught; they propagate to the caller.
        """
        headers = {key.lower(): value for key, value in headers.items()}
        handlers = handlers or {}
        secret = secret if secret is not None else self.secret

        message_id = headers.get(MESSAGE_ID_HEADER)
        timestamp = headers.get(MESSAGE_TIMESTAMP_HEADER)
        signature = headers.get(MESSAGE_SIGNATURE_HEADER)
        message_type = headers.get(MESSAGE_TYPE_HEADER)

        if not message_id or not timestamp:
            logger.warning("Webhook rejected: missing id/timestamp headers")
            return error_result(
                400,
                f'Missing required headers "{MESSAGE_ID_HEADER}" or "{MESSAGE_TIMESTAMP_HEADER}"'
            )

        if not signature:
            logger.warning(f"Webhook {message_id} rejected: missing signature header")
            return error_result(400, f'Missing required header "{MESSAGE_SIGNATURE_HEADER}"')

        if not message_type:
            logger.warning(f"Webhook {message_id} rejected: missing message type header")
            return error_result(400, f'Missing required header "{MESSAGE_TYPE_HEADER}"')

        try:
            raw_body = body.decode("utf-8") if isinstance(body, bytes) else body
            payload = json.loads(raw_body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning(f"Webhook {message_id} rejected: invalid JSON body")
            return error_result(400, "Invalid JSON body")

        if not secret:
            logger.warning(f"Webhook {message_id} rejected: no webhook secret configured")
            return error_result(401, "Invalid signature")

        expected = build_signature(secret, message_id, timestamp, raw_body)
        if not constant_time_equals(expected, signature):
            logger.warning(f"Webhook {message_id} rejected: signature verification failed")
            return error_result(401, "Invalid signature")

        if message_type == MessageType.NOTIFICATION.value:
            return await self._handle_notification(message_id, payload, handlers, on_unknown_event)

        if message_type == MessageType.VERIFICATION.value:
            challenge = payload.get("challenge") if isinstance(payload, dict) else None
            if not isinstance(challenge, str) or not challenge:
                logger.warning(f"Verification {message_id} rejected: missing challenge")
                return error_result(400, "Missing challenge in verification request")

            logger.info(f"Answering callback verification {message_id}")
            return WebhookResult(
                status_code=200,
                headers={"content-type": "text/plain"},
                body=challenge
            )

        if message_type == MessageType.REVOCATION.value:
            subscription = payload.get("subscription") if isinstance(payload, dict) else None
            subscription = subscription if isinstance(subscription, dict) else {}
            logger.warning(
                f"Subscription revoked: id={subscription.get('id')} "
                f"type={subscription.get('type')} status={subscription.get('status')}"
            )
            return WebhookResult(status_code=204)

        logger.warning(f"Webhook {message_id} rejected: invalid message type {message_type}")
        return error_result(400, f"Invalid message type: {message_type}")

    async def _handle_notification(
        self,
        message_id: str,
        payload: Any,
        handlers: Dict[str, EventHandler],
        on_unknown_event: Optional[EventHandler],
    ) -> WebhookResult:
        try:
            envelope = NotificationEnvelope.from_payload(payload)
        except ValidationError as e:
            logger.warning(f"Notification {message_id} rejected: {e}")
            return error_result(400, "Invalid notification payload")

        event_type = envelope.event_type
        logger.info(f"Processing notification {message_id}: {event_type}")

        direct_handler = handlers.get(event_type)
        if direct_handler is not None:
            await _call_handler(direct_handler, envelope)
        elif event_type not in handlers and on_unknown_event is not None:
            await _call_handler(on_unknown_event, envelope)

        await _fan_out(self.registry.lookup(event_type), envelope)
        await _fan_out(self.registry.lookup(WILDCARD), envelope)

        return WebhookResult(status_code=204)
