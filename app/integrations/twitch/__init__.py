"""
Twitch EventSub integration package.
"""

from .client import TwitchClient
from .models import (
    EventType,
    MessageType,
    NotificationEnvelope,
    Subscription,
    SubscriptionList,
    TwitchConfig,
    WebhookResult,
)
from .registry import WILDCARD, HandlerRegistry
from .signature import build_signature, constant_time_equals, hmac_hex
from .webhooks import WebhookDispatcher
from .exceptions import TwitchError, TwitchConfigurationError, TwitchConditionError

__all__ = [
    "TwitchClient",
    "EventType",
    "MessageType",
    "NotificationEnvelope",
    "Subscription",
    "SubscriptionList",
    "TwitchConfig",
    "WebhookResult",
    "WILDCARD",
    "HandlerRegistry",
    "build_signature",
    "constant_time_equals",
    "hmac_hex",
    "WebhookDispatcher",
    "TwitchError",
    "TwitchConfigurationError",
    "TwitchConditionError",
]
