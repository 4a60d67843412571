"""
Twitch EventSub data models.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type, Union

from loguru import logger
from pydantic import BaseModel, BeforeValidator, Field, ValidationError

_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


def _trim_nanoseconds(value: Any) -> Any:
    if isinstance(value, str):
        return _EXTRA_FRACTION.sub(r"\1", value)
    return value


# Twitch timestamps carry nanoseconds; datetime stops at microseconds.
TwitchTimestamp = Annotated[datetime, BeforeValidator(_trim_nanoseconds)]


class TwitchConfig(BaseModel):
    """Twitch integration configuration."""
    client_id: str
    client_secret: Optional[str] = None
    access_token: Optional[str] = None
    callback: str = ""
    webhook_secret: Optional[str] = None
    api_url: str = "https://api.twitch.tv/helix/"
    auth_url: str = "https://id.twitch.tv/oauth2/token"
    timeout: float = 30.0

    @property
    def signing_secret(self) -> str:
        """Secret used to sign webhook deliveries; falls back to the client secret."""
        return self.webhook_secret or self.client_secret or ""


class EventType(str, Enum):
    """Supported EventSub subscription types."""
    CHANNEL_POINTS_REDEMPTION_ADD = "channel.channel_points_custom_reward_redemption.add"
    CHANNEL_FOLLOW = "channel.follow"
    CHANNEL_SUBSCRIBE = "channel.subscribe"
    CHANNEL_CHAT_MESSAGE = "channel.chat.message"


class MessageType(str, Enum):
    """Values of the twitch-eventsub-message-type header."""
    NOTIFICATION = "notification"
    VERIFICATION = "webhook_callback_verification"
    REVOCATION = "revocation"


class SubscriptionFilter(str, Enum):
    """Filters accepted when listing subscriptions."""
    STATUS = "status"
    TYPE = "type"


class EventSubModel(BaseModel):
    """Base for payloads received from Twitch; unknown fields are kept."""

    class Config:
        extra = "allow"


# Conditions

class ChannelPointsRedemptionAddCondition(EventSubModel):
    broadcaster_user_id: str
    reward_id: Optional[str] = None


class ChannelFollowCondition(EventSubModel):
    broadcaster_user_id: str
    moderator_user_id: str


class ChannelSubscribeCondition(EventSubModel):
    broadcaster_user_id: str


class ChannelChatMessageCondition(EventSubModel):
    broadcaster_user_id: str
    user_id: str


# Event payloads

class Reward(EventSubModel):
    """Custom reward attached to a redemption."""
    id: str
    title: str
    cost: int
    prompt: str


class ChannelPointsRedemptionAddEvent(EventSubModel):
    id: str
    broadcaster_user_id: str
    broadcaster_user_login: str
    broadcaster_user_name: str
    user_id: str
    user_login: str
    user_name: str
    user_input: str
    status: str
    reward: Reward
    redeemed_at: TwitchTimestamp


class ChannelFollowEvent(EventSubModel):
    user_id: str
    user_login: str
    user_name: str
    broadcaster_user_id: str
    broadcaster_user_login: str
    broadcaster_user_name: str
    followed_at: TwitchTimestamp


class ChannelSubscribeEvent(EventSubModel):
    user_id: str
    user_login: str
    user_name: str
    broadcaster_user_id: str
    broadcaster_user_login: str
    broadcaster_user_name: str
    tier: str
    is_gift: bool


class Cheermote(EventSubModel):
    prefix: str
    bits: int
    tier: int


class Emote(EventSubModel):
    id: str
    emote_set_id: str
    owner_id: Optional[str] = None
    format: List[str] = []


class Mention(EventSubModel):
    user_id: str
    user_name: str
    user_login: str


class MessageFragment(EventSubModel):
    """A text, emote, cheermote or mention piece of a chat message."""
    type: str
    text: str
    cheermote: Optional[Cheermote] = None
    emote: Optional[Emote] = None
    mention: Optional[Mention] = None


class ChatMessage(EventSubModel):
    text: str
    fragments: List[MessageFragment] = []


class Badge(EventSubModel):
    set_id: str
    id: str
    info: str


class Cheer(EventSubModel):
    bits: int


class ChatMessageEvent(EventSubModel):
    broadcaster_user_id: str
    broadcaster_user_login: str
    broadcaster_user_name: str
    chatter_user_id: str
    chatter_user_login: str
    chatter_user_name: str
    message_id: str
    message: ChatMessage
    color: str
    badges: List[Badge] = []
    message_type: str
    cheer: Optional[Cheer] = None
    # Reply threads carry several parent/thread fields Twitch may extend.
    reply: Optional[Dict[str, Any]] = None
    channel_points_custom_reward_id: Optional[str] = None
    source_broadcaster_user_id: Optional[str] = None
    source_broadcaster_user_login: Optional[str] = None
    source_broadcaster_user_name: Optional[str] = None
    source_message_id: Optional[str] = None
    source_badges: Optional[List[Badge]] = None


EVENT_SCHEMAS: Dict[EventType, Tuple[Type[EventSubModel], Type[EventSubModel]]] = {
    EventType.CHANNEL_POINTS_REDEMPTION_ADD: (ChannelPointsRedemptionAddCondition, ChannelPointsRedemptionAddEvent),
    EventType.CHANNEL_FOLLOW: (ChannelFollowCondition, ChannelFollowEvent),
    EventType.CHANNEL_SUBSCRIBE: (ChannelSubscribeCondition, ChannelSubscribeEvent),
    EventType.CHANNEL_CHAT_MESSAGE: (ChannelChatMessageCondition, ChatMessageEvent),
}

_missing_schemas = set(EventType) - set(EVENT_SCHEMAS)
if _missing_schemas:
    raise RuntimeError(f"Event types without a schema: {sorted(t.value for t in _missing_schemas)}")


def condition_model(event_type: Union[EventType, str]) -> Type[EventSubModel]:
    """Return the condition model for an event type."""
    return EVENT_SCHEMAS[EventType(event_type)][0]


def event_model(event_type: Union[EventType, str]) -> Type[EventSubModel]:
    """Return the event payload model for an event type."""
    return EVENT_SCHEMAS[EventType(event_type)][1]


def known_event_type(value: str) -> Optional[EventType]:
    """Return the EventType for a raw type string, or None if unsupported."""
    try:
        return EventType(value)
    except ValueError:
        return None


# Subscriptions

class WebhookTransport(BaseModel):
    """Delivery descriptor for webhook subscriptions."""
    method: str = "webhook"
    callback: str
    # Twitch never echoes the secret back, so it is optional on responses.
    secret: Optional[str] = None


class SubscriptionRequest(BaseModel):
    """Body of a create-subscription request."""
    version: str = "1"
    condition: Dict[str, Any]
    transport: WebhookTransport
    type: str


class Subscription(EventSubModel):
    """A subscription record as reported by Twitch."""
    id: Optional[str] = None
    status: Optional[str] = None
    type: str
    version: Optional[str] = None
    condition: Dict[str, Any] = Field(default_factory=dict)
    transport: Optional[WebhookTransport] = None
    created_at: Optional[TwitchTimestamp] = None
    cost: Optional[int] = None

    @property
    def event_type(self) -> Optional[EventType]:
        return known_event_type(self.type)

    @classmethod
    def from_snapshot(cls, data: Any) -> "Subscription":
        """
        Build the subscription snapshot carried by a notification.

        Only `type` is required. Any other top-level field that fails
        validation keeps its raw JSON value.

        Raises:
            ValidationError: if data is not an object or has no string type
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            invalid = {error["loc"][0] for error in e.errors() if error["loc"]}
            if not isinstance(data, dict) or not invalid or "type" in invalid:
                raise

        valid = cls.model_validate({key: value for key, value in data.items() if key not in invalid})
        logger.warning(f"Subscription fields {sorted(invalid)} do not match their schema, keeping raw JSON")
        return cls.model_construct(**{**dict(valid), **{key: data[key] for key in invalid}})


class NotificationEnvelope(BaseModel):
    """Body of a notification delivery: the subscription snapshot and the event."""
    subscription: Subscription
    event: Union[Dict[str, Any], EventSubModel] = Field(default_factory=dict)

    @property
    def event_type(self) -> str:
        return self.subscription.type

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "NotificationEnvelope":
        """
        Build an envelope from a decoded notification body.

        The event is validated against the model registered for the
        subscription type. Unsupported types, and events that do not fit
        their model, are kept as the raw JSON object.

        Raises:
            ValidationError: if the body has no usable subscription
        """
        if not isinstance(data, dict):
            data = {}
        subscription = Subscription.from_snapshot(data.get("subscription"))
        raw_event = data.get("event") or {}

        event: Union[Dict[str, Any], EventSubModel] = raw_event
        event_type = subscription.event_type
        if event_type is not None and isinstance(raw_event, dict):
            try:
                event = event_model(event_type).model_validate(raw_event)
            except ValidationError as e:
                logger.warning(f"Event payload for {event_type.value} does not match its schema, keeping raw JSON: {e}")

        return cls(subscription=subscription, event=event)


class SubscriptionList(BaseModel):
    """Response of the list-subscriptions call."""
    data: List[Subscription] = []
    total: int = 0
    total_cost: int = 0
    max_total_cost: int = 0
    pagination: Dict[str, Any] = Field(default_factory=dict)


class TwitchAuthResponse(BaseModel):
    """OAuth client-credentials token response."""
    access_token: str
    expires_in: int
    token_type: str


class WebhookResult(BaseModel):
    """HTTP response the webhook endpoint should send back to Twitch."""
    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None
