"""
Pytest configuration and shared fixtures for Twitch EventSub Relay testing.
"""

from typing import Any, Callable, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from app.integrations.twitch.models import TwitchConfig
from app.integrations.twitch.registry import HandlerRegistry
from app.integrations.twitch.signature import build_signature
from app.integrations.twitch.webhooks import WebhookDispatcher
from app.main import create_app


TEST_SECRET = "s3cre7-for-tests"
TEST_MESSAGE_ID = "befa7b53-d79d-478f-86b9-120f112b044e"
TEST_TIMESTAMP = "2023-07-19T10:11:12.634234626Z"


@pytest.fixture
def webhook_secret() -> str:
    """Secret shared with Twitch for signing deliveries."""
    return TEST_SECRET


@pytest.fixture
def signed_headers(webhook_secret) -> Callable[..., Dict[str, str]]:
    """Build EventSub headers with a valid signature for a raw body."""
    def _build(
        body: str,
        message_type: str = "notification",
        message_id: str = TEST_MESSAGE_ID,
        timestamp: str = TEST_TIMESTAMP,
        secret: Optional[str] = None,
    ) -> Dict[str, str]:
        return {
            "Twitch-Eventsub-Message-Id": message_id,
            "Twitch-Eventsub-Message-Timestamp": timestamp,
            "Twitch-Eventsub-Message-Signature": build_signature(
                secret or webhook_secret, message_id, timestamp, body
            ),
            "Twitch-Eventsub-Message-Type": message_type,
        }

    return _build


@pytest.fixture
def follow_notification() -> Dict[str, Any]:
    """Sample channel.follow notification body."""
    return {
        "subscription": {
            "id": "f1c2a387-161a-49f9-a165-0f21d7a4e1c4",
            "type": "channel.follow",
            "version": "2",
            "status": "enabled",
            "cost": 0,
            "condition": {
                "broadcaster_user_id": "1337",
                "moderator_user_id": "1337"
            },
            "transport": {
                "method": "webhook",
                "callback": "https://example.com/webhooks/callback"
            },
            "created_at": "2019-11-16T10:11:12.634234626Z"
        },
        "event": {
            "user_id": "1234",
            "user_login": "cool_user",
            "user_name": "Cool_User",
            "broadcaster_user_id": "1337",
            "broadcaster_user_login": "cooler_user",
            "broadcaster_user_name": "Cooler_User",
            "followed_at": "2020-07-15T18:16:11.17106713Z"
        }
    }


@pytest.fixture
def chat_message_notification() -> Dict[str, Any]:
    """Sample channel.chat.message notification body."""
    return {
        "subscription": {
            "id": "0b7f3361-672b-4d39-b307-dd5b576c9b27",
            "status": "enabled",
            "type": "channel.chat.message",
            "version": "1",
            "condition": {
                "broadcaster_user_id": "1971641",
                "user_id": "2914196"
            },
            "transport": {
                "method": "webhook",
                "callback": "https://example.com/webhooks/callback"
            },
            "created_at": "2023-11-06T18:11:47.492253549Z",
            "cost": 0
        },
        "event": {
            "broadcaster_user_id": "1971641",
            "broadcaster_user_login": "streamer",
            "broadcaster_user_name": "streamer",
            "chatter_user_id": "4145994",
            "chatter_user_login": "viewer32",
            "chatter_user_name": "viewer32",
            "message_id": "cc106a89-1814-919d-454c-f4f2f970aae7",
            "message": {
                "text": "Hi chat Kappa",
                "fragments": [
                    {"type": "text", "text": "Hi chat ", "cheermote": None, "emote": None, "mention": None},
                    {
                        "type": "emote",
                        "text": "Kappa",
                        "cheermote": None,
                        "emote": {"id": "25", "emote_set_id": "0", "owner_id": "0", "format": ["static"]},
                        "mention": None
                    }
                ]
            },
            "color": "#00FF7F",
            "badges": [
                {"set_id": "moderator", "id": "1", "info": ""},
                {"set_id": "subscriber", "id": "12", "info": "16"}
            ],
            "message_type": "text",
            "cheer": None,
            "reply": None,
            "channel_points_custom_reward_id": None,
            "source_broadcaster_user_id": None,
            "source_broadcaster_user_login": None,
            "source_broadcaster_user_name": None,
            "source_message_id": None,
            "source_badges": None
        }
    }


@pytest.fixture
def registry() -> HandlerRegistry:
    """Fresh handler registry for each test."""
    return HandlerRegistry()


@pytest.fixture
def dispatcher(registry, webhook_secret) -> WebhookDispatcher:
    """Webhook dispatcher bound to the test registry and secret."""
    return WebhookDispatcher(registry, secret=webhook_secret)


@pytest.fixture
def twitch_config(webhook_secret) -> TwitchConfig:
    """Twitch configuration used by client tests."""
    return TwitchConfig(
        client_id="test-client-id",
        client_secret="test-client-secret",
        access_token="test-app-token",
        callback="https://example.com/webhooks/callback",
        webhook_secret=webhook_secret
    )


@pytest.fixture
def test_app(dispatcher, registry):
    """Application wired to the test registry and dispatcher."""
    app = create_app()
    app.state.handler_registry = registry
    app.state.webhook_dispatcher = dispatcher
    return app


@pytest.fixture
def test_client(test_app):
    """Test client for the application."""
    with TestClient(test_app, raise_server_exceptions=False) as client:
        yield client


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
