"""
Twitch Helix API client for managing EventSub subscriptions.
"""

from typing import Any, Dict, Optional, Union

import httpx
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from .exceptions import TwitchConditionError, TwitchConfigurationError, twitch_error_from_response
from .models import (
    EventSubModel,
    EventType,
    SubscriptionFilter,
    SubscriptionRequest,
    TwitchAuthResponse,
    TwitchConfig,
    WebhookTransport,
    condition_model,
)

SUBSCRIPTIONS_ENDPOINT = "eventsub/subscriptions"
INVALID_TOKEN = "INVALID_TOKEN"


class TwitchClient:
    """
    Client for the EventSub subscription endpoints of the Helix API.

    Remote failures are logged and never raised: subscribe returns None,
    get_subscriptions returns the error body, unsubscribe returns nothing.
    """

    def __init__(self, config: Optional[TwitchConfig] = None):
        """Initialize the Twitch client."""
        self.config = config or TwitchConfig(
            client_id=settings.TWITCH_CLIENT_ID,
            client_secret=settings.TWITCH_CLIENT_SECRET or None,
            access_token=settings.TWITCH_ACCESS_TOKEN or None,
            callback=settings.TWITCH_WEBHOOK_CALLBACK,
            webhook_secret=settings.TWITCH_WEBHOOK_SECRET or None,
            api_url=settings.TWITCH_API_URL,
            auth_url=settings.TWITCH_AUTH_URL,
            timeout=settings.TWITCH_REQUEST_TIMEOUT
        )

        if not self.config.client_id:
            raise TwitchConfigurationError("Client ID is required", setting="TWITCH_CLIENT_ID")

        self.client_id = self.config.client_id
        self.token = self.config.access_token or INVALID_TOKEN
        self.callback = self.config.callback
        self.secret = self.config.signing_secret

        self.client = httpx.AsyncClient(
            base_url=self.config.api_url,
            headers={"Content-Type": "application/json"},
            timeout=self.config.timeout
        )

        logger.info(f"Initialized Twitch client for client id: {self.client_id}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    def _auth_headers(self, token: Optional[str] = None) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token or self.token}",
            "Client-Id": self.client_id,
        }

    async def _request(self, method: str, url: str, **kwargs) -> Optional[httpx.Response]:
        """Send a request, logging and swallowing transport errors."""
        try:
            logger.debug(f"Making {method} request to {url}")
            return await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout during Twitch request: {e}")
        except httpx.RequestError as e:
            logger.error(f"Network error during Twitch request: {e}")
        return None

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {"response": response.text} if response.text else None

    def _log_failure(self, action: str, response: httpx.Response, data: Any):
        error = twitch_error_from_response(response.status_code, data)
        logger.error(f"Failed to {action}: {response.status_code} - {error.message}")
        if data is not None:
            logger.error(f"Twitch response: {data}")

    async def auth(self) -> Optional[str]:
        """
        Obtain an app access token with the client credentials grant.

        On success the token replaces the client's working token.
        """
        response = await self._request(
            "POST",
            self.config.auth_url,
            params={
                "client_id": self.client_id,
                "client_secret": self.config.client_secret or "",
                "grant_type": "client_credentials",
            }
        )
        if response is None:
            return None

        data = self._json(response)
        if not response.is_success:
            self._log_failure("authenticate", response, data)
            return None

        try:
            auth_response = TwitchAuthResponse.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unexpected authentication response: {e}")
            return None

        self.token = auth_response.access_token
        logger.info(f"Obtained app access token, expires in {auth_response.expires_in}s")
        return self.token

    async def subscribe(
        self,
        event: Union[EventType, str],
        condition: Union[EventSubModel, Dict[str, Any]],
        user_token: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Create a webhook subscription for an event type.

        Args:
            event: Event type to subscribe to
            condition: Condition model or dict matching the event's condition schema
            user_token: Token to use instead of the client's app token

        Returns:
            Parsed Twitch response, or None on failure

        Raises:
            TwitchConditionError: if the event type is unsupported or the
                condition does not match its schema
        """
        try:
            event_type = EventType(event)
        except ValueError:
            raise TwitchConditionError(f"Unsupported event type: {event}", event_type=str(event))

        if isinstance(condition, EventSubModel):
            condition = condition.model_dump(exclude_none=True)
        try:
            condition_model(event_type).model_validate(condition)
        except ValidationError as e:
            raise TwitchConditionError(
                f"Invalid condition for {event_type.value}: {e}",
                event_type=event_type.value
            )

        subscription = SubscriptionRequest(
            condition=condition,
            transport=WebhookTransport(callback=self.callback, secret=self.secret),
            type=event_type.value
        )

        response = await self._request(
            "POST",
            SUBSCRIPTIONS_ENDPOINT,
            headers=self._auth_headers(user_token),
            json=subscription.model_dump()
        )
        if response is None:
            return None

        data = self._json(response)
        if not response.is_success:
            self._log_failure(f"subscribe to {event_type.value}", response, data)
            return None

        logger.info(f"Subscribed to {event_type.value}")
        return data

    async def unsubscribe(self, subscription_id: str) -> None:
        """Delete a subscription by id."""
        response = await self._request(
            "DELETE",
            SUBSCRIPTIONS_ENDPOINT,
            headers=self._auth_headers(),
            params={"id": subscription_id}
        )
        if response is None:
            return

        if not response.is_success:
            self._log_failure(f"unsubscribe from {subscription_id}", response, self._json(response))
            return

        logger.info(f"Unsubscribed from {subscription_id}")

    async def get_subscriptions(
        self,
        filter: Optional[Union[SubscriptionFilter, str]] = None,
        value: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        List subscriptions, optionally filtered by status or type.

        Returns the parsed body; on failure this is Twitch's error body.
        """
        params = {}
        if filter in (SubscriptionFilter.STATUS, SubscriptionFilter.TYPE, "status", "type") and value:
            params[SubscriptionFilter(filter).value] = value

        response = await self._request(
            "GET",
            SUBSCRIPTIONS_ENDPOINT,
            headers=self._auth_headers(),
            params=params
        )
        if response is None:
            return None

        data = self._json(response)
        if not response.is_success:
            self._log_failure("get subscriptions", response, data)

        return data
