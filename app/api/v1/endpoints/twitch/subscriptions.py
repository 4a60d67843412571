"""
Twitch EventSub subscription management endpoints.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from app.core.dependencies import get_twitch_client
from app.integrations.twitch.client import TwitchClient
from app.integrations.twitch.exceptions import TwitchError
from app.integrations.twitch.models import EventType, SubscriptionFilter

router = APIRouter(prefix="/twitch", tags=["twitch-subscriptions"])


class CreateSubscriptionRequest(BaseModel):
    """Create subscription request model."""
    type: EventType = Field(..., description="EventSub subscription type")
    condition: Dict[str, Any] = Field(..., description="Condition matching the subscription type")
    user_token: Optional[str] = Field(None, description="User access token to use instead of the app token")


class AuthTokenResponse(BaseModel):
    """App token acquisition result."""
    authenticated: bool


@router.get("/subscriptions")
async def list_subscriptions(
    status: Optional[str] = Query(None, description="Filter by subscription status"),
    type: Optional[str] = Query(None, description="Filter by subscription type"),
    client: TwitchClient = Depends(get_twitch_client)
):
    """
    List EventSub subscriptions.

    Only one filter is applied; status takes precedence over type.
    """
    if status:
        data = await client.get_subscriptions(SubscriptionFilter.STATUS, status)
    elif type:
        data = await client.get_subscriptions(SubscriptionFilter.TYPE, type)
    else:
        data = await client.get_subscriptions()

    if data is None:
        raise TwitchError("Twitch API is unreachable")
    return data


@router.post("/subscriptions", status_code=201)
async def create_subscription(
    request: CreateSubscriptionRequest,
    client: TwitchClient = Depends(get_twitch_client)
):
    """Create a webhook subscription pointing at the configured callback."""
    data = await client.subscribe(request.type, request.condition, user_token=request.user_token)
    if data is None:
        raise HTTPException(status_code=502, detail="Failed to create subscription")
    return data


@router.delete("/subscriptions/{subscription_id}", status_code=204)
async def delete_subscription(
    subscription_id: str,
    client: TwitchClient = Depends(get_twitch_client)
):
    """Delete a subscription. Twitch failures are logged, not reported."""
    await client.unsubscribe(subscription_id)
    return Response(status_code=204)


@router.post("/auth/token", response_model=AuthTokenResponse)
async def acquire_app_token(client: TwitchClient = Depends(get_twitch_client)):
    """Check that an app access token can be obtained with the configured credentials."""
    token = await client.auth()
    return AuthTokenResponse(authenticated=token is not None)
