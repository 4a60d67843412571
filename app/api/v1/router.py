"""
Main API router for version 1.
"""

from fastapi import APIRouter

from app.api.v1.endpoints.twitch import subscriptions_router, webhooks_router

api_router = APIRouter()

api_router.include_router(webhooks_router)
api_router.include_router(subscriptions_router)
