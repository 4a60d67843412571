"""
Twitch API endpoints package.
"""

from .subscriptions import router as subscriptions_router
from .webhooks import router as webhooks_router

__all__ = ["subscriptions_router", "webhooks_router"]
