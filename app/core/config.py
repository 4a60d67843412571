"""
Application configuration settings.
"""

import os
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Project settings
    PROJECT_NAME: str = "Twitch EventSub Relay"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    # CORS settings
    ALLOWED_HOSTS: str = "*"

    @property
    def allowed_hosts_list(self) -> List[str]:
        """Parse ALLOWED_HOSTS from comma-separated string to list."""
        if self.ALLOWED_HOSTS == "*":
            return ["*"]
        return [host.strip() for host in self.ALLOWED_HOSTS.split(",") if host.strip()]

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Development settings
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    TESTING: bool = os.getenv("TESTING", "false").lower() == "true"

    # Twitch settings
    TWITCH_CLIENT_ID: str = os.getenv("TWITCH_CLIENT_ID", "")
    TWITCH_CLIENT_SECRET: str = os.getenv("TWITCH_CLIENT_SECRET", "")
    TWITCH_ACCESS_TOKEN: str = os.getenv("TWITCH_ACCESS_TOKEN", "")
    TWITCH_WEBHOOK_CALLBACK: str = os.getenv("TWITCH_WEBHOOK_CALLBACK", "")
    TWITCH_WEBHOOK_SECRET: str = os.getenv("TWITCH_WEBHOOK_SECRET", "")

    # Twitch API endpoints
    TWITCH_API_URL: str = "https://api.twitch.tv/helix/"
    TWITCH_AUTH_URL: str = "https://id.twitch.tv/oauth2/token"
    TWITCH_REQUEST_TIMEOUT: float = 30.0

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra environment variables


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
