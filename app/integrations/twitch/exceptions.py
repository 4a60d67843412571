"""
Twitch-specific exception classes.
"""

from typing import Any, Dict, Optional

from app.utils.exceptions import ConfigurationError, ExternalServiceError, ValidationError


class TwitchError(ExternalServiceError):
    """Error reported by the Twitch API."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[Dict[str, Any]] = None):
        super().__init__(message, service_name="twitch", details={"status_code": status_code})
        self.status_code = status_code
        self.response = response


class TwitchConfigurationError(ConfigurationError):
    """Error raised when the Twitch integration is missing required settings."""

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        super().__init__(message, details={"setting": setting}, **kwargs)
        self.setting = setting


class TwitchConditionError(ValidationError):
    """Error raised when a subscription condition does not match its event type."""

    def __init__(self, message: str, event_type: Optional[str] = None, **kwargs):
        super().__init__(message, field="condition", details={"event_type": event_type}, **kwargs)
        self.event_type = event_type


def twitch_error_from_response(status_code: int, response_data: Any) -> TwitchError:
    """
    Create a TwitchError from an HTTP error response.

    Helix errors look like {"error": "Bad Request", "status": 400, "message": "..."}.
    """
    error_message = "Unknown Twitch error"
    if isinstance(response_data, dict):
        if response_data.get("message"):
            error_message = response_data["message"]
        elif response_data.get("error"):
            error_message = response_data["error"]
    elif response_data:
        error_message = str(response_data)

    return TwitchError(error_message, status_code, response_data if isinstance(response_data, dict) else None)
