"""
Custom exception classes for the application.
"""

from typing import Any, Dict, Optional


class EventSubRelayException(Exception):
    """Base exception class for the EventSub relay."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(EventSubRelayException):
    """Exception raised for validation errors."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        self.field = field
        super().__init__(message, error_code="VALIDATION_ERROR", **kwargs)


class ConfigurationError(EventSubRelayException):
    """Exception raised when required configuration is missing."""

    def __init__(self, message: str = "Invalid configuration", **kwargs):
        super().__init__(message, error_code="CONFIGURATION_ERROR", **kwargs)


class ExternalServiceError(EventSubRelayException):
    """Exception raised for external service errors."""

    def __init__(
        self,
        message: str = "External service error",
        service_name: Optional[str] = None,
        **kwargs
    ):
        self.service_name = service_name
        super().__init__(message, error_code="EXTERNAL_SERVICE_ERROR", **kwargs)
