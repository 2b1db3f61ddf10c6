"""Shared exceptions for the chat API."""
from typing import Any, Dict, Optional


class ChatAppException(Exception):
    """Base exception for the chat API.

    ``status_code`` is the HTTP status the API responds with when the
    exception escapes a request handler.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ChatAppException):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundError(ChatAppException):
    """Raised when a resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str, error_code: str = "NOT_FOUND"):
        message = f"{resource} '{identifier}' not found"
        super().__init__(message, error_code, {"resource": resource, "identifier": identifier})


class ExtractionError(ChatAppException):
    """Raised when an attached document cannot be turned into text."""

    status_code = 400

    def __init__(
        self,
        message: str,
        error_code: str = "EXTRACTION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)


class UpstreamError(ChatAppException):
    """Raised when the completion provider call fails.

    The provider's message is passed through unchanged.
    """

    status_code = 500

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        error_details = {"service": service}
        if details:
            error_details.update(details)
        super().__init__(message, "UPSTREAM_ERROR", error_details)
