"""Exceptions for the Chat feature."""
from typing import Any, Dict, Optional

from api.shared.exceptions import ChatAppException, ExtractionError


class ChatException(ChatAppException):
    """Base exception for turn handling."""

    pass


class EmptyTurnError(ChatException):
    """Raised when a turn carries no text, images or files."""

    status_code = 400

    def __init__(self):
        super().__init__("A text message, images or files are required", "EMPTY_TURN")


class UnsupportedAttachmentError(ChatException):
    """Raised when a document is neither PDF nor DOCX."""

    status_code = 400

    def __init__(self, filename: str, content_type: str):
        message = f"Unsupported file type for {filename}. Attach PDF or DOCX."
        super().__init__(
            message,
            "UNSUPPORTED_ATTACHMENT",
            {"filename": filename, "content_type": content_type},
        )


class EmptyContentError(ChatException):
    """Raised when nothing usable is left to send for the current turn."""

    status_code = 400

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("No usable message content", "EMPTY_CONTENT", details)


class DocumentExtractionError(ExtractionError):
    """Raised when a DOCX document cannot be read."""

    def __init__(self, filename: str, reason: str):
        super().__init__(
            f"Could not read file {filename}. Try PDF.",
            "DOCUMENT_EXTRACTION_ERROR",
            {"filename": filename, "reason": reason},
        )


class DocumentEmptyError(ExtractionError):
    """Raised when a DOCX document has no extractable text."""

    def __init__(self, filename: str):
        super().__init__(
            f"File {filename} is empty or has no text",
            "DOCUMENT_EMPTY",
            {"filename": filename},
        )
