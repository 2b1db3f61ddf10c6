"""Exceptions for the Conversation feature."""
from typing import List

from api.shared.exceptions import NotFoundError, ValidationError


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation id does not exist."""

    def __init__(self, conversation_id: str):
        super().__init__("Conversation", conversation_id, "CONVERSATION_NOT_FOUND")


class InvalidSpaceError(ValidationError):
    """Raised when a space is not one of the configured values."""

    def __init__(self, space: int, allowed: List[int]):
        super().__init__(
            f"Invalid space {space}; expected one of {allowed}",
            {"space": space, "allowed": allowed},
        )
