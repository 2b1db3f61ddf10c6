"""Conversation entities module."""
from .conversation import DEFAULT_TITLE, Conversation
from .message import Message, MessageRole

__all__ = ["DEFAULT_TITLE", "Conversation", "Message", "MessageRole"]
