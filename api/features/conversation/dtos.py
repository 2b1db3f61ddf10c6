"""DTOs for the Conversation feature."""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from api.features.conversation.entities import DEFAULT_TITLE
from api.shared.dtos import BaseDTO


class CreateConversationRequest(BaseDTO):
    """Request to create a conversation."""

    space: int = Field(default=1, description="Space the conversation belongs to")
    title: Optional[str] = Field(default=None, description="Conversation title")


class DeleteConversationRequest(BaseDTO):
    """Request to delete a conversation."""

    conversation_id: Optional[str] = Field(
        default=None, alias="conversationId", description="Conversation identifier"
    )


class ConversationDTO(BaseDTO):
    """Conversation summary."""

    id: str = Field(description="Conversation identifier")
    space: int = Field(description="Space the conversation belongs to")
    title: str = Field(default=DEFAULT_TITLE, description="Conversation title")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last message timestamp")


class MessageDTO(BaseDTO):
    """Stored conversation message."""

    id: str = Field(description="Message identifier")
    conversation_id: str = Field(description="Owning conversation identifier")
    role: str = Field(description="Message role: user or assistant")
    text: str = Field(description="Message text")
    created_at: datetime = Field(description="Creation timestamp")


class ConversationResponse(BaseDTO):
    """A single conversation summary."""

    conversation: ConversationDTO = Field(description="Conversation")


class ConversationListResponse(BaseDTO):
    """Conversations of one space, most recently updated first."""

    conversations: List[ConversationDTO] = Field(description="Conversations")


class ConversationDetailResponse(BaseDTO):
    """A conversation together with its messages."""

    conversation: ConversationDTO = Field(description="Conversation")
    messages: List[MessageDTO] = Field(description="Messages in chronological order")


class DeleteConversationResponse(BaseDTO):
    """Result of a delete."""

    ok: bool = Field(default=True)
