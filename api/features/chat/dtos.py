"""DTOs for the Chat feature."""
from typing import List, Optional

from pydantic import Field, field_validator

from api.features.conversation.dtos import MessageDTO
from api.shared.dtos import BaseDTO


class AttachmentDTO(BaseDTO):
    """A document attached to a turn."""

    name: str = Field(description="Original filename")
    type: str = Field(default="", description="MIME type reported by the client")
    data: str = Field(description="Base64 payload, optionally as a data URL")
    size: Optional[int] = Field(default=None, description="Size in bytes")


class TurnRequest(BaseDTO):
    """One user turn."""

    conversation_id: Optional[str] = Field(
        default=None, alias="conversationId", description="Target conversation"
    )
    text: Optional[str] = Field(default="", description="Message text")
    images: List[str] = Field(default_factory=list, description="Images as data URLs")
    files: List[AttachmentDTO] = Field(default_factory=list, description="PDF/DOCX documents")

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> str:
        return (v or "").strip()

    def has_content(self) -> bool:
        return bool(self.text or self.images or self.files)


class TurnResponse(BaseDTO):
    """The assistant's reply to a turn."""

    output: str = Field(description="Reply text")
    assistant_message: MessageDTO = Field(description="Stored assistant message")
