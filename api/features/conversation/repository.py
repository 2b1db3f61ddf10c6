"""Repository for conversation persistence operations.

Queries only flush; the service decides where a transaction ends.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.entities import DEFAULT_TITLE, Conversation, Message
from api.shared.utils import generate_id, utc_now


class ConversationRepository:
    """Data access for conversations and their messages."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_conversations(self, space: int) -> List[Conversation]:
        stmt = (
            select(Conversation)
            .where(Conversation.space == space)
            .order_by(Conversation.updated_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        # Refresh rows already in the session; another session may have changed them.
        stmt = (
            select(Conversation)
            .where(Conversation.id == conversation_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_conversation(self, *, space: int, title: str) -> Conversation:
        now = utc_now()
        conversation = Conversation(
            id=generate_id(),
            space=space,
            title=title,
            created_at=now,
            updated_at=now,
        )
        self.session.add(conversation)
        await self.session.flush()
        return conversation

    async def list_messages(self, conversation_id: str) -> List[Message]:
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def insert_message(
        self, *, conversation_id: str, role: str, text: str
    ) -> Message:
        message = Message(
            id=generate_id(),
            conversation_id=conversation_id,
            role=role,
            text=text,
            created_at=utc_now(),
        )
        self.session.add(message)
        await self.session.flush()
        return message

    async def touch_conversation(self, conversation_id: str, at: datetime) -> None:
        """Set ``updated_at`` for recency ordering."""
        stmt = (
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(updated_at=at)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)

    async def set_title(self, conversation_id: str, title: str) -> bool:
        """Replace the default title. False when a title was already set."""
        stmt = (
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .where(Conversation.title == DEFAULT_TITLE)
            .values(title=title)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def delete_messages(self, conversation_id: str) -> int:
        stmt = delete(Message).where(Message.conversation_id == conversation_id)
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete_conversation(self, conversation_id: str) -> bool:
        stmt = delete(Conversation).where(Conversation.id == conversation_id)
        result = await self.session.execute(stmt)
        return result.rowcount > 0
