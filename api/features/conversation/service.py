"""Conversation service: transactional persistence operations.

Every public method is one transaction. Lookups of unknown ids return
``None``/empty results; translating absence into a 404 is the caller's job.
"""
from __future__ import annotations

from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.entities import DEFAULT_TITLE, Conversation, Message
from api.features.conversation.repository import ConversationRepository
from api.shared.utils import collapse_whitespace, truncate_text

TITLE_MAX_LENGTH = 60

logger = structlog.get_logger("chat.conversation")


def normalize_title(text: str) -> str:
    """Derive a conversation title from the first user message."""
    cleaned = collapse_whitespace(text)
    if not cleaned:
        return DEFAULT_TITLE
    return truncate_text(cleaned, TITLE_MAX_LENGTH)


class ConversationService:
    """Conversation and message persistence."""

    async def list_conversations(
        self, *, space: int, db_session: AsyncSession
    ) -> List[Conversation]:
        """All conversations of a space, most recently updated first."""
        return await ConversationRepository(db_session).list_conversations(space)

    async def get_conversation(
        self, *, conversation_id: str, db_session: AsyncSession
    ) -> Optional[Conversation]:
        return await ConversationRepository(db_session).get_conversation(conversation_id)

    async def create_conversation(
        self,
        *,
        space: int,
        title: str = DEFAULT_TITLE,
        db_session: AsyncSession,
    ) -> Conversation:
        repository = ConversationRepository(db_session)
        try:
            conversation = await repository.create_conversation(space=space, title=title)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        logger.info("conversation.created", conversation_id=conversation.id, space=space)
        return conversation

    async def list_messages(
        self, *, conversation_id: str, db_session: AsyncSession
    ) -> List[Message]:
        """Messages of a conversation in chronological order."""
        return await ConversationRepository(db_session).list_messages(conversation_id)

    async def add_message(
        self,
        *,
        conversation_id: str,
        role: str,
        text: str,
        db_session: AsyncSession,
    ) -> Message:
        """Insert a message and bump the conversation's ``updated_at``.

        Both writes are committed together or not at all.
        """
        repository = ConversationRepository(db_session)
        try:
            message = await repository.insert_message(
                conversation_id=conversation_id, role=role, text=text
            )
            await repository.touch_conversation(conversation_id, message.created_at)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        return message

    async def update_title_if_default(
        self, *, conversation_id: str, text: str, db_session: AsyncSession
    ) -> bool:
        """Replace the default title with one derived from ``text``.

        No-op when the conversation is gone or already has a real title. The
        check is part of the UPDATE, so concurrent sessions cannot both win.
        """
        title = normalize_title(text)
        if title == DEFAULT_TITLE:
            return False
        repository = ConversationRepository(db_session)
        try:
            updated = await repository.set_title(conversation_id, title)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        if not updated:
            return False
        logger.info("conversation.titled", conversation_id=conversation_id, title=title)
        return True

    async def delete_conversation(
        self, *, conversation_id: str, db_session: AsyncSession
    ) -> bool:
        """Delete the messages, then the conversation. True iff it existed."""
        repository = ConversationRepository(db_session)
        try:
            await repository.delete_messages(conversation_id)
            removed = await repository.delete_conversation(conversation_id)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        if removed:
            logger.info("conversation.deleted", conversation_id=conversation_id)
        return removed
