"""Controller for the Conversation feature."""
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.dtos import (
    ConversationDetailResponse,
    ConversationDTO,
    ConversationListResponse,
    ConversationResponse,
    DeleteConversationResponse,
    MessageDTO,
)
from api.features.conversation.entities import DEFAULT_TITLE
from api.features.conversation.exceptions import (
    ConversationNotFoundError,
    InvalidSpaceError,
)
from api.features.conversation.locks import ConversationLocks
from api.features.conversation.service import ConversationService
from api.shared.exceptions import ValidationError


class ConversationController:
    """Controller handling conversation listing, creation and deletion."""

    def __init__(
        self,
        conversation_service: ConversationService,
        spaces: Iterable[int],
        locks: Optional[ConversationLocks] = None,
    ):
        self.conversation_service = conversation_service
        self.locks = locks or ConversationLocks()
        self.spaces: List[int] = list(spaces)

    def _check_space(self, space: int) -> None:
        if space not in self.spaces:
            raise InvalidSpaceError(space, self.spaces)

    async def list_conversations(
        self, *, space: int, db_session: AsyncSession
    ) -> ConversationListResponse:
        self._check_space(space)
        items = await self.conversation_service.list_conversations(
            space=space, db_session=db_session
        )
        return ConversationListResponse(
            conversations=[ConversationDTO.model_validate(i) for i in items]
        )

    async def get_conversation(
        self, *, conversation_id: str, db_session: AsyncSession
    ) -> ConversationDetailResponse:
        conversation = await self.conversation_service.get_conversation(
            conversation_id=conversation_id, db_session=db_session
        )
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        messages = await self.conversation_service.list_messages(
            conversation_id=conversation_id, db_session=db_session
        )
        return ConversationDetailResponse(
            conversation=ConversationDTO.model_validate(conversation),
            messages=[MessageDTO.model_validate(m) for m in messages],
        )

    async def create_conversation(
        self, *, space: int, title: Optional[str], db_session: AsyncSession
    ) -> ConversationResponse:
        self._check_space(space)
        conversation = await self.conversation_service.create_conversation(
            space=space,
            title=title if title is not None else DEFAULT_TITLE,
            db_session=db_session,
        )
        return ConversationResponse(conversation=ConversationDTO.model_validate(conversation))

    async def delete_conversation(
        self, *, conversation_id: Optional[str], db_session: AsyncSession
    ) -> DeleteConversationResponse:
        if not conversation_id:
            raise ValidationError("conversation_id is required")
        # Waits for an in-flight turn on the same conversation to finish.
        async with self.locks.hold(conversation_id):
            removed = await self.conversation_service.delete_conversation(
                conversation_id=conversation_id, db_session=db_session
            )
        if not removed:
            raise ConversationNotFoundError(conversation_id)
        return DeleteConversationResponse(ok=True)
