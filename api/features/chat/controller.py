"""Controller for the Chat feature."""
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.chat.dtos import TurnRequest, TurnResponse
from api.features.chat.service import ChatService
from api.features.conversation.dtos import MessageDTO


class ChatController:
    """Controller for submitting turns."""

    def __init__(self, chat_service: ChatService):
        self.chat_service = chat_service

    async def submit_turn(
        self, request: TurnRequest, *, db_session: AsyncSession
    ) -> TurnResponse:
        output, assistant_message = await self.chat_service.submit_turn(
            request, db_session=db_session
        )
        return TurnResponse(
            output=output,
            assistant_message=MessageDTO.model_validate(assistant_message),
        )
