"""Turn handling: persist the user message, call the model once, persist the reply.

The user message is stored before the completion call, so a failed call still
leaves it in the history. Nothing is retried.
"""
from __future__ import annotations

import time
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.chat.builder import RequestBuilder
from api.features.chat.dtos import TurnRequest
from api.features.chat.exceptions import EmptyTurnError
from api.features.conversation.entities import Message, MessageRole
from api.features.conversation.exceptions import ConversationNotFoundError
from api.features.conversation.locks import ConversationLocks
from api.features.conversation.service import ConversationService
from api.shared.exceptions import UpstreamError, ValidationError
from infra.resources import MISSING_API_KEY_MESSAGE, CompletionResource

logger = structlog.get_logger("chat.turn")


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_output_text(response: Any) -> str:
    """Reply text from a Responses API result.

    Prefers the flat ``output_text`` field; otherwise joins every
    ``output_text`` block found in ``output[*].content``.
    """
    output_text = _field(response, "output_text")
    if output_text is not None:
        return output_text

    parts = []
    for item in _field(response, "output") or []:
        for block in _field(item, "content") or []:
            if _field(block, "type") == "output_text":
                parts.append(_field(block, "text") or "")
    return "".join(parts)


class ChatService:
    """Handles one user turn end to end."""

    def __init__(
        self,
        conversation_service: ConversationService,
        completion_client: CompletionResource,
        locks: ConversationLocks,
        request_builder: Optional[RequestBuilder] = None,
    ):
        self.conversation_service = conversation_service
        self.completion_client = completion_client
        self.locks = locks
        self.request_builder = request_builder or RequestBuilder()

    async def submit_turn(
        self, request: TurnRequest, *, db_session: AsyncSession
    ) -> tuple[str, Message]:
        """Run one turn and return the reply text and the stored assistant message."""
        if not self.completion_client.is_configured:
            raise UpstreamError("openai", MISSING_API_KEY_MESSAGE)
        conversation_id = request.conversation_id
        if not conversation_id:
            raise ValidationError("conversation_id is required")
        if not request.has_content():
            raise EmptyTurnError()

        async with self.locks.hold(conversation_id):
            # Checked under the lock: a turn may wait while the conversation is deleted.
            conversation = await self.conversation_service.get_conversation(
                conversation_id=conversation_id, db_session=db_session
            )
            if conversation is None:
                raise ConversationNotFoundError(conversation_id)

            history = await self.conversation_service.list_messages(
                conversation_id=conversation_id, db_session=db_session
            )
            user_message = await self.conversation_service.add_message(
                conversation_id=conversation_id,
                role=MessageRole.USER.value,
                text=request.text,
                db_session=db_session,
            )
            if request.text:
                await self.conversation_service.update_title_if_default(
                    conversation_id=conversation_id,
                    text=request.text,
                    db_session=db_session,
                )
            logger.info(
                "turn.persisted",
                conversation_id=conversation_id,
                message_id=user_message.id,
                images=len(request.images),
                files=len(request.files),
            )

            messages = self.request_builder.build(
                history, request.text, request.images, request.files
            )

            start = time.time()
            try:
                response = await self.completion_client.complete(
                    [m.to_payload() for m in messages]
                )
            except Exception as e:
                logger.error(
                    "turn.upstream_failed",
                    conversation_id=conversation_id,
                    error=str(e),
                )
                raise UpstreamError("openai", str(e)) from e

            output = extract_output_text(response)
            assistant_message = await self.conversation_service.add_message(
                conversation_id=conversation_id,
                role=MessageRole.ASSISTANT.value,
                text=output,
                db_session=db_session,
            )
            logger.info(
                "turn.completed",
                conversation_id=conversation_id,
                history=len(history),
                output_chars=len(output),
                processing_time_ms=(time.time() - start) * 1000,
            )
        return output, assistant_message
