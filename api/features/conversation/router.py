"""Router for the Conversation feature."""
from typing import Optional, Union

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.controller import ConversationController
from api.features.conversation.dtos import (
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationResponse,
    CreateConversationRequest,
    DeleteConversationRequest,
    DeleteConversationResponse,
)
from api.shared.db import get_db_session
from api.shared.dtos import HealthCheckResponse
from api.shared.response import ResponseModel
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.get("/health", response_model=ResponseModel[HealthCheckResponse])
async def health_check():
    return ResponseModel.success(
        data=HealthCheckResponse(status="healthy", dependencies={"database": "ok"}),
        message="Conversation service is healthy",
    )


@router.get(
    "/",
    response_model=ResponseModel[Union[ConversationDetailResponse, ConversationListResponse]],
)
@inject
async def list_or_get_conversations(
    conversation_id: Optional[str] = Query(None, alias="id", description="Conversation id"),
    space: int = Query(1, description="Space to list"),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """With ``id`` return one conversation and its messages, else list a space."""
    if conversation_id:
        detail = await controller.get_conversation(
            conversation_id=conversation_id, db_session=db_session
        )
        return ResponseModel.success(data=detail, message="Conversation fetched")
    result = await controller.list_conversations(space=space, db_session=db_session)
    return ResponseModel.success(data=result, message="Conversations listed")


@router.post("/", response_model=ResponseModel[ConversationResponse])
@inject
async def create_conversation(
    request: CreateConversationRequest,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    result = await controller.create_conversation(
        space=request.space, title=request.title, db_session=db_session
    )
    return ResponseModel.success(data=result, message="Conversation created")


@router.delete("/", response_model=ResponseModel[DeleteConversationResponse])
@inject
async def delete_conversation(
    request: Optional[DeleteConversationRequest] = Body(default=None),
    conversation_id: Optional[str] = Query(None, alias="id"),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Delete by body ``conversation_id`` or by ``id`` query parameter."""
    target = request.conversation_id if request and request.conversation_id else conversation_id
    result = await controller.delete_conversation(
        conversation_id=target, db_session=db_session
    )
    return ResponseModel.success(data=result, message="Conversation deleted")


@router.get("/{conversation_id}", response_model=ResponseModel[ConversationDetailResponse])
@inject
async def get_conversation(
    conversation_id: str,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    detail = await controller.get_conversation(
        conversation_id=conversation_id, db_session=db_session
    )
    return ResponseModel.success(data=detail, message="Conversation fetched")


@router.delete("/{conversation_id}", response_model=ResponseModel[DeleteConversationResponse])
@inject
async def delete_conversation_by_id(
    conversation_id: str,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    result = await controller.delete_conversation(
        conversation_id=conversation_id, db_session=db_session
    )
    return ResponseModel.success(data=result, message="Conversation deleted")
