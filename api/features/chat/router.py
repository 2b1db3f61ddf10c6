"""Router for the Chat feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.chat.controller import ChatController
from api.features.chat.dtos import TurnRequest, TurnResponse
from api.shared.db import get_db_session
from api.shared.dtos import HealthCheckResponse
from api.shared.response import ResponseModel
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.get("/health", response_model=ResponseModel[HealthCheckResponse])
async def health_check():
    """Health check endpoint for chat service."""
    return ResponseModel.success(
        data=HealthCheckResponse(
            status="healthy", dependencies={"llm": "ok", "database": "ok"}
        ),
        message="Chat service is healthy",
    )


@router.post("/turn", response_model=ResponseModel[TurnResponse])
@inject
async def submit_turn(
    request: TurnRequest,
    controller: ChatController = Depends(
        Provide[DependencyContainer.controllers.chat_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Send one user turn and return the assistant's reply."""
    result = await controller.submit_turn(request, db_session=db_session)
    return ResponseModel.success(data=result, message="Reply generated")
