from __future__ import annotations

import structlog
from dependency_injector import containers, providers

from core.settings import SETTINGS
from infra.resources import CompletionResource, DatabaseResource


logger = structlog.get_logger("chat")


class InfrastructureContainer(containers.DeclarativeContainer):
    settings = providers.Object(SETTINGS)
    logger = providers.Object(logger)

    # Database
    database = providers.Resource(
        DatabaseResource,
        database_url=SETTINGS.DATABASE.DATABASE_URL,
        echo=SETTINGS.DATABASE.DATABASE_ECHO,
    )

    # Completion provider
    completion_client = providers.Resource(
        CompletionResource,
        api_key=SETTINGS.OPENAI.OPENAI_API_KEY.get_secret_value(),
        model=SETTINGS.OPENAI.OPENAI_MODEL,
        base_url=SETTINGS.OPENAI.OPENAI_BASE_URL,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    # Shared across requests: turns and deletes on one conversation queue up
    conversation_locks = providers.Singleton(
        "api.features.conversation.locks.ConversationLocks",
    )

    # Services
    conversation_service = providers.Factory(
        "api.features.conversation.service.ConversationService",
    )

    chat_service = providers.Factory(
        "api.features.chat.service.ChatService",
        conversation_service=conversation_service,
        completion_client=infrastructure.completion_client,
        locks=conversation_locks,
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    services = providers.DependenciesContainer()

    # Controllers
    conversation_controller = providers.Factory(
        "api.features.conversation.controller.ConversationController",
        conversation_service=services.conversation_service,
        spaces=SETTINGS.CHAT.SPACES,
        locks=services.conversation_locks,
    )

    chat_controller = providers.Factory(
        "api.features.chat.controller.ChatController",
        chat_service=services.chat_service,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.main",
            "api.shared.db",
            "api.features.conversation.router",
            "api.features.chat.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    controllers = providers.Container(ControllerContainer, services=services)
