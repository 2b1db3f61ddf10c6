from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=False)


class DatabaseSettings(CustomSettings):
    """Storage configuration.

    Any SQLAlchemy async URL works, e.g. ``postgresql+asyncpg://...``.
    The default is a local SQLite file.
    """

    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./data/chat.db")
    DATABASE_ECHO: bool = Field(default=False)


class OpenAISettings(CustomSettings):
    OPENAI_API_KEY: SecretStr = Field(default="")
    OPENAI_MODEL: str = Field(default="gpt-5.2")
    OPENAI_BASE_URL: Optional[str] = Field(default=None)


class ChatSettings(CustomSettings):
    """Conversation spaces and attachment limits.

    Set via env vars:
    - SPACES (JSON list, e.g. ``[1, 2, 3]``)
    - MAX_IMAGES
    - MAX_DOCUMENTS
    - MAX_DOCUMENT_SIZE_MB
    """

    SPACES: List[int] = Field(default_factory=lambda: [1, 2, 3])
    MAX_IMAGES: int = Field(default=6)
    MAX_DOCUMENTS: int = Field(default=3)
    MAX_DOCUMENT_SIZE_MB: int = Field(default=20)


class UiSettings(CustomSettings):
    """Configuration for Streamlit UI to reach API endpoints.

    Set via env vars:
    - API_BASE_URL
    - ENDPOINT_CONVERSATIONS
    - ENDPOINT_TURN
    """

    API_BASE_URL: str = Field(default="http://localhost:8000")
    ENDPOINT_CONVERSATIONS: str = Field(default="/api/v1/conversations/")
    ENDPOINT_TURN: str = Field(default="/api/v1/chat/turn")
    REQUEST_TIMEOUT: float = Field(default=120.0)


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: DatabaseSettings = Field(default_factory=DatabaseSettings)
    OPENAI: OpenAISettings = Field(default_factory=OpenAISettings)
    CHAT: ChatSettings = Field(default_factory=ChatSettings)
    UI: UiSettings = Field(default_factory=UiSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()


SETTINGS = get_settings()
