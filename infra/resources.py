"""Infrastructure resources: database and completion provider.

This module is part of the infra layer and must not import from application features.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger("chat.infra")

MISSING_API_KEY_MESSAGE = "OPENAI_API_KEY is not configured"


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self.engine = None
        self.session_factory = None

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.database_url).get_backend_name() == "sqlite"

    async def init(self):
        """Initialize database connection."""
        if self.engine is not None:
            return self
        if self.is_sqlite:
            self._ensure_sqlite_directory()
            self.engine = create_async_engine(self.database_url, echo=self.echo)
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_async_engine(
                self.database_url,
                echo=self.echo,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    def _ensure_sqlite_directory(self) -> None:
        database = make_url(self.database_url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    async def create_schema(self, base: type[DeclarativeBase]) -> None:
        """Create all tables registered on ``base`` if they do not exist yet."""
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        async with self.engine.begin() as conn:
            await conn.run_sync(base.metadata.create_all)

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None


class CompletionResource:
    """OpenAI Responses API client for dependency injection.

    One ``complete`` call is one round trip: no streaming, no retries.
    """

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.client: Optional[AsyncOpenAI] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def init(self):
        """Initialize the OpenAI client."""
        if not self.api_key:
            logger.warning("OPENAI_API_KEY is not configured; turns will fail")
            return self
        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url or None,
            max_retries=0,
        )
        return self

    async def complete(self, messages: List[Dict[str, Any]]) -> Any:
        """Send the role-tagged messages and return the raw response object."""
        if self.client is None:
            raise RuntimeError(MISSING_API_KEY_MESSAGE)
        return await self.client.responses.create(model=self.model, input=messages)

    async def shutdown(self):
        """Shutdown the OpenAI client."""
        if self.client is not None:
            await self.client.close()
            self.client = None
        return self
