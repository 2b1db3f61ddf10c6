"""Conversation entity: a titled thread inside one space."""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity
from api.shared.utils import utc_now

# Placeholder title until the first non-empty user message arrives.
DEFAULT_TITLE = "New chat"


class Conversation(BaseEntity):
    """Conversation thread partitioned by space."""

    space: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False, default=DEFAULT_TITLE)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utc_now)

    def has_default_title(self) -> bool:
        return self.title == DEFAULT_TITLE
