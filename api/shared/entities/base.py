"""Declarative base shared by the conversation tables."""
from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

from api.shared.utils import generate_id


class BaseEntity(DeclarativeBase):
    """Base class for stored rows: lowercase table name, opaque string id."""

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
