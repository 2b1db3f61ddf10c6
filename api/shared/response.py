"""Success envelope wrapped around every JSON payload the API returns.

Errors never use it; they are rendered as ``ErrorResponse`` by the
exception handlers in ``api.main``.
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ResponseModel(BaseModel, Generic[T]):
    data: Optional[T] = Field(default=None, description="Payload of the call")
    message: Optional[str] = Field(default=None, examples=["Conversation created"])
    status: str = Field(default="ok", description="Always 'ok' for successful calls")

    @classmethod
    def success(cls, data: Optional[T] = None, message: str = "Success") -> "ResponseModel[T]":
        return cls(data=data, message=message)
