"""Content blocks and role-tagged messages sent to the completion provider.

Each block kind is its own model; ``ContentBlock`` is the tagged union over
them, discriminated by ``type``.
"""
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field


class InputText(BaseModel):
    """Text written by the user (or injected on the user's behalf)."""

    type: Literal["input_text"] = "input_text"
    text: str


class OutputText(BaseModel):
    """Text previously produced by the model, replayed as history."""

    type: Literal["output_text"] = "output_text"
    text: str


class InputImage(BaseModel):
    """Inline image as a data URL."""

    type: Literal["input_image"] = "input_image"
    image_url: str


class InputFile(BaseModel):
    """Inline file as base64 payload plus its original name."""

    type: Literal["input_file"] = "input_file"
    file_data: str
    filename: str


ContentBlock = Annotated[
    Union[InputText, OutputText, InputImage, InputFile],
    Field(discriminator="type"),
]


class RoleMessage(BaseModel):
    """One entry of the request's ``input`` list."""

    type: Literal["message"] = "message"
    role: Literal["user", "assistant"]
    content: List[ContentBlock]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


class DocumentKind(str, Enum):
    """Document types a turn may carry."""

    PDF = "pdf"
    DOCX = "docx"
