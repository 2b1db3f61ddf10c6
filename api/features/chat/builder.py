"""Request builder: turns history plus the current turn into role-tagged messages."""
import base64
import io
import logging
from typing import Callable, List, Optional, Sequence

import mammoth

from api.features.chat.dtos import AttachmentDTO
from api.features.chat.exceptions import (
    DocumentEmptyError,
    DocumentExtractionError,
    EmptyContentError,
    UnsupportedAttachmentError,
)
from api.features.chat.models import (
    ContentBlock,
    DocumentKind,
    InputFile,
    InputImage,
    InputText,
    OutputText,
    RoleMessage,
)
from api.features.conversation.entities import Message, MessageRole
from api.shared.utils import data_url_mime_type, get_file_extension, strip_data_url

logger = logging.getLogger("chat.builder")

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DEFAULT_IMAGE_MIME_TYPE = "image/png"

TextExtractor = Callable[[bytes], str]


def extract_docx_text(content: bytes) -> str:
    """Plain text of a DOCX document."""
    result = mammoth.extract_raw_text(io.BytesIO(content))
    return result.value or ""


def classify_document(attachment: AttachmentDTO) -> DocumentKind:
    """Decide the document kind from the MIME type or the file extension."""
    extension = get_file_extension(attachment.name)
    if attachment.type == PDF_MIME_TYPE or extension == ".pdf":
        return DocumentKind.PDF
    if attachment.type == DOCX_MIME_TYPE or extension == ".docx":
        return DocumentKind.DOCX
    raise UnsupportedAttachmentError(attachment.name, attachment.type)


def image_block(image: str) -> InputImage:
    """Inline image block; raw base64 is wrapped into a data URL."""
    mime_type = data_url_mime_type(image) or DEFAULT_IMAGE_MIME_TYPE
    payload = strip_data_url(image)
    return InputImage(image_url=f"data:{mime_type};base64,{payload}")


class RequestBuilder:
    """Builds the ``input`` list for a single completion request."""

    def __init__(self, text_extractor: Optional[TextExtractor] = None):
        self.text_extractor = text_extractor or extract_docx_text

    def replay_history(self, history: Sequence[Message]) -> List[RoleMessage]:
        """Prior messages with text, tagged by who said them."""
        replayed: List[RoleMessage] = []
        for message in history:
            text = (message.text or "").strip()
            if not text:
                continue
            if message.role == MessageRole.ASSISTANT.value:
                replayed.append(RoleMessage(role="assistant", content=[OutputText(text=text)]))
            else:
                replayed.append(RoleMessage(role="user", content=[InputText(text=text)]))
        return replayed

    def document_block(self, attachment: AttachmentDTO) -> ContentBlock:
        kind = classify_document(attachment)
        payload = strip_data_url(attachment.data)
        if kind is DocumentKind.PDF:
            return InputFile(file_data=payload, filename=attachment.name)

        try:
            content = base64.b64decode(payload)
            text = self.text_extractor(content).strip()
        except Exception as e:
            logger.warning(f"Failed to extract text from {attachment.name}: {e}")
            raise DocumentExtractionError(attachment.name, str(e)) from e
        if not text:
            raise DocumentEmptyError(attachment.name)
        return InputText(text=f"Contents of file {attachment.name}:\n{text}")

    def current_turn(
        self,
        text: str,
        images: Sequence[str],
        files: Sequence[AttachmentDTO],
    ) -> List[ContentBlock]:
        """Text first, then images, then documents, in attachment order."""
        content: List[ContentBlock] = []
        text = text.strip()
        if text:
            content.append(InputText(text=text))
        for image in images:
            content.append(image_block(image))
        for attachment in files:
            content.append(self.document_block(attachment))
        return content

    def build(
        self,
        history: Sequence[Message],
        text: str,
        images: Sequence[str] = (),
        files: Sequence[AttachmentDTO] = (),
    ) -> List[RoleMessage]:
        messages = self.replay_history(history)
        content = self.current_turn(text, images, files)
        if not content:
            raise EmptyContentError()
        messages.append(RoleMessage(role="user", content=content))
        return messages
