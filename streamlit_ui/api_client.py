"""HTTP helpers the Streamlit UI uses to talk to the chat API."""
import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException

DOCUMENT_EXTENSIONS = (".pdf", ".docx")


class ApiError(RuntimeError):
    """Raised when the API answers with an error or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class PendingAttachments:
    """Images and documents waiting to be sent with the next turn."""

    images: List[str] = field(default_factory=list)
    files: List[Dict[str, Any]] = field(default_factory=list)

    def clear(self) -> None:
        self.images.clear()
        self.files.clear()


def to_data_url(content: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(content).decode("utf-8")
    return f"data:{mime_type or 'application/octet-stream'};base64,{encoded}"


def add_images(
    pending: PendingAttachments, uploads: List[tuple], max_images: int
) -> Optional[str]:
    """Queue ``(name, mime, bytes)`` images; returns a warning when some were dropped."""
    available = max(0, max_images - len(pending.images))
    for _name, mime_type, content in uploads[:available]:
        pending.images.append(to_data_url(content, mime_type or "image/png"))
    if len(uploads) > available:
        return f"You can attach up to {max_images} images."
    return None


def add_documents(
    pending: PendingAttachments,
    uploads: List[tuple],
    max_documents: int,
    max_size_mb: int,
) -> Optional[str]:
    """Queue ``(name, mime, bytes)`` PDF/DOCX documents; returns a warning on rejects."""
    for name, _mime, content in uploads:
        if len(content) > max_size_mb * 1024 * 1024:
            return f"File {name} is too large. Maximum {max_size_mb} MB."
        if not name.lower().endswith(DOCUMENT_EXTENSIONS):
            return f"File {name} is not a PDF or DOCX document."
    available = max(0, max_documents - len(pending.files))
    for name, mime_type, content in uploads[:available]:
        pending.files.append(
            {
                "name": name,
                "type": mime_type or "",
                "data": to_data_url(content, mime_type),
                "size": len(content),
            }
        )
    if len(uploads) > available:
        return f"You can attach up to {max_documents} files."
    return None


def format_timestamp(value: str) -> str:
    try:
        return datetime.fromisoformat(value).strftime("%d %b %H:%M")
    except (TypeError, ValueError):
        return ""


class ChatApiClient:
    """Thin wrapper over the conversation and chat endpoints."""

    def __init__(
        self,
        base_url: str,
        conversations_endpoint: str,
        turn_endpoint: str,
        timeout: float = 120.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.conversations_url = f"{self.base_url}{conversations_endpoint}"
        self.turn_url = f"{self.base_url}{turn_endpoint}"
        self.timeout = timeout

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            resp = requests.request(method, url, timeout=self.timeout, **kwargs)
        except RequestException as e:
            raise ApiError(f"Failed to reach API at {url}: {e}")

        try:
            payload = resp.json() or {}
        except ValueError:
            payload = {}
        if resp.status_code != 200:
            message = payload.get("error") or resp.text or "Request failed"
            raise ApiError(message, resp.status_code)
        if "data" not in payload:
            raise ApiError("Malformed API response: missing 'data'", resp.status_code)
        return payload["data"]

    def list_conversations(self, space: int) -> List[Dict[str, Any]]:
        data = self._request("GET", self.conversations_url, params={"space": space})
        return data.get("conversations", [])

    def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        return self._request("GET", self.conversations_url, params={"id": conversation_id})

    def create_conversation(self, space: int) -> Dict[str, Any]:
        data = self._request("POST", self.conversations_url, json={"space": space})
        return data["conversation"]

    def delete_conversation(self, conversation_id: str) -> bool:
        data = self._request(
            "DELETE", self.conversations_url, json={"conversation_id": conversation_id}
        )
        return bool(data.get("ok"))

    def send_turn(
        self,
        conversation_id: str,
        text: str,
        images: Optional[List[str]] = None,
        files: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        payload = {
            "conversation_id": conversation_id,
            "text": text,
            "images": images or [],
            "files": files or [],
        }
        return self._request("POST", self.turn_url, json=payload)
