"""Common utility functions shared across features."""
import re
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

_WHITESPACE_RE = re.compile(r"\s+")


def generate_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (the storage format)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_file_extension(filename: str) -> str:
    """Get file extension from filename."""
    return Path(filename).suffix.lower()


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate text to specified length."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix


def strip_data_url(payload: str) -> str:
    """Drop a ``data:<mime>;base64,`` style prefix, keeping only the payload."""
    if "," in payload:
        return payload.split(",", 1)[1]
    return payload


def data_url_mime_type(payload: str) -> str | None:
    """Mime type declared by a data URL prefix, if any."""
    if not payload.startswith("data:") or "," not in payload:
        return None
    header = payload[len("data:"):].split(",", 1)[0]
    mime_type = header.split(";", 1)[0]
    return mime_type or None
