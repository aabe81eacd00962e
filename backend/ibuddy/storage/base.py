"""
File storage interface for image/document assets: save, open, delete, time-limited URL.
Keys are generated by the caller (see generate_key); implementations never rename.
"""
import time
import uuid
from pathlib import PurePosixPath
from typing import Protocol


class FileStorage(Protocol):
    """Where uploaded asset files live."""

    host: str  # "s3" | "local", stored on the asset

    def save(self, key: str, data: bytes, content_type: str) -> str:
        """Store `data` under `key`; return the key."""
        ...

    def open(self, key: str) -> bytes:
        """Return the stored bytes. Raises FileNotFoundError if missing."""
        ...

    def delete(self, key: str) -> None:
        ...

    def signed_url(self, key: str, expires_in: int) -> str | None:
        """Time-limited read URL, or None when the backend serves files itself."""
        ...


def generate_key(filename: str) -> str:
    """Storage key "<ms timestamp>-<random hex>.<ext>"; the uploaded file name is not used in the path."""
    ext = PurePosixPath(filename or "").suffix.lower().lstrip(".")
    stem = f"{int(time.time() * 1000)}-{uuid.uuid4().hex}"
    return f"{stem}.{ext}" if ext and ext.isalnum() else stem
