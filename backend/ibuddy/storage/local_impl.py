"""
Local disk storage (development): files under settings.upload_dir.
Deleting is best effort; failures are logged, never raised.
"""
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalFileStorage:
    host = "local"

    def __init__(self, directory: Path):
        self.directory = Path(directory).resolve()

    def _path(self, key: str) -> Path:
        path = (self.directory / key).resolve()
        if path.parent != self.directory:
            raise ValueError(f"Invalid storage key: {key!r}")
        return path

    def save(self, key: str, data: bytes, content_type: str) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_bytes(data)
        logger.debug("Saved %s (%s, %s bytes)", key, content_type, len(data))
        return key

    def open(self, key: str) -> bytes:
        return self._path(key).read_bytes()

    def path_for(self, key: str) -> Path:
        return self._path(key)

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except (OSError, ValueError) as e:
            logger.warning("Could not delete local upload %s: %s", key, e)

    def signed_url(self, key: str, expires_in: int) -> str | None:
        return None
