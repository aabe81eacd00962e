"""
Asset file storage: local disk (development) or S3 (production), chosen by ASSET_HOST.
"""
import logging
from pathlib import Path

from ibuddy.config import settings
from ibuddy.storage.base import FileStorage, generate_key

logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parent.parent.parent

_storages: dict[str, FileStorage] = {}


def _upload_dir() -> Path:
    d = settings.upload_dir
    return d if d.is_absolute() else _BACKEND_DIR / d


def get_file_storage(host: str | None = None) -> FileStorage:
    """Storage for `host` ("local" | "s3"); defaults to ASSET_HOST. One instance per host."""
    host = (host or settings.asset_host or "local").strip().lower()
    if host not in _storages:
        if host == "s3":
            from ibuddy.storage.s3_impl import S3FileStorage
            _storages[host] = S3FileStorage(settings.s3_bucket_name, settings.aws_region)
        elif host == "local":
            from ibuddy.storage.local_impl import LocalFileStorage
            _storages[host] = LocalFileStorage(_upload_dir())
        else:
            raise ValueError(f"Unknown asset host: {host}")
        logger.info("Asset storage: %s", host)
    return _storages[host]


__all__ = ["FileStorage", "generate_key", "get_file_storage"]
