"""
Asset model: an uploaded file (image, document) or an email template owned by a user.
`searchable_name` is the lower-cased name, rewritten on every write that sets `name`.
"""
import enum
from datetime import datetime

from ibuddy.models.base import StoredModel


class AssetType(str, enum.Enum):
    IMAGE = "image"
    DOCUMENT = "document"
    EMAIL_TEMPLATE = "email-template"

    @property
    def is_file(self) -> bool:
        return self in (AssetType.IMAGE, AssetType.DOCUMENT)


class AssetHost(str, enum.Enum):
    S3 = "s3"
    LOCAL = "local"


# Accepted upload content types per file asset type
FILE_CONTENT_TYPES: dict[AssetType, tuple[str, ...]] = {
    AssetType.IMAGE: ("image/png", "image/jpeg", "image/gif"),
    AssetType.DOCUMENT: ("application/pdf",),
}


def asset_type_for_content_type(content_type: str) -> AssetType | None:
    """image/png -> IMAGE, application/pdf -> DOCUMENT; None if not an accepted upload."""
    ct = (content_type or "").split(";")[0].strip().lower()
    for asset_type, allowed in FILE_CONTENT_TYPES.items():
        if ct in allowed:
            return asset_type
    return None


def searchable(name: str) -> str:
    return (name or "").strip().lower()


class Asset(StoredModel):
    id: str
    owner_id: str
    name: str
    searchable_name: str = ""
    description: str | None = None
    type: AssetType
    host: AssetHost
    src: str  # storage key, or sanitized HTML for email templates
    content_type: str | None = None
    shared_users: list[str] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None
