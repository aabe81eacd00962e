"""
Asset request/response schemas. File uploads arrive as multipart form fields and are
validated in the router; email templates are JSON.
"""
from datetime import datetime

from pydantic import BaseModel, field_validator

from ibuddy.models.asset import Asset, AssetHost, AssetType
from ibuddy.schemas import common


class AssetResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    description: str | None = None
    type: AssetType
    host: AssetHost
    content_type: str | None = None
    shared_users: list[str] = []
    # Sanitized HTML of email templates; None for files
    html_body: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetResponse":
        return cls(
            id=asset.id,
            owner_id=asset.owner_id,
            name=asset.name,
            description=asset.description,
            type=asset.type,
            host=asset.host,
            content_type=asset.content_type,
            shared_users=asset.shared_users,
            html_body=None if asset.type.is_file else asset.src,
            created_at=asset.created_at,
            updated_at=asset.updated_at,
        )


class EmailTemplateCreateRequest(BaseModel):
    name: str
    description: str | None = None
    html_body: str
    shared_users: list[str] = []

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = common.required_string(v, "Name")
        if len(v) > common.MAX_TEXT_LENGTH:
            raise ValueError("Name is too long")
        return v

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str | None) -> str | None:
        return common.max_length(v, common.MAX_LONG_TEXT_LENGTH, "Description")

    @field_validator("html_body")
    @classmethod
    def body_required(cls, v: str) -> str:
        return common.required_string(v, "Template")


class AssetUpdateRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    shared_users: list[str] | None = None
    # Email templates only
    html_body: str | None = None

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = common.required_string(v, "Name")
        if len(v) > common.MAX_TEXT_LENGTH:
            raise ValueError("Name is too long")
        return v

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str | None) -> str | None:
        return common.max_length(v, common.MAX_LONG_TEXT_LENGTH, "Description")

    @field_validator("html_body")
    @classmethod
    def body_required(cls, v: str | None) -> str | None:
        return None if v is None else common.required_string(v, "Template")


class AssetDeleteResponse(BaseModel):
    id: str
    deleted: bool = True
    # Set when the stored file could not be removed
    cleanup_error: str | None = None


class AssetDownloadResponse(BaseModel):
    url: str
    expires_in: int
