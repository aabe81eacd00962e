"""
Assets API: image/PDF uploads (multipart), email templates (JSON), sharing, download and
deletion. Admins see every asset; everyone else sees what they own or what is shared with them.
"""
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import RedirectResponse, Response

from ibuddy.api.deps import get_asset_repository, get_current_user, get_user_repository
from ibuddy.config import settings
from ibuddy.errors import FormValidationError, require
from ibuddy.models.asset import Asset, AssetHost, AssetType
from ibuddy.models.user import User
from ibuddy.repositories import AssetRepository, UserRepository
from ibuddy.schemas import common
from ibuddy.schemas.assets import (
    AssetDeleteResponse,
    AssetDownloadResponse,
    AssetResponse,
    AssetUpdateRequest,
    EmailTemplateCreateRequest,
)
from ibuddy.services.permissions import can_mutate_asset, can_view_asset, is_admin

router = APIRouter(prefix="/assets", tags=["assets"])
logger = logging.getLogger(__name__)


def _get_asset_or_404(assets: AssetRepository, asset_id: str) -> Asset:
    asset = assets.get(asset_id)
    if not asset:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return asset


def _valid_shared_users(users: UserRepository, user_ids: list[str]) -> list[str]:
    """Every id must belong to an existing user."""
    ids = [u.strip() for u in user_ids if u and u.strip()]
    if any(users.get_by_id(u) is None for u in ids):
        raise FormValidationError({"shared_users": "Invalid user id submitted for sharing"})
    return ids


@router.get("", response_model=list[AssetResponse])
def list_assets(
    type: AssetType | None = None,
    current_user: User = Depends(get_current_user),
    assets: AssetRepository = Depends(get_asset_repository),
):
    if is_admin(current_user):
        found = assets.list_all(type)
    else:
        found = assets.list_accessible(current_user.id, type)
    return [AssetResponse.from_asset(a) for a in found]


@router.post("/files", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: UploadFile = File(...),
    name: str = Form(...),
    description: str | None = Form(None),
    shared_users: str = Form(""),
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    assets: AssetRepository = Depends(get_asset_repository),
):
    """Upload a PNG/JPEG/GIF image or a PDF. `shared_users` is a comma-separated list of user ids."""
    try:
        name = common.required_string(name, "Name")
    except ValueError as e:
        raise FormValidationError({"name": str(e)}) from None
    try:
        common.max_length(description, common.MAX_LONG_TEXT_LENGTH, "Description")
    except ValueError as e:
        raise FormValidationError({"description": str(e)}) from None
    shared = _valid_shared_users(users, shared_users.split(","))
    # one byte past the limit is enough to reject oversized uploads
    contents = file.file.read(settings.max_upload_bytes + 1)
    asset = assets.create_file(
        owner_id=current_user.id,
        name=name,
        filename=file.filename or "upload",
        content_type=file.content_type or "",
        data=contents,
        description=description,
        shared_users=shared,
    )
    return AssetResponse.from_asset(asset)


@router.post("/email-templates", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
def create_email_template(
    data: EmailTemplateCreateRequest,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    assets: AssetRepository = Depends(get_asset_repository),
):
    shared = _valid_shared_users(users, data.shared_users)
    asset = assets.create_email_template(
        owner_id=current_user.id,
        name=data.name,
        html_body=data.html_body,
        description=data.description,
        shared_users=shared,
    )
    return AssetResponse.from_asset(asset)


@router.get("/{asset_id}", response_model=AssetResponse)
def get_asset(
    asset_id: str,
    current_user: User = Depends(get_current_user),
    assets: AssetRepository = Depends(get_asset_repository),
):
    asset = _get_asset_or_404(assets, asset_id)
    require(can_view_asset(asset, current_user), "Not allowed to view this asset")
    return AssetResponse.from_asset(asset)


@router.patch("/{asset_id}", response_model=AssetResponse)
def update_asset(
    asset_id: str,
    data: AssetUpdateRequest,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    assets: AssetRepository = Depends(get_asset_repository),
):
    asset = _get_asset_or_404(assets, asset_id)
    require(can_mutate_asset(asset, current_user), "Not allowed to edit this asset")
    changes = data.model_dump(exclude_unset=True)
    html_body = changes.pop("html_body", None)
    if html_body is not None:
        if asset.type != AssetType.EMAIL_TEMPLATE:
            raise FormValidationError({"html_body": "Only email templates have a body"})
        changes["src"] = html_body
    if changes.get("shared_users") is not None:
        changes["shared_users"] = _valid_shared_users(users, changes["shared_users"])
    changes = {k: v for k, v in changes.items() if v is not None or k == "description"}
    updated = assets.update(asset_id, **changes)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return AssetResponse.from_asset(updated)


@router.delete("/{asset_id}", response_model=AssetDeleteResponse)
def delete_asset(
    asset_id: str,
    current_user: User = Depends(get_current_user),
    assets: AssetRepository = Depends(get_asset_repository),
):
    asset = _get_asset_or_404(assets, asset_id)
    require(can_mutate_asset(asset, current_user), "Not allowed to delete this asset")
    result = assets.delete(asset_id)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return AssetDeleteResponse(id=asset_id, cleanup_error=result.cleanup_error)


@router.get("/{asset_id}/url", response_model=AssetDownloadResponse)
def get_download_url(
    asset_id: str,
    current_user: User = Depends(get_current_user),
    assets: AssetRepository = Depends(get_asset_repository),
):
    """Presigned URL for S3 files; local files point at the download route."""
    asset = _get_asset_or_404(assets, asset_id)
    require(can_view_asset(asset, current_user), "Not allowed to view this asset")
    if not asset.type.is_file:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email templates have no file")
    url = assets.download_url(asset) or f"{router.prefix}/{asset.id}/download"
    return AssetDownloadResponse(url=url, expires_in=settings.s3_signed_url_expires_seconds)


@router.get("/{asset_id}/download")
def download_asset(
    asset_id: str,
    current_user: User = Depends(get_current_user),
    assets: AssetRepository = Depends(get_asset_repository),
):
    """Redirect to a presigned URL (S3) or stream the file from the upload directory (local)."""
    asset = _get_asset_or_404(assets, asset_id)
    require(can_view_asset(asset, current_user), "Not allowed to view this asset")
    if not asset.type.is_file:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email templates have no file")
    if asset.host == AssetHost.S3:
        return RedirectResponse(assets.download_url(asset), status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    try:
        contents = assets.read_file(asset)
    except FileNotFoundError:
        logger.warning("Asset %s: file %s missing from upload directory", asset.id, asset.src)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from None
    return Response(
        content=contents,
        media_type=asset.content_type or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{asset.src}"'},
    )
