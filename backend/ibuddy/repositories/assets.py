"""
Asset repository: uploaded files and email templates.

`searchableName` (lower-cased name) is rewritten on every write that sets `name` and is
the only name-uniqueness lookup. Deleting a file asset also removes its stored object;
that cleanup never blocks the record deletion.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Iterable

from ibuddy.config import settings
from ibuddy.errors import ExternalServiceError, FormValidationError, ensure
from ibuddy.models.asset import Asset, AssetHost, AssetType, asset_type_for_content_type, searchable
from ibuddy.models.base import utcnow
from ibuddy.services.templating import sanitize_html
from ibuddy.storage import FileStorage, generate_key, get_file_storage
from ibuddy.store import ASSETS, KeyValueStore
from ibuddy.store.keys import asset_key

logger = logging.getLogger(__name__)

NAME_TAKEN = "Name is already taken"

_IMMUTABLE_FIELDS = frozenset({"id", "owner_id", "type", "host", "created_at", "searchable_name"})


@dataclass
class AssetDeletion:
    asset: Asset
    # Set when the stored file could not be removed (the record is deleted regardless)
    cleanup_error: str | None = None


class AssetRepository:
    def __init__(self, store: KeyValueStore, storage_factory: Callable[[str | None], FileStorage] = get_file_storage):
        self._store = store
        self._storage_factory = storage_factory

    # ------------------------------------------------------------------
    # Reads
    def get(self, asset_id: str) -> Asset | None:
        return Asset.from_item(self._store.get(ASSETS, asset_key(asset_id).encode()))

    def list_by_owner(self, owner_id: str) -> list[Asset]:
        return [Asset.from_item(i) for i in self._store.query_index(ASSETS, "assetsByOwnerId", owner_id)]

    def list_accessible(self, user_id: str, asset_type: AssetType | None = None) -> list[Asset]:
        """Assets the user owns or that are shared with them."""

        def _visible(item: dict) -> bool:
            if asset_type is not None and item.get("type") != asset_type.value:
                return False
            return item.get("ownerId") == user_id or user_id in (item.get("sharedUsers") or [])

        return [Asset.from_item(i) for i in self._store.scan(ASSETS, _visible)]

    def list_all(self, asset_type: AssetType | None = None) -> list[Asset]:
        predicate = (lambda i: i.get("type") == asset_type.value) if asset_type else None
        return [Asset.from_item(i) for i in self._store.scan(ASSETS, predicate)]

    def is_name_unique(self, name: str, exclude_id: str | None = None) -> bool:
        matches = self._store.query_index(ASSETS, "assetsBySearchableName", searchable(name))
        return all(m.get("id") == exclude_id for m in matches)

    # ------------------------------------------------------------------
    # Writes
    def create(
        self,
        *,
        owner_id: str,
        name: str,
        asset_type: AssetType,
        host: AssetHost,
        src: str,
        description: str | None = None,
        shared_users: Iterable[str] = (),
        content_type: str | None = None,
    ) -> Asset:
        if not self.is_name_unique(name):
            raise FormValidationError({"name": NAME_TAKEN})
        if asset_type == AssetType.EMAIL_TEMPLATE:
            src = sanitize_html(src)
        asset_id = uuid.uuid4().hex
        now = utcnow()
        asset = Asset(
            id=asset_id,
            owner_id=owner_id,
            name=name.strip(),
            searchable_name=searchable(name),
            description=description,
            type=asset_type,
            host=host,
            src=src,
            content_type=content_type,
            shared_users=list(dict.fromkeys(u for u in shared_users if u != owner_id)),
            created_at=now,
            updated_at=now,
        )
        self._store.put(ASSETS, asset_key(asset_id).encode(), asset.to_item())
        created = self.get(asset_id)
        ensure(created, f"Asset {asset_id} not found after creation")
        logger.info("Created %s asset %s for %s", asset_type.value, asset_id, owner_id)
        return created

    def create_email_template(self, *, owner_id: str, name: str, html_body: str, description: str | None = None, shared_users: Iterable[str] = ()) -> Asset:
        return self.create(
            owner_id=owner_id,
            name=name,
            asset_type=AssetType.EMAIL_TEMPLATE,
            host=AssetHost.LOCAL,
            src=html_body,
            description=description,
            shared_users=shared_users,
            content_type="text/html",
        )

    def create_file(
        self,
        *,
        owner_id: str,
        name: str,
        filename: str,
        content_type: str,
        data: bytes,
        description: str | None = None,
        shared_users: Iterable[str] = (),
        host: str | None = None,
    ) -> Asset:
        """Store an uploaded image/PDF and create its asset. The stored file is removed again
        if the record cannot be created."""
        asset_type = asset_type_for_content_type(content_type)
        if asset_type is None:
            raise FormValidationError({"file": "Only PNG, JPEG, GIF images and PDF documents are allowed"})
        if not data:
            raise FormValidationError({"file": "File is required"})
        if len(data) > settings.max_upload_bytes:
            raise FormValidationError({"file": "File max size exceeded"})
        if not self.is_name_unique(name):
            raise FormValidationError({"name": NAME_TAKEN})
        storage = self._storage_factory(host)
        key = storage.save(generate_key(filename), data, content_type)
        try:
            return self.create(
                owner_id=owner_id,
                name=name,
                asset_type=asset_type,
                host=AssetHost(storage.host),
                src=key,
                description=description,
                shared_users=shared_users,
                content_type=content_type,
            )
        except Exception:
            logger.warning("Asset record for %s not created; removing stored file", key)
            storage.delete(key)
            raise

    def update(self, asset_id: str, **changes) -> Asset | None:
        """Partial update. Writing `name` always rewrites `searchable_name`.
        Returns the asset as read back, or None if it does not exist."""
        bad = _IMMUTABLE_FIELDS.intersection(changes)
        if bad:
            raise ValueError(f"Cannot update {', '.join(sorted(bad))}")
        current = self.get(asset_id)
        if current is None:
            return None
        if "name" in changes:
            if not self.is_name_unique(changes["name"], exclude_id=asset_id):
                raise FormValidationError({"name": NAME_TAKEN})
            changes["name"] = changes["name"].strip()
            changes["searchable_name"] = searchable(changes["name"])
        if "src" in changes:
            if current.type != AssetType.EMAIL_TEMPLATE:
                raise ValueError("Only email template bodies can be replaced")
            changes["src"] = sanitize_html(changes["src"])
        if "shared_users" in changes:
            changes["shared_users"] = list(dict.fromkeys(u for u in changes["shared_users"] if u != current.owner_id))
        changes["updated_at"] = utcnow()
        key = asset_key(asset_id).encode()
        if self._store.update(ASSETS, key, set_values=Asset.item_values(changes)) is None:
            return None
        return self.get(asset_id)

    def delete(self, asset_id: str) -> AssetDeletion | None:
        """Delete the record, then the stored file of image/document assets.
        None if the asset does not exist."""
        asset = self.get(asset_id)
        if asset is None:
            return None
        self._store.delete(ASSETS, asset_key(asset_id).encode())
        result = AssetDeletion(asset)
        if asset.type.is_file:
            # local storage logs and swallows its own failures
            try:
                self._storage_factory(asset.host.value).delete(asset.src)
            except ExternalServiceError as e:
                logger.error("Asset %s deleted but its %s object %s was not: %s", asset_id, asset.host.value, asset.src, e)
                result.cleanup_error = str(e)
        logger.info("Deleted asset %s", asset_id)
        return result

    # ------------------------------------------------------------------
    def download_url(self, asset: Asset) -> str | None:
        """Presigned URL for S3 files; None for local files (served by the API)."""
        if not asset.type.is_file:
            return None
        storage = self._storage_factory(asset.host.value)
        return storage.signed_url(asset.src, settings.s3_signed_url_expires_seconds)

    def read_file(self, asset: Asset) -> bytes:
        return self._storage_factory(asset.host.value).open(asset.src)
