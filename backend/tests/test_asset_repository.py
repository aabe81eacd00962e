"""Asset repository: case-insensitive names, uploads, sharing and file cleanup on delete."""
import pytest

from ibuddy.config import settings
from ibuddy.errors import ExternalServiceError, FormValidationError
from ibuddy.models.asset import AssetHost, AssetType
from ibuddy.models.user import Role
from ibuddy.repositories import AssetRepository

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class FailingS3Storage:
    """Stands in for S3 when the object delete fails."""

    host = "s3"

    def __init__(self):
        self.saved = {}

    def save(self, key, data, content_type):
        self.saved[key] = data
        return key

    def open(self, key):
        return self.saved[key]

    def delete(self, key):
        raise ExternalServiceError("s3", "delete_object failed: AccessDenied")

    def signed_url(self, key, expires_in):
        return f"https://bucket.example/{key}?expires={expires_in}"


def _template(assets, owner, name="Welcome", body="<p>Hello {{firstName}}</p>", **kwargs):
    return assets.create_email_template(owner_id=owner.id, name=name, html_body=body, **kwargs)


def test_name_uniqueness_is_case_insensitive(assets, make_user):
    owner = make_user()
    asset = _template(assets, owner, name="foo")
    assert not assets.is_name_unique("Foo")
    assert not assets.is_name_unique("  FOO ")
    assert assets.is_name_unique("Foo", exclude_id=asset.id)
    assert assets.is_name_unique("bar")
    with pytest.raises(FormValidationError) as exc:
        _template(assets, owner, name="FOO")
    assert exc.value.errors == {"name": "Name is already taken"}


def test_rename_recomputes_searchable_name(assets, make_user):
    asset = _template(assets, make_user(), name="Old Name")
    assert asset.searchable_name == "old name"
    renamed = assets.update(asset.id, name="New Name")
    assert renamed.name == "New Name"
    assert renamed.searchable_name == "new name"
    assert not assets.is_name_unique("NEW NAME")
    assert assets.is_name_unique("old name")


def test_rename_to_taken_name_rejected(assets, make_user):
    owner = make_user()
    _template(assets, owner, name="First")
    second = _template(assets, owner, name="Second")
    with pytest.raises(FormValidationError):
        assets.update(second.id, name="first")


def test_update_missing_asset_returns_none(assets):
    assert assets.update("missing", description="x") is None


def test_email_template_body_is_sanitized(assets, make_user):
    asset = _template(assets, make_user(), body='<p onclick="x()">Hi</p><script>alert(1)</script>')
    assert asset.type == AssetType.EMAIL_TEMPLATE
    assert "<script>" not in asset.src
    assert "onclick" not in asset.src
    assert "Hi" in asset.src
    updated = assets.update(asset.id, src="<b>Bye</b><script>x</script>")
    assert updated.src == "<b>Bye</b>"


def test_upload_image(assets, file_storage, make_user):
    owner = make_user()
    asset = assets.create_file(
        owner_id=owner.id,
        name="Campus map",
        filename="map.PNG",
        content_type="image/png",
        data=PNG,
    )
    assert asset.type == AssetType.IMAGE
    assert asset.host == AssetHost.LOCAL
    assert asset.src.endswith(".png")
    assert asset.content_type == "image/png"
    assert file_storage.open(asset.src) == PNG
    assert assets.read_file(asset) == PNG
    assert assets.download_url(asset) is None


def test_upload_pdf_is_document(assets, make_user):
    asset = assets.create_file(
        owner_id=make_user().id,
        name="Handbook",
        filename="handbook.pdf",
        content_type="application/pdf",
        data=b"%PDF-1.4 test",
    )
    assert asset.type == AssetType.DOCUMENT


@pytest.mark.parametrize("content_type", ["text/plain", "application/zip", ""])
def test_upload_rejects_other_types(assets, make_user, content_type):
    with pytest.raises(FormValidationError) as exc:
        assets.create_file(owner_id=make_user().id, name="x", filename="x", content_type=content_type, data=b"x")
    assert "file" in exc.value.errors


def test_upload_rejects_oversized_file(assets, make_user, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 10)
    with pytest.raises(FormValidationError) as exc:
        assets.create_file(owner_id=make_user().id, name="big", filename="b.png", content_type="image/png", data=PNG)
    assert exc.value.errors == {"file": "File max size exceeded"}


def test_upload_with_taken_name_stores_nothing(assets, file_storage, make_user):
    owner = make_user()
    _template(assets, owner, name="Taken")
    with pytest.raises(FormValidationError):
        assets.create_file(owner_id=owner.id, name="taken", filename="a.png", content_type="image/png", data=PNG)
    assert not file_storage.directory.exists() or not any(file_storage.directory.iterdir())


def test_list_by_owner_and_accessible(assets, make_user):
    owner, friend, stranger = make_user(), make_user(), make_user()
    shared = _template(assets, owner, name="Shared", shared_users=[friend.id])
    private = _template(assets, owner, name="Private")
    theirs = _template(assets, friend, name="Friend's")
    assert {a.id for a in assets.list_by_owner(owner.id)} == {shared.id, private.id}
    assert {a.id for a in assets.list_accessible(friend.id)} == {shared.id, theirs.id}
    assert assets.list_accessible(stranger.id) == []


def test_list_filters_by_type(assets, make_user):
    owner = make_user()
    template = _template(assets, owner)
    image = assets.create_file(owner_id=owner.id, name="Pic", filename="p.gif", content_type="image/gif", data=PNG)
    assert [a.id for a in assets.list_accessible(owner.id, AssetType.EMAIL_TEMPLATE)] == [template.id]
    assert [a.id for a in assets.list_all(AssetType.IMAGE)] == [image.id]
    assert len(assets.list_all()) == 2


def test_owner_is_not_listed_as_shared_user(assets, make_user):
    owner, friend = make_user(), make_user()
    asset = _template(assets, owner, shared_users=[owner.id, friend.id, friend.id])
    assert asset.shared_users == [friend.id]


def test_delete_local_file_asset_removes_file(assets, file_storage, make_user):
    asset = assets.create_file(owner_id=make_user().id, name="Pic", filename="p.png", content_type="image/png", data=PNG)
    path = file_storage.path_for(asset.src)
    assert path.exists()
    result = assets.delete(asset.id)
    assert result.cleanup_error is None
    assert assets.get(asset.id) is None
    assert not path.exists()


def test_delete_local_file_already_gone_is_swallowed(assets, file_storage, make_user):
    asset = assets.create_file(owner_id=make_user().id, name="Pic", filename="p.png", content_type="image/png", data=PNG)
    file_storage.path_for(asset.src).unlink()
    result = assets.delete(asset.id)
    assert result.cleanup_error is None
    assert assets.get(asset.id) is None


def test_delete_s3_failure_is_reported_not_raised(store, make_user):
    s3 = FailingS3Storage()
    assets = AssetRepository(store, storage_factory=lambda host=None: s3)
    owner = make_user(Role.HR)
    asset = assets.create_file(owner_id=owner.id, name="Doc", filename="d.pdf", content_type="application/pdf", data=b"%PDF")
    assert asset.host == AssetHost.S3
    assert assets.download_url(asset).startswith("https://bucket.example/")
    result = assets.delete(asset.id)
    assert assets.get(asset.id) is None
    assert "AccessDenied" in result.cleanup_error


def test_delete_missing_asset(assets):
    assert assets.delete("missing") is None
