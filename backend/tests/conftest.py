"""
Test configuration: a throwaway SQLite database and upload directory, set before ibuddy
is imported, and an empty store for every test.
"""
import os
import tempfile
from datetime import date, timedelta
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="ibuddy-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["ASSET_HOST"] = "local"
os.environ["EMAIL_BACKEND"] = "mock"
os.environ["BOOTSTRAP_ADMIN_EMAIL"] = ""
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = ""
os.environ["STRICT_MENTEE_STATUS_TRANSITIONS"] = "false"
os.environ["RETRY_ATTEMPTS"] = "2"

import pytest  # noqa: E402

from ibuddy.database import init_db  # noqa: E402
from ibuddy.mail.mock_impl import MockEmailService  # noqa: E402
from ibuddy.models.user import Role  # noqa: E402
from ibuddy.repositories import AssetRepository, FAQRepository, MenteeRepository, UserRepository  # noqa: E402
from ibuddy.storage.local_impl import LocalFileStorage  # noqa: E402
from ibuddy.store import get_store  # noqa: E402

TEST_PASSWORD = "Secret#123"


@pytest.fixture(autouse=True)
def store():
    init_db()
    s = get_store()
    s.truncate()
    yield s
    s.truncate()


@pytest.fixture
def users(store):
    return UserRepository(store)


@pytest.fixture
def mentees(store):
    return MenteeRepository(store)


@pytest.fixture
def faqs(store):
    return FAQRepository(store)


@pytest.fixture
def file_storage(tmp_path):
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture
def assets(store, file_storage):
    return AssetRepository(store, storage_factory=lambda host=None: file_storage)


@pytest.fixture
def email_service():
    return MockEmailService()


@pytest.fixture
def make_user(users):
    """Factory: make_user(role=Role.HR, email=...) -> stored User."""
    counter = {"n": 0}

    def _make(role: Role = Role.BUDDY, email: str | None = None, first_name: str = "Test", last_name: str = "User", **kwargs):
        counter["n"] += 1
        return users.create(
            email=email or f"user{counter['n']}-{role.value.lower()}@example.com",
            password=kwargs.pop("password", TEST_PASSWORD),
            first_name=first_name,
            last_name=last_name,
            role=role,
            faculty=kwargs.pop("faculty", "Engineering"),
            agreement_start_date=kwargs.pop("agreement_start_date", date.today() - timedelta(days=30)),
            agreement_end_date=kwargs.pop("agreement_end_date", date.today() + timedelta(days=300)),
        )

    return _make


@pytest.fixture
def make_mentee(mentees):
    """Factory: make_mentee(buddy, email=...) -> stored Mentee."""
    counter = {"n": 0}

    def _make(buddy, email: str | None = None, **overrides):
        counter["n"] += 1
        fields = dict(
            buddy_id=buddy.id,
            first_name="Ana",
            last_name="Silva",
            email=email or f"mentee{counter['n']}@uni.example.org",
            gender="female",
            degree="master",
            country_code="pt",
            home_university="Universidade de Lisboa",
            host_faculty="Engineering",
            agreement_start_date=date.today(),
            agreement_end_date=date.today() + timedelta(days=180),
        )
        fields.update(overrides)
        return mentees.create(**fields)

    return _make


@pytest.fixture
def make_mentee_model():
    """Factory for unsaved Mentee models (pure predicate tests)."""
    from ibuddy.models.mentee import Mentee

    def _make(buddy_id: str, **overrides):
        fields = dict(
            id="m-" + buddy_id,
            buddy_id=buddy_id,
            first_name="Ana",
            last_name="Silva",
            email="ana@uni.example.org",
            gender="female",
            degree="master",
            country_code="PT",
            home_university="Lisboa",
            host_faculty="Engineering",
            agreement_start_date=date.today(),
            agreement_end_date=date.today() + timedelta(days=30),
        )
        fields.update(overrides)
        return Mentee(**fields)

    return _make


@pytest.fixture
def client(email_service, assets):
    """TestClient with the mock email outbox and tmp-dir asset storage wired in."""
    from fastapi.testclient import TestClient

    from ibuddy.api.deps import get_asset_repository
    from ibuddy.mail import get_email_service
    from ibuddy.main import app

    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_asset_repository] = lambda: assets
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    """login_as(user) -> client whose requests run as `user` (get_current_user overridden)."""
    from ibuddy.api.deps import get_current_user
    from ibuddy.main import app

    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return client

    return _login
