"""
Shared dependencies: repositories bound to the process-wide store, and get_current_user
from the Bearer token. Routers receive the actor explicitly through these.
"""
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ibuddy.models.user import User
from ibuddy.repositories import AssetRepository, FAQRepository, MenteeRepository, UserRepository
from ibuddy.services.auth import decode_access_token
from ibuddy.store import KeyValueStore, get_store

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


def get_user_repository(store: KeyValueStore = Depends(get_store)) -> UserRepository:
    return UserRepository(store)


def get_mentee_repository(store: KeyValueStore = Depends(get_store)) -> MenteeRepository:
    return MenteeRepository(store)


def get_asset_repository(store: KeyValueStore = Depends(get_store)) -> AssetRepository:
    return AssetRepository(store)


def get_faq_repository(store: KeyValueStore = Depends(get_store)) -> FAQRepository:
    return FAQRepository(store)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """Require valid Bearer token; return User or 401."""
    if not credentials or not (getattr(credentials, "credentials", None) or "").strip():
        logger.debug("Auth failed: no Bearer token in request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Send header: Authorization: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        logger.debug("Auth failed: invalid or expired token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = users.get_by_id(payload["sub"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
