"""
Buddies API for staff: active buddies (mentee assignment candidates) and lookup by email.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from ibuddy.api.deps import get_current_user, get_user_repository
from ibuddy.errors import require
from ibuddy.models.user import User
from ibuddy.repositories import UserRepository
from ibuddy.schemas.users import BuddyResponse
from ibuddy.services.permissions import can_user_list_buddies

router = APIRouter(prefix="/buddies", tags=["buddies"])


@router.get("", response_model=list[BuddyResponse])
def list_buddies(
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    require(can_user_list_buddies(current_user))
    return [BuddyResponse.model_validate(u) for u in users.list_active_buddies()]


@router.get("/{email}", response_model=BuddyResponse)
def get_buddy(
    email: str,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    require(can_user_list_buddies(current_user))
    buddy = users.get_by_email(email)
    if not buddy:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Buddy not found")
    return BuddyResponse.model_validate(buddy)
