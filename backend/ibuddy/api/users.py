"""
Users API: list with mentee counts, staff-created accounts, profile/role edits, deletion.
Users are addressed by email (their id is derived from it).
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ibuddy.api.deps import get_current_user, get_mentee_repository, get_user_repository
from ibuddy.errors import FormValidationError, require
from ibuddy.models.user import ROLE_DISPLAY_ORDER, Role, User
from ibuddy.repositories import MenteeRepository, UserRepository
from ibuddy.schemas import common
from ibuddy.schemas.mentees import MenteeResponse
from ibuddy.schemas.users import (
    RoleOption,
    UserCreatedResponse,
    UserCreateRequest,
    UserDetailResponse,
    UserResponse,
    UserUpdateRequest,
    UserWithMenteeCount,
)
from ibuddy.services.auth import generate_random_password
from ibuddy.services.permissions import can_user_assign_role, can_user_edit_user, can_user_list_users

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

ROLE_NOT_ALLOWED = "Not allowed to create a user with such access"


def _get_user_or_404(users: UserRepository, email: str) -> User:
    user = users.get_by_email(email)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=list[UserWithMenteeCount])
def list_users(
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """Most privileged role first; within a role, most mentees first."""
    require(can_user_list_users(current_user), "Not allowed to list users")
    return [
        UserWithMenteeCount(**UserResponse.model_validate(u).model_dump(), mentee_count=count)
        for u, count in users.list_with_mentee_counts()
    ]


@router.get("/roles", response_model=list[RoleOption])
def list_roles(current_user: User = Depends(get_current_user)):
    """Every role, marked disabled where the current user may not hand it out."""
    return [
        RoleOption(value=r, label=r.label, disabled=not can_user_assign_role(current_user, r))
        for r in reversed(ROLE_DISPLAY_ORDER)
    ]


@router.post("", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreateRequest,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    if not can_user_assign_role(current_user, data.role):
        raise FormValidationError({"role": ROLE_NOT_ALLOWED})
    password = generate_random_password()
    user = users.create(
        email=data.email,
        password=password,
        first_name=data.first_name,
        last_name=data.last_name,
        faculty=data.faculty,
        role=data.role,
        agreement_start_date=data.agreement_start_date,
        agreement_end_date=data.agreement_end_date,
    )
    logger.info("%s created user %s (%s)", current_user.id, user.id, user.role.value)
    return UserCreatedResponse(user=UserResponse.model_validate(user), temporary_password=password)


@router.get("/{email}", response_model=UserDetailResponse)
def get_user(
    email: str,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    require(can_user_list_users(current_user), "Not allowed to view users")
    user = _get_user_or_404(users, email)
    permission = users.can_user_delete_user(current_user, user)
    return UserDetailResponse(
        user=UserResponse.model_validate(user),
        mentees=[MenteeResponse.model_validate(m) for m in mentees.list_by_buddy(user.id)],
        can_be_deleted=permission.allowed,
        delete_reason=permission.reason,
    )


@router.patch("/{email}", response_model=UserResponse)
def update_user(
    email: str,
    data: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    user = _get_user_or_404(users, email)
    require(can_user_edit_user(current_user, user), "Not allowed to edit this user")
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "role" in changes and changes["role"] != user.role:
        if not can_user_assign_role(current_user, Role(changes["role"])):
            raise FormValidationError({"role": ROLE_NOT_ALLOWED})
    start = changes.get("agreement_start_date", user.agreement_start_date)
    end = changes.get("agreement_end_date", user.agreement_end_date)
    if start and end and end < start:
        raise FormValidationError({"agreement_end_date": common.END_BEFORE_START_ERROR})
    if not changes:
        return UserResponse.model_validate(user)
    updated = users.update(email, **changes)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(updated)


@router.delete("/{email}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    email: str,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    user = _get_user_or_404(users, email)
    permission = users.can_user_delete_user(current_user, user)
    require(permission.allowed, permission.reason)
    users.delete(user.id)
    logger.info("%s deleted user %s", current_user.id, user.id)
