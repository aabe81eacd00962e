"""
Auth routes: sign up (role BUDDY), sign in (JWT), current user, password change.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ibuddy.api.deps import get_current_user, get_user_repository
from ibuddy.errors import FormValidationError
from ibuddy.models.user import Role, User
from ibuddy.repositories import UserRepository
from ibuddy.schemas.auth import ChangePasswordRequest, SignInRequest, SignUpRequest, TokenResponse
from ibuddy.schemas.users import UserResponse
from ibuddy.services.auth import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _token_for(user: User) -> TokenResponse:
    token = create_access_token(user.id, user.email, user.role.value)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(data: SignUpRequest, users: UserRepository = Depends(get_user_repository)):
    """Self-registration; new accounts are buddies. Returns a session token."""
    if users.has_user_with_email(data.email):
        raise FormValidationError({"email": "A user with this email already exists"})
    user = users.create(
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        role=Role.BUDDY,
    )
    logger.info("Signed up %s", user.id)
    return _token_for(user)


@router.post("/signin", response_model=TokenResponse)
def signin(data: SignInRequest, users: UserRepository = Depends(get_user_repository)):
    """Login with email/password; returns JWT."""
    user = users.verify_login(data.email, data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return _token_for(user)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)


@router.post("/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    if users.verify_login(current_user.email, data.current_password) is None:
        raise FormValidationError({"current_password": "Password is incorrect"})
    users.set_password(current_user.id, data.new_password)
    logger.info("Password changed for %s", current_user.id)
