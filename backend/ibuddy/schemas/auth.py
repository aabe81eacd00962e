"""
Auth request/response schemas.
"""
from pydantic import BaseModel, EmailStr, field_validator

from ibuddy.schemas import common
from ibuddy.schemas.users import UserResponse


class SignUpRequest(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    password: str

    @field_validator("first_name")
    @classmethod
    def first_name_valid(cls, v: str) -> str:
        return common.english_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def last_name_valid(cls, v: str) -> str:
        return common.english_name(v, "Last name")

    @field_validator("password")
    @classmethod
    def password_strong(cls, v: str) -> str:
        return common.strong_password(v)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes (bcrypt limit)")
        return v


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strong(cls, v: str) -> str:
        return common.strong_password(v, "New password")


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
