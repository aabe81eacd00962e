"""
User request/response schemas.
"""
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, ValidationInfo, field_validator

from ibuddy.models.user import Role
from ibuddy.schemas import common
from ibuddy.schemas.mentees import MenteeResponse


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    faculty: str = ""
    role: Role
    agreement_start_date: date | None = None
    agreement_end_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class UserWithMenteeCount(UserResponse):
    mentee_count: int = 0


class UserCreatedResponse(BaseModel):
    user: UserResponse
    # Shown once; the account owner changes it after signing in
    temporary_password: str


class BuddyResponse(BaseModel):
    id: str
    email: str
    full_name: str
    faculty: str = ""

    class Config:
        from_attributes = True


class RoleOption(BaseModel):
    value: Role
    label: str
    disabled: bool


class UserCreateRequest(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    faculty: str
    role: Role = Role.BUDDY
    agreement_start_date: date
    agreement_end_date: date

    @field_validator("first_name")
    @classmethod
    def first_name_valid(cls, v: str) -> str:
        return common.english_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def last_name_valid(cls, v: str) -> str:
        return common.english_name(v, "Last name")

    @field_validator("faculty")
    @classmethod
    def faculty_required(cls, v: str) -> str:
        return common.required_string(v, "Faculty")

    @field_validator("agreement_end_date")
    @classmethod
    def end_date_valid(cls, v: date, info: ValidationInfo) -> date:
        return common.agreement_end_date(v, info.data.get("agreement_start_date"))


class UserUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their stored values."""

    first_name: str | None = None
    last_name: str | None = None
    faculty: str | None = None
    role: Role | None = None
    agreement_start_date: date | None = None
    agreement_end_date: date | None = None

    @field_validator("first_name")
    @classmethod
    def first_name_valid(cls, v: str | None) -> str | None:
        return None if v is None else common.english_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def last_name_valid(cls, v: str | None) -> str | None:
        return None if v is None else common.english_name(v, "Last name")

    @field_validator("faculty")
    @classmethod
    def faculty_required(cls, v: str | None) -> str | None:
        return None if v is None else common.required_string(v, "Faculty")

    @field_validator("agreement_end_date")
    @classmethod
    def end_date_valid(cls, v: date | None, info: ValidationInfo) -> date | None:
        return common.end_not_before_start(v, info.data.get("agreement_start_date"))


class UserDetailResponse(BaseModel):
    user: UserResponse
    mentees: list[MenteeResponse]
    can_be_deleted: bool
    # Why deletion is refused; empty when allowed
    delete_reason: str = ""
