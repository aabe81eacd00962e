"""
Mentee and note request/response schemas.
"""
from datetime import date, datetime

from pydantic import BaseModel, EmailStr, ValidationInfo, field_validator

from ibuddy.models.mentee import Degree, Gender, MenteeStatus
from ibuddy.schemas import common


class MenteeResponse(BaseModel):
    id: str
    buddy_id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    gender: Gender
    degree: Degree
    country_code: str
    home_university: str
    host_faculty: str
    agreement_start_date: date
    agreement_end_date: date
    status: MenteeStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class MenteeCreateRequest(BaseModel):
    buddy_id: str
    first_name: str
    last_name: str
    email: EmailStr
    gender: Gender
    degree: Degree
    country_code: str
    home_university: str
    host_faculty: str
    agreement_start_date: date
    agreement_end_date: date
    # Optional first note, written by the creating user
    notes: str | None = None

    @field_validator("buddy_id")
    @classmethod
    def buddy_required(cls, v: str) -> str:
        return common.required_string(v, "Buddy")

    @field_validator("first_name")
    @classmethod
    def first_name_valid(cls, v: str) -> str:
        return common.english_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def last_name_valid(cls, v: str) -> str:
        return common.english_name(v, "Last name")

    @field_validator("country_code")
    @classmethod
    def country_valid(cls, v: str) -> str:
        return common.country_code(v)

    @field_validator("home_university")
    @classmethod
    def home_university_required(cls, v: str) -> str:
        return common.required_string(v, "Home university")

    @field_validator("host_faculty")
    @classmethod
    def host_faculty_required(cls, v: str) -> str:
        return common.required_string(v, "Host faculty")

    @field_validator("agreement_end_date")
    @classmethod
    def end_date_valid(cls, v: date, info: ValidationInfo) -> date:
        return common.agreement_end_date(v, info.data.get("agreement_start_date"))

    @field_validator("notes")
    @classmethod
    def notes_length(cls, v: str | None) -> str | None:
        return common.max_length(v, common.MAX_LONG_TEXT_LENGTH, "Note")


class MenteeUpdateRequest(BaseModel):
    buddy_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    gender: Gender | None = None
    degree: Degree | None = None
    country_code: str | None = None
    home_university: str | None = None
    host_faculty: str | None = None
    agreement_start_date: date | None = None
    agreement_end_date: date | None = None
    status: MenteeStatus | None = None

    @field_validator("first_name")
    @classmethod
    def first_name_valid(cls, v: str | None) -> str | None:
        return None if v is None else common.english_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def last_name_valid(cls, v: str | None) -> str | None:
        return None if v is None else common.english_name(v, "Last name")

    @field_validator("country_code")
    @classmethod
    def country_valid(cls, v: str | None) -> str | None:
        return None if v is None else common.country_code(v)

    @field_validator("buddy_id", "home_university", "host_faculty")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        return None if v is None else common.required_string(v)

    @field_validator("agreement_end_date")
    @classmethod
    def end_date_valid(cls, v: date | None, info: ValidationInfo) -> date | None:
        return common.end_not_before_start(v, info.data.get("agreement_start_date"))


class MenteeStatusRequest(BaseModel):
    status: MenteeStatus


class StatusOption(BaseModel):
    value: MenteeStatus
    label: str


class NoteRequest(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_valid(cls, v: str) -> str:
        v = common.required_string(v, "Note")
        return common.max_length(v, common.MAX_LONG_TEXT_LENGTH, "Note")


class NoteResponse(BaseModel):
    id: str
    mentee_id: str
    content: str
    author_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
