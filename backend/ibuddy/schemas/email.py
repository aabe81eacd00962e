"""
Bulk email request/response schemas.
"""
from pydantic import BaseModel, EmailStr, field_validator

from ibuddy.schemas import common


class BulkEmailRequest(BaseModel):
    recipients: list[EmailStr]
    subject: str
    body: str

    @field_validator("recipients")
    @classmethod
    def recipients_required(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("Recipients are required")
        return v

    @field_validator("subject")
    @classmethod
    def subject_required(cls, v: str) -> str:
        return common.required_string(v, "Title")

    @field_validator("body")
    @classmethod
    def body_required(cls, v: str) -> str:
        return common.required_string(v, "Body")


class BulkEmailResponse(BaseModel):
    # Number of emails handed to the transport
    sent: int
