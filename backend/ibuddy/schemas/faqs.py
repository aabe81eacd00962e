"""
FAQ request/response schemas.
"""
from datetime import datetime

from pydantic import BaseModel, field_validator

from ibuddy.schemas import common


class FAQRequest(BaseModel):
    question: str
    answer: str

    @field_validator("question")
    @classmethod
    def question_required(cls, v: str) -> str:
        return common.required_string(v, "Question")

    @field_validator("answer")
    @classmethod
    def answer_required(cls, v: str) -> str:
        return common.required_string(v, "Answer")


class FAQUpdateRequest(BaseModel):
    question: str | None = None
    answer: str | None = None

    @field_validator("question")
    @classmethod
    def question_required(cls, v: str | None) -> str | None:
        return None if v is None else common.required_string(v, "Question")

    @field_validator("answer")
    @classmethod
    def answer_required(cls, v: str | None) -> str | None:
        return None if v is None else common.required_string(v, "Answer")


class FAQResponse(BaseModel):
    id: str
    author_id: str
    question: str
    answer: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
