"""
Field validators shared by the request schemas. Each returns the cleaned value or
raises ValueError with the message shown next to the form field.
"""
import re
import string
from datetime import date

_ENGLISH_NAME = re.compile(r"^[A-Za-z ]+$")
_COUNTRY_CODE = re.compile(r"^[A-Za-z]{2}$")

NAME_MIN_LENGTH = 2
MAX_TEXT_LENGTH = 255
MAX_LONG_TEXT_LENGTH = 2000
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 64

END_DATE_ERROR = "End date must be in the future and after the start date"
END_BEFORE_START_ERROR = "End date must not be before the start date"


def required_string(value: str | None, field_name: str = "Field") -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{field_name} is required")
    return value


def english_name(value: str | None, field_name: str = "Name") -> str:
    value = required_string(value, field_name)
    if len(value) < NAME_MIN_LENGTH:
        raise ValueError(f"{field_name} is too short")
    if len(value) > MAX_TEXT_LENGTH:
        raise ValueError(f"{field_name} is too long")
    if not _ENGLISH_NAME.match(value):
        raise ValueError(f"{field_name} must contain only English letters and spaces")
    return value


def strong_password(value: str | None, field_name: str = "Password") -> str:
    value = value or ""
    if not value:
        raise ValueError(f"{field_name} is required")
    if len(value) > PASSWORD_MAX_LENGTH:
        raise ValueError(f"{field_name} is too long")
    if (
        len(value) < PASSWORD_MIN_LENGTH
        or not any(c.isdigit() for c in value)
        or not any(c.islower() for c in value)
        or not any(c.isupper() for c in value)
        or not any(c in string.punctuation for c in value)
    ):
        raise ValueError(
            f"{field_name} is too weak, it should be at least 8 characters long, contain numbers, "
            "lowercase letters, uppercase letters, and symbols"
        )
    return value


def max_length(value: str | None, limit: int, field_name: str = "Field") -> str | None:
    if value is not None and len(value) > limit:
        raise ValueError(f"{field_name} cannot be too long")
    return value


def country_code(value: str | None) -> str:
    value = required_string(value, "Country")
    if not _COUNTRY_CODE.match(value):
        raise ValueError("Country is not a valid country")
    return value.upper()


def agreement_end_date(end: date | None, start: date | None, today: date | None = None) -> date | None:
    """End date must lie after today and not before the start date (start may be in the past)."""
    if end is None or start is None:
        return end
    today = today or date.today()
    if end <= today or end < start:
        raise ValueError(END_DATE_ERROR)
    return end


def end_not_before_start(end: date | None, start: date | None) -> date | None:
    """Edits of an existing agreement: only the order of the two dates is checked."""
    if end is not None and start is not None and end < start:
        raise ValueError(END_BEFORE_START_ERROR)
    return end
