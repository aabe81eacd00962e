"""
Mentee and Note models. A mentee is the root item of its item collection
(pk = sk = "Mentee#<id>"); notes live in the same partition under "Note#<id>" sort keys.
"""
import enum
from datetime import date, datetime
from typing import Literal

from ibuddy.models.base import StoredModel


class MenteeStatus(str, enum.Enum):
    ASSIGNED = "assigned"
    CONTACTED = "contacted"
    IN_TOUCH = "in_touch"
    ARRIVED = "arrived"
    MET = "met"
    SERVED = "served"
    REJECTED = "rejected"
    UNRESPONSIVE = "unresponsive"

    @property
    def label(self) -> str:
        """Human readable: "in_touch" -> "In touch"."""
        return self.value.replace("_", " ").capitalize()


INITIAL_STATUS = MenteeStatus.ASSIGNED

_PRE_ARRIVAL = (MenteeStatus.ASSIGNED, MenteeStatus.CONTACTED, MenteeStatus.IN_TOUCH)

# Used only when STRICT_MENTEE_STATUS_TRANSITIONS is on.
STATUS_TRANSITIONS: dict[MenteeStatus, frozenset[MenteeStatus]] = {
    MenteeStatus.ASSIGNED: frozenset({MenteeStatus.CONTACTED}),
    MenteeStatus.CONTACTED: frozenset({MenteeStatus.IN_TOUCH}),
    MenteeStatus.IN_TOUCH: frozenset({MenteeStatus.ARRIVED}),
    MenteeStatus.ARRIVED: frozenset({MenteeStatus.MET}),
    MenteeStatus.MET: frozenset({MenteeStatus.SERVED}),
    MenteeStatus.SERVED: frozenset(),
    MenteeStatus.REJECTED: frozenset(),
    MenteeStatus.UNRESPONSIVE: frozenset({MenteeStatus.CONTACTED, MenteeStatus.IN_TOUCH, MenteeStatus.REJECTED}),
}
for _status in _PRE_ARRIVAL:
    STATUS_TRANSITIONS[_status] = STATUS_TRANSITIONS[_status] | {MenteeStatus.REJECTED, MenteeStatus.UNRESPONSIVE}


def is_transition_allowed(current: MenteeStatus, new: MenteeStatus, strict: bool) -> bool:
    if not strict or current == new:
        return True
    return new in STATUS_TRANSITIONS[current]


Gender = Literal["male", "female"]
Degree = Literal["bachelor", "master", "others"]

DEGREE_LABELS = {"bachelor": "Bachelor's", "master": "Master's", "others": "Others"}


class Mentee(StoredModel):
    id: str
    buddy_id: str
    first_name: str
    last_name: str
    email: str
    searchable_email: str = ""
    gender: Gender
    degree: Degree
    country_code: str
    home_university: str
    host_faculty: str
    agreement_start_date: date
    agreement_end_date: date
    status: MenteeStatus = INITIAL_STATUS
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Note(StoredModel):
    id: str
    mentee_id: str
    content: str
    author_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
