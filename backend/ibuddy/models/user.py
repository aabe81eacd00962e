"""
User model: identity derived from email, role (BUDDY < HR < PRESIDENT < ADMIN).
Passwords are stored separately (passwords table, same key) as bcrypt hashes.
"""
import enum
from datetime import date, datetime

from ibuddy.models.base import StoredModel


class Role(str, enum.Enum):
    BUDDY = "BUDDY"
    HR = "HR"
    PRESIDENT = "PRESIDENT"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        """Privilege level; compare ranks, never role names."""
        return _ROLE_RANKS[self]

    def outranks(self, other: "Role") -> bool:
        return self.rank > other.rank

    @property
    def label(self) -> str:
        return _ROLE_LABELS[self]


_ROLE_RANKS = {Role.BUDDY: 0, Role.HR: 1, Role.PRESIDENT: 2, Role.ADMIN: 3}
_ROLE_LABELS = {Role.BUDDY: "Buddy", Role.HR: "HR", Role.PRESIDENT: "President", Role.ADMIN: "Admin"}

# User list order: most privileged first
ROLE_DISPLAY_ORDER = sorted(Role, key=lambda r: r.rank, reverse=True)


class User(StoredModel):
    id: str  # "User#<lower-cased email>"
    email: str
    first_name: str
    last_name: str
    faculty: str = ""
    role: Role = Role.BUDDY
    agreement_start_date: date | None = None
    agreement_end_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_agreement_active(self, today: date | None = None) -> bool:
        today = today or date.today()
        return self.agreement_end_date is not None and self.agreement_end_date > today
