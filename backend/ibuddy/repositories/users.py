"""
User repository: users and passwords tables, both keyed by the email-derived user id.
A user and its password are always written and removed in one transaction.
"""
import logging
from datetime import date

from ibuddy.errors import FormValidationError, ensure
from ibuddy.models.base import utcnow
from ibuddy.models.user import ROLE_DISPLAY_ORDER, Role, User
from ibuddy.services.auth import hash_password, verify_password
from ibuddy.services.permissions import DeletePermission, can_user_delete_user as _can_delete
from ibuddy.store import PASSWORDS, USERS, Delete, KeyValueStore, Put
from ibuddy.store.keys import user_id_from_email

logger = logging.getLogger(__name__)

# Not changeable through update(): the id is derived from the email.
_IMMUTABLE_FIELDS = frozenset({"id", "email", "created_at"})


class UserRepository:
    def __init__(self, store: KeyValueStore):
        self._store = store

    # ------------------------------------------------------------------
    # Reads
    def get_by_id(self, user_id: str) -> User | None:
        return User.from_item(self._store.get(USERS, user_id))

    def get_by_email(self, email: str) -> User | None:
        return self.get_by_id(user_id_from_email(email))

    def has_user_with_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def list_all(self) -> list[User]:
        return [User.from_item(i) for i in self._store.scan(USERS)]

    def list_active_buddies(self, today: date | None = None) -> list[User]:
        """Users whose agreement has not ended yet (candidates for mentee assignment)."""
        return [u for u in self.list_all() if u.is_agreement_active(today)]

    def list_with_mentee_counts(self) -> list[tuple[User, int]]:
        """All users with their mentee count; most privileged role first, then most mentees."""
        from ibuddy.repositories.mentees import MenteeRepository
        mentees = MenteeRepository(self._store)
        rows = [(u, mentees.count_by_buddy(u.id)) for u in self.list_all()]
        order = {role: i for i, role in enumerate(ROLE_DISPLAY_ORDER)}
        rows.sort(key=lambda row: (order[row[0].role], -row[1]))
        return rows

    # ------------------------------------------------------------------
    # Writes
    def create(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        faculty: str = "",
        role: Role = Role.BUDDY,
        agreement_start_date: date | None = None,
        agreement_end_date: date | None = None,
    ) -> User:
        """Write user + password together and return the user as read back from the store."""
        user_id = user_id_from_email(email)
        if self._store.get(USERS, user_id) is not None:
            raise FormValidationError({"email": "A user with this email already exists"})
        now = utcnow()
        user = User(
            id=user_id,
            email=email.strip(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            faculty=(faculty or "").strip(),
            role=role,
            agreement_start_date=agreement_start_date,
            agreement_end_date=agreement_end_date,
            created_at=now,
            updated_at=now,
        )
        self._store.transact_write([
            Put(PASSWORDS, user_id, {"userId": user_id, "password": hash_password(password)}),
            Put(USERS, user_id, user.to_item()),
        ])
        created = self.get_by_id(user_id)
        ensure(created, f"User {user_id} not found after being created")
        logger.info("Created user %s with role %s", user_id, created.role.value)
        return created

    def update(self, email: str, **changes) -> User | None:
        """Partial update; fields not given are kept. Returns None if the user does not exist."""
        bad = _IMMUTABLE_FIELDS.intersection(changes)
        if bad:
            raise ValueError(f"Cannot update {', '.join(sorted(bad))}")
        user_id = user_id_from_email(email)
        for name in ("first_name", "last_name", "faculty"):
            if isinstance(changes.get(name), str):
                changes[name] = changes[name].strip()
        changes["updated_at"] = utcnow()
        item = self._store.update(USERS, user_id, set_values=User.item_values(changes))
        if item is None:
            return None
        return self.get_by_id(user_id)

    def set_password(self, user_id: str, password: str) -> None:
        self._store.put(PASSWORDS, user_id, {"userId": user_id, "password": hash_password(password)})

    def verify_login(self, email: str, password: str) -> User | None:
        """The user on success; None for both unknown email and wrong password."""
        user_id = user_id_from_email(email)
        record = self._store.get(PASSWORDS, user_id)
        if not record or not verify_password(password, record.get("password", "")):
            return None
        return self.get_by_id(user_id)

    def delete(self, user_id: str) -> None:
        self._store.transact_write([Delete(PASSWORDS, user_id), Delete(USERS, user_id)])
        logger.info("Deleted user %s", user_id)

    def delete_by_email(self, email: str) -> None:
        self.delete(user_id_from_email(email))

    # ------------------------------------------------------------------
    def can_user_delete_user(self, actor: User, target: User) -> DeletePermission:
        from ibuddy.repositories.mentees import MenteeRepository
        mentee_count = MenteeRepository(self._store).count_by_buddy(target.id)
        return _can_delete(actor, target, mentee_count)
