"""
Mentee repository. A mentee and its notes form one item collection in the mentees table:

    pk = "Mentee#<id>", sk = "Mentee#<id>"   mentee
    pk = "Mentee#<id>", sk = "Note#<id>"     note

Deleting a mentee removes the whole collection (notes first listed, then deleted
concurrently together with the root item).
"""
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from ibuddy.config import settings
from ibuddy.errors import InvalidStatusTransition, ensure
from ibuddy.models.base import utcnow
from ibuddy.models.mentee import INITIAL_STATUS, Mentee, MenteeStatus, Note, is_transition_allowed
from ibuddy.store import MENTEES, KeyValueStore
from ibuddy.store.keys import MENTEE, NOTE, ChildKey, mentee_key, normalize_email, note_key

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "searchable_email"})


class MenteeRepository:
    def __init__(self, store: KeyValueStore, strict_status: bool | None = None, max_workers: int | None = None):
        self._store = store
        self._strict_status = settings.strict_mentee_status_transitions if strict_status is None else strict_status
        self._max_workers = max_workers or settings.fanout_max_workers

    # ------------------------------------------------------------------
    # Mentees
    def get(self, mentee_id: str) -> Mentee | None:
        key = mentee_key(mentee_id).encode()
        return Mentee.from_item(self._store.get(MENTEES, key, key))

    def list_by_buddy(self, buddy_id: str) -> list[Mentee]:
        return [Mentee.from_item(i) for i in self._store.query_index(MENTEES, "menteesByBuddyId", buddy_id)]

    def count_by_buddy(self, buddy_id: str) -> int:
        return len(self._store.query_index(MENTEES, "menteesByBuddyId", buddy_id))

    def list_all(self) -> list[Mentee]:
        """Full scan of mentee root items; fine for the data volume of one program."""
        items = self._store.scan(MENTEES, sk_prefix=ChildKey.sort_prefix(MENTEE))
        return [Mentee.from_item(i) for i in items]

    def is_email_unique(self, email: str, exclude_id: str | None = None) -> bool:
        matches = self._store.query_index(MENTEES, "menteesBySearchableEmail", normalize_email(email))
        return all(m.get("id") == exclude_id for m in matches)

    def create(
        self,
        *,
        buddy_id: str,
        first_name: str,
        last_name: str,
        email: str,
        gender: str,
        degree: str,
        country_code: str,
        home_university: str,
        host_faculty: str,
        agreement_start_date: date,
        agreement_end_date: date,
        status: MenteeStatus = INITIAL_STATUS,
    ) -> Mentee:
        mentee_id = uuid.uuid4().hex
        key = mentee_key(mentee_id).encode()
        now = utcnow()
        mentee = Mentee(
            id=mentee_id,
            buddy_id=buddy_id,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip(),
            searchable_email=normalize_email(email),
            gender=gender,
            degree=degree,
            country_code=country_code.strip().upper(),
            home_university=home_university.strip(),
            host_faculty=host_faculty.strip(),
            agreement_start_date=agreement_start_date,
            agreement_end_date=agreement_end_date,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self._store.put(MENTEES, key, mentee.to_item(), sk=key)
        created = self.get(mentee_id)
        ensure(created, f"Mentee {mentee_id} not found after being created")
        logger.info("Created mentee %s for buddy %s", mentee_id, buddy_id)
        return created

    def update(self, mentee_id: str, **changes) -> Mentee | None:
        """Partial update; fields not in `changes` keep their stored values.
        Returns the mentee as read back, or None if it does not exist."""
        bad = _IMMUTABLE_FIELDS.intersection(changes)
        if bad:
            raise ValueError(f"Cannot update {', '.join(sorted(bad))}")
        current = self.get(mentee_id)
        if current is None:
            return None
        if "status" in changes:
            self._check_transition(current.status, MenteeStatus(changes["status"]))
        for name in ("first_name", "last_name", "email", "home_university", "host_faculty"):
            if isinstance(changes.get(name), str):
                changes[name] = changes[name].strip()
        if isinstance(changes.get("country_code"), str):
            changes["country_code"] = changes["country_code"].strip().upper()
        if "email" in changes:
            changes["searchable_email"] = normalize_email(changes["email"])
        changes["updated_at"] = utcnow()
        key = mentee_key(mentee_id).encode()
        if self._store.update(MENTEES, key, key, set_values=Mentee.item_values(changes)) is None:
            return None
        return self.get(mentee_id)

    def update_status(self, mentee_id: str, status: MenteeStatus) -> Mentee | None:
        return self.update(mentee_id, status=MenteeStatus(status))

    def _check_transition(self, current: MenteeStatus, new: MenteeStatus) -> None:
        if not is_transition_allowed(current, new, self._strict_status):
            raise InvalidStatusTransition(current.value, new.value)

    def delete(self, mentee_id: str) -> int:
        """Delete the mentee and every note in its collection. Returns the number of notes removed."""
        key = mentee_key(mentee_id).encode()
        note_sort_keys = [
            note_key(mentee_id, n.id).sort_key for n in self.list_notes(mentee_id)
        ]
        sort_keys = [key] + note_sort_keys
        workers = max(1, min(self._max_workers, len(sort_keys)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._store.delete, MENTEES, key, sk) for sk in sort_keys]
        errors = [f.exception() for f in futures if f.exception() is not None]
        if errors:
            logger.error(
                "Deleting mentee %s: %s of %s deletes failed", mentee_id, len(errors), len(sort_keys)
            )
            raise errors[0]
        logger.info("Deleted mentee %s and %s note(s)", mentee_id, len(note_sort_keys))
        return len(note_sort_keys)

    # ------------------------------------------------------------------
    # Notes
    def list_notes(self, mentee_id: str) -> list[Note]:
        """Notes of a mentee, newest first."""
        items = self._store.query(MENTEES, mentee_key(mentee_id).encode(), ChildKey.sort_prefix(NOTE))
        notes = [Note.from_item(i) for i in items]
        notes.sort(key=lambda n: n.created_at.isoformat() if n.created_at else "", reverse=True)
        return notes

    def get_note(self, mentee_id: str, note_id: str) -> Note | None:
        key = note_key(mentee_id, note_id)
        return Note.from_item(self._store.get(MENTEES, key.partition_key, key.sort_key))

    def create_note(self, mentee_id: str, author_id: str, content: str) -> Note | None:
        """None if the mentee does not exist (a note never lives outside its mentee's collection)."""
        if self.get(mentee_id) is None:
            return None
        note_id = uuid.uuid4().hex
        key = note_key(mentee_id, note_id)
        now = utcnow()
        note = Note(
            id=note_id,
            mentee_id=mentee_id,
            content=content,
            author_id=author_id,
            created_at=now,
            updated_at=now,
        )
        self._store.put(MENTEES, key.partition_key, note.to_item(), sk=key.sort_key)
        created = self.get_note(mentee_id, note_id)
        ensure(created, f"Note {note_id} not found after being created")
        return created

    def update_note(self, mentee_id: str, note_id: str, content: str) -> Note | None:
        key = note_key(mentee_id, note_id)
        item = self._store.update(
            MENTEES,
            key.partition_key,
            key.sort_key,
            set_values=Note.item_values({"content": content, "updated_at": utcnow()}),
        )
        return Note.from_item(item)

    def delete_note(self, mentee_id: str, note_id: str) -> None:
        key = note_key(mentee_id, note_id)
        self._store.delete(MENTEES, key.partition_key, key.sort_key)
