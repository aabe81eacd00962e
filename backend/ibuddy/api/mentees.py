"""
Mentees API: CRUD for staff, status updates for the assigned buddy, and the notes of a
mentee. Buddies only ever see their own mentees.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ibuddy.api.deps import get_current_user, get_mentee_repository, get_user_repository
from ibuddy.errors import FormValidationError, require
from ibuddy.models.mentee import Mentee, MenteeStatus, Note
from ibuddy.models.user import User
from ibuddy.repositories import MenteeRepository, UserRepository
from ibuddy.schemas import common
from ibuddy.schemas.mentees import (
    MenteeCreateRequest,
    MenteeResponse,
    MenteeStatusRequest,
    MenteeUpdateRequest,
    NoteRequest,
    NoteResponse,
    StatusOption,
)
from ibuddy.services.permissions import (
    can_user_mutate_mentee,
    can_user_mutate_note,
    can_user_update_mentee_status,
    can_user_view_mentee,
    is_above_buddy,
)

router = APIRouter(prefix="/mentees", tags=["mentees"])
logger = logging.getLogger(__name__)

EMAIL_TAKEN = "A mentee with this email address already exists."
BUDDY_MISSING = "Buddy does not exist"


def _get_mentee_or_404(mentees: MenteeRepository, mentee_id: str) -> Mentee:
    mentee = mentees.get(mentee_id)
    if not mentee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mentee not found")
    return mentee


def _get_note_or_404(mentees: MenteeRepository, mentee_id: str, note_id: str) -> Note:
    note = mentees.get_note(mentee_id, note_id)
    if not note:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return note


def _check_buddy(users: UserRepository, buddy_id: str) -> None:
    if users.get_by_id(buddy_id) is None:
        raise FormValidationError({"buddy_id": BUDDY_MISSING})


@router.get("", response_model=list[MenteeResponse])
def list_mentees(
    only_mine: bool = False,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    if only_mine or not is_above_buddy(current_user):
        return [MenteeResponse.model_validate(m) for m in mentees.list_by_buddy(current_user.id)]
    return [MenteeResponse.model_validate(m) for m in mentees.list_all()]


@router.get("/statuses", response_model=list[StatusOption])
def list_statuses(current_user: User = Depends(get_current_user)):
    return [StatusOption(value=s, label=s.label) for s in MenteeStatus]


@router.post("", response_model=MenteeResponse, status_code=status.HTTP_201_CREATED)
def create_mentee(
    data: MenteeCreateRequest,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    """Create a mentee; a non-empty `notes` becomes the first note, authored by the creator."""
    require(can_user_mutate_mentee(current_user), "Not allowed to create mentees")
    _check_buddy(users, data.buddy_id)
    if not mentees.is_email_unique(data.email):
        raise FormValidationError({"email": EMAIL_TAKEN})
    fields = data.model_dump(exclude={"notes"})
    mentee = mentees.create(**fields)
    if data.notes and data.notes.strip():
        mentees.create_note(mentee.id, current_user.id, data.notes.strip())
    return MenteeResponse.model_validate(mentee)


@router.get("/{mentee_id}", response_model=MenteeResponse)
def get_mentee(
    mentee_id: str,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    mentee = _get_mentee_or_404(mentees, mentee_id)
    require(can_user_view_mentee(current_user, mentee), "Not allowed to view this mentee")
    return MenteeResponse.model_validate(mentee)


@router.patch("/{mentee_id}", response_model=MenteeResponse)
def update_mentee(
    mentee_id: str,
    data: MenteeUpdateRequest,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    mentee = _get_mentee_or_404(mentees, mentee_id)
    require(can_user_mutate_mentee(current_user), "Not allowed to edit mentees")
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "buddy_id" in changes and changes["buddy_id"] != mentee.buddy_id:
        _check_buddy(users, changes["buddy_id"])
    if "email" in changes and not mentees.is_email_unique(changes["email"], exclude_id=mentee_id):
        raise FormValidationError({"email": EMAIL_TAKEN})
    start = changes.get("agreement_start_date", mentee.agreement_start_date)
    end = changes.get("agreement_end_date", mentee.agreement_end_date)
    if end < start:
        raise FormValidationError({"agreement_end_date": common.END_BEFORE_START_ERROR})
    updated = mentees.update(mentee_id, **changes)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mentee not found")
    return MenteeResponse.model_validate(updated)


@router.put("/{mentee_id}/status", response_model=MenteeResponse)
def update_mentee_status(
    mentee_id: str,
    data: MenteeStatusRequest,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    mentee = _get_mentee_or_404(mentees, mentee_id)
    require(can_user_update_mentee_status(current_user, mentee), "Not allowed to change this mentee's status")
    updated = mentees.update_status(mentee_id, data.status)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mentee not found")
    logger.info("%s set mentee %s status %s -> %s", current_user.id, mentee_id, mentee.status.value, updated.status.value)
    return MenteeResponse.model_validate(updated)


@router.delete("/{mentee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_mentee(
    mentee_id: str,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    _get_mentee_or_404(mentees, mentee_id)
    require(can_user_mutate_mentee(current_user), "Not allowed to delete mentees")
    mentees.delete(mentee_id)


# ----------------------------------------------------------------------
# Notes
@router.get("/{mentee_id}/notes", response_model=list[NoteResponse])
def list_notes(
    mentee_id: str,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    mentee = _get_mentee_or_404(mentees, mentee_id)
    require(can_user_view_mentee(current_user, mentee), "Not allowed to view this mentee")
    return [NoteResponse.model_validate(n) for n in mentees.list_notes(mentee_id)]


@router.post("/{mentee_id}/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(
    mentee_id: str,
    data: NoteRequest,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    mentee = _get_mentee_or_404(mentees, mentee_id)
    require(can_user_view_mentee(current_user, mentee), "Not allowed to add notes to this mentee")
    note = mentees.create_note(mentee_id, current_user.id, data.content)
    if not note:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mentee not found")
    return NoteResponse.model_validate(note)


@router.patch("/{mentee_id}/notes/{note_id}", response_model=NoteResponse)
def update_note(
    mentee_id: str,
    note_id: str,
    data: NoteRequest,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    note = _get_note_or_404(mentees, mentee_id, note_id)
    require(can_user_mutate_note(current_user, note), "Only the author can edit this note")
    updated = mentees.update_note(mentee_id, note_id, data.content)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return NoteResponse.model_validate(updated)


@router.delete("/{mentee_id}/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note(
    mentee_id: str,
    note_id: str,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
):
    note = _get_note_or_404(mentees, mentee_id, note_id)
    require(can_user_mutate_note(current_user, note), "Only the author can delete this note")
    mentees.delete_note(mentee_id, note_id)
