"""
Authorization predicates. Pure functions of (actor, subject): no I/O, no side effects.
ADMIN bypasses ownership checks; otherwise ownership/authorship or rank decides.
"""
from typing import NamedTuple

from ibuddy.models.asset import Asset
from ibuddy.models.faq import FAQ
from ibuddy.models.mentee import Mentee, Note
from ibuddy.models.user import Role, User

CANNOT_DELETE_SELF = "cannot delete yourself"
CANNOT_DELETE_ADMIN = "cannot delete an admin"
CANNOT_DELETE_HIGHER_ROLE = "cannot delete a user with the same or a higher role"
CANNOT_DELETE_WITH_MENTEES = "cannot delete a user who still has assigned mentees"


class DeletePermission(NamedTuple):
    allowed: bool
    reason: str = ""


def is_admin(user: User) -> bool:
    return user.role == Role.ADMIN


def is_above_buddy(user: User) -> bool:
    return user.role.outranks(Role.BUDDY)


# ----------------------------------------------------------------------
# Users
def can_user_delete_user(actor: User, target: User, target_mentee_count: int) -> DeletePermission:
    """First failing rule wins: self, admin target, same-or-higher role, assigned mentees."""
    if actor.id == target.id:
        return DeletePermission(False, CANNOT_DELETE_SELF)
    if target.role == Role.ADMIN:
        return DeletePermission(False, CANNOT_DELETE_ADMIN)
    if target.role.rank >= actor.role.rank:
        return DeletePermission(False, CANNOT_DELETE_HIGHER_ROLE)
    if target_mentee_count > 0:
        return DeletePermission(False, CANNOT_DELETE_WITH_MENTEES)
    return DeletePermission(True)


def can_user_assign_role(actor: User, role: Role) -> bool:
    """Non-admins may only hand out roles below their own."""
    return is_admin(actor) or role.rank < actor.role.rank


def can_user_edit_user(actor: User, target: User) -> bool:
    return actor.id == target.id or is_admin(actor) or actor.role.outranks(target.role)


def can_user_list_buddies(actor: User) -> bool:
    return is_above_buddy(actor)


def can_user_list_users(actor: User) -> bool:
    """The users section shows assigned mentees, so it is staff only."""
    return is_above_buddy(actor)


# ----------------------------------------------------------------------
# Mentees and notes
def can_user_view_mentee(actor: User, mentee: Mentee) -> bool:
    return is_above_buddy(actor) or actor.id == mentee.buddy_id


def can_user_update_mentee_status(actor: User, mentee: Mentee) -> bool:
    return is_above_buddy(actor) or actor.id == mentee.buddy_id


def can_user_mutate_mentee(actor: User) -> bool:
    """Create, edit, reassign and delete mentees."""
    return is_above_buddy(actor)


def can_user_mutate_note(actor: User, note: Note) -> bool:
    return is_admin(actor) or actor.id == note.author_id


# ----------------------------------------------------------------------
# Assets
def can_view_asset(asset: Asset, user: User) -> bool:
    return is_admin(user) or user.id == asset.owner_id or user.id in asset.shared_users


def can_mutate_asset(asset: Asset, user: User) -> bool:
    """Sharing grants view access only."""
    return is_admin(user) or user.id == asset.owner_id


# ----------------------------------------------------------------------
# FAQs (rank-based rather than ownership-based)
def can_user_create_faq(actor: User) -> bool:
    return is_above_buddy(actor)


def can_user_mutate_faq(actor: User, faq: FAQ) -> bool:
    return actor.id == faq.author_id or is_above_buddy(actor)
