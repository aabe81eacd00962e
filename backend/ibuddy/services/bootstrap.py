"""
First ADMIN account from BOOTSTRAP_ADMIN_EMAIL / BOOTSTRAP_ADMIN_PASSWORD, so a fresh
deployment can sign in and create the other staff accounts.
"""
import logging

from ibuddy.config import settings
from ibuddy.models.user import Role, User
from ibuddy.repositories import UserRepository

logger = logging.getLogger(__name__)


def ensure_bootstrap_admin(users: UserRepository) -> User | None:
    """Create the configured admin if both settings are set and the account does not exist.
    Returns the created user, or None when nothing was done."""
    email = (settings.bootstrap_admin_email or "").strip()
    password = settings.bootstrap_admin_password or ""
    if not email or not password:
        return None
    if users.has_user_with_email(email):
        logger.debug("Bootstrap admin %s already exists", email)
        return None
    user = users.create(
        email=email,
        password=password,
        first_name="Admin",
        last_name="Admin",
        role=Role.ADMIN,
    )
    logger.warning("Created bootstrap admin %s; change its password after the first sign in", user.id)
    return user
