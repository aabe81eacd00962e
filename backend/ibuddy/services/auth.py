"""
Auth service: password hashing and JWT creation/verification.
Token subject is the user id ("User#<email>").
"""
import secrets
import string
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from ibuddy.config import settings

# bcrypt reads at most 72 bytes
BCRYPT_MAX_BYTES = 71

PASSWORD_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase + string.punctuation


def _truncate_to_bytes(s: str, max_bytes: int = BCRYPT_MAX_BYTES) -> bytes:
    """Truncate string to at most max_bytes UTF-8; return bytes for bcrypt."""
    if not s:
        return b""
    encoded = s.encode("utf-8")
    if len(encoded) <= max_bytes:
        return encoded
    return encoded[:max_bytes]


def hash_password(password: str) -> str:
    """Hash password for storage. Raises ValueError if password is None."""
    if password is None:
        raise ValueError("password is required")
    raw = _truncate_to_bytes(password)
    hashed = bcrypt.hashpw(raw, bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Constant-time bcrypt comparison; malformed hashes never match."""
    raw = _truncate_to_bytes(plain or "")
    try:
        return bcrypt.checkpw(raw, (hashed or "").encode("utf-8"))
    except ValueError:
        return False


def generate_random_password(length: int = 20) -> str:
    """Password for accounts created by staff; always contains every character class."""
    while True:
        password = "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
        if (
            any(c.isdigit() for c in password)
            and any(c.islower() for c in password)
            and any(c.isupper() for c in password)
            and any(c in string.punctuation for c in password)
        ):
            return password


def create_access_token(user_id: str, email: str, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
    # JWT exp must be numeric (Unix timestamp), not datetime
    payload = {"sub": user_id, "email": email, "role": role, "exp": int(expire.timestamp())}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
