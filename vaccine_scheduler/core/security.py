from typing import Union
from passlib.crypto.digest import pbkdf2_hmac
import secrets
from enum import Enum

from .config import settings

# Characters that satisfy the "special character" rule of the password policy
SPECIAL_CHARACTERS = frozenset("!@#?")
MIN_PASSWORD_LENGTH = 8

class UserRole(str, Enum):
    PATIENT = "patient"
    CAREGIVER = "caregiver"

# Password utilities
def generate_salt() -> bytes:
    """Generate a random per-identity salt."""
    return secrets.token_bytes(settings.PASSWORD_SALT_BYTES)

def generate_hash(password: Union[str, bytes], salt: bytes) -> bytes:
    """Derive the stored password hash (PBKDF2-HMAC-SHA1) for password and salt."""
    return pbkdf2_hmac(
        "sha1",
        password,
        salt,
        settings.PASSWORD_HASH_ROUNDS,
        settings.PASSWORD_HASH_BYTES,
    )

def verify_password(plain_password: str, salt: bytes, password_hash: bytes) -> bool:
    """Recompute the hash with the stored salt and compare in constant time."""
    return secrets.compare_digest(generate_hash(plain_password, salt), password_hash)

def is_strong_password(password: str) -> bool:
    """
    Password policy: at least 8 characters with a lowercase letter, an
    uppercase letter, a digit and one of ``! @ # ?``.
    """
    return (
        len(password) >= MIN_PASSWORD_LENGTH
        and any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(c.isdigit() for c in password)
        and any(c in SPECIAL_CHARACTERS for c in password)
    )

def generate_session_token() -> str:
    """Generate an opaque token identifying an API session."""
    return secrets.token_urlsafe(32)
