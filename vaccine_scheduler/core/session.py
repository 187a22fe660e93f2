"""
Session state machine.

A session is ``Anonymous`` or authenticated as exactly one patient or one
caregiver. The command shell holds a single ``SessionState`` for the life of
the process; the HTTP API keeps one per client in redis via ``SessionStore``.
"""

import json
from typing import Optional

from .config import settings
from .exceptions import Forbidden, NotFound, Unauthorized
from .security import UserRole, generate_session_token

class SessionState:
    def __init__(self, role: Optional[UserRole] = None, username: Optional[str] = None):
        if (role is None) != (username is None):
            raise ValueError("role and username must be set together")
        self.role = role
        self.username = username

    @property
    def is_authenticated(self) -> bool:
        return self.role is not None

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.PATIENT

    @property
    def is_caregiver(self) -> bool:
        return self.role == UserRole.CAREGIVER

    def login(self, role: UserRole, username: str) -> None:
        """Anonymous -> Authenticated<role>. Rejected while already logged in."""
        if self.is_authenticated:
            raise Forbidden("Already logged-in!")
        self.role = UserRole(role)
        self.username = username

    def logout(self) -> str:
        """Authenticated -> Anonymous; returns the username that was logged out."""
        if not self.is_authenticated:
            raise Unauthorized("User is not logged in!")
        username = self.username
        self.role = None
        self.username = None
        return username

    def ensure_anonymous(self) -> None:
        if self.is_authenticated:
            raise Forbidden("Already logged-in!")

    def require_authenticated(self) -> str:
        if not self.is_authenticated:
            raise Unauthorized("Please login as a caregiver or patient!")
        return self.username

    def require_patient(self) -> str:
        if not self.is_authenticated:
            raise Unauthorized("Please login as a patient!")
        if not self.is_patient:
            raise Forbidden("Please login as a patient!")
        return self.username

    def require_caregiver(self) -> str:
        if not self.is_authenticated:
            raise Unauthorized("Please login as a caregiver first!")
        if not self.is_caregiver:
            raise Forbidden("Please login as a caregiver first!")
        return self.username

    def to_dict(self) -> dict:
        return {
            "role": self.role.value if self.role else None,
            "username": self.username,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionState":
        role = data.get("role")
        return cls(UserRole(role) if role else None, data.get("username"))

    def __repr__(self):
        if not self.is_authenticated:
            return "<SessionState(anonymous)>"
        return f"<SessionState(role='{self.role.value}', username='{self.username}')>"

class SessionStore:
    """Per-client sessions kept in redis under ``session:<token>``."""

    def __init__(self, redis_client, ttl_seconds: Optional[int] = None):
        self.redis = redis_client
        self.ttl = ttl_seconds or settings.SESSION_EXPIRE_MINUTES * 60

    @staticmethod
    def _key(token: str) -> str:
        return f"session:{token}"

    def create(self) -> str:
        """Open a new anonymous session and return its token."""
        token = generate_session_token()
        self.save(token, SessionState())
        return token

    def load(self, token: str) -> SessionState:
        raw = self.redis.get(self._key(token)) if token else None
        if raw is None:
            raise NotFound("Session not found or expired")
        return SessionState.from_dict(json.loads(raw))

    def save(self, token: str, state: SessionState) -> None:
        # Writing refreshes the expiry
        self.redis.setex(self._key(token), self.ttl, json.dumps(state.to_dict()))

    def delete(self, token: str) -> None:
        self.redis.delete(self._key(token))
