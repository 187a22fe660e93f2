from typing import Optional, Tuple
import logging

from .base import BaseService
from ..models import Patient, Caregiver
from ..core.exceptions import DuplicateUsername, InvalidInput, Unauthorized
from ..core.security import (
    UserRole, generate_salt, generate_hash, verify_password, is_strong_password
)
from ..core.session import SessionState

logger = logging.getLogger(__name__)

WEAK_PASSWORD_MESSAGE = (
    "Password is not strong enough. Include mixture of upper and lowercase letters, "
    "a number, and a special character (\"!\", \"@\", \"#\", \"?\")"
)

_IDENTITY_MODELS = {
    UserRole.PATIENT: Patient,
    UserRole.CAREGIVER: Caregiver,
}

class AuthService(BaseService):
    """Credential store plus the register / login / logout transitions."""

    # Credential store
    def username_exists(self, role: UserRole, username: str) -> bool:
        """Check whether username is taken within the role's namespace."""
        model = _IDENTITY_MODELS[UserRole(role)]
        with self.transaction("checking username", commit=False):
            return self.db.query(model).filter(model.username == username).first() is not None

    def create_identity(self, role: UserRole, username: str, salt: bytes, password_hash: bytes):
        model = _IDENTITY_MODELS[UserRole(role)]
        identity = model(username=username, salt=salt, hash=password_hash)
        with self.transaction("creating account", on_conflict=DuplicateUsername):
            self.db.add(identity)
            self.db.flush()
        return identity

    def fetch_credentials(self, role: UserRole, username: str) -> Optional[Tuple[bytes, bytes]]:
        """Return the stored (salt, hash) for username, or None if unknown."""
        model = _IDENTITY_MODELS[UserRole(role)]
        with self.transaction("logging in", commit=False):
            identity = self.db.query(model).filter(model.username == username).first()
        if identity is None:
            return None
        return identity.salt, identity.hash

    # Session transitions
    def register(self, role: UserRole, username: str, password: str):
        """Create a patient or caregiver account. Does not log the caller in."""
        role = UserRole(role)
        if not username or not password:
            raise InvalidInput("Please try again!")

        if self.username_exists(role, username):
            raise DuplicateUsername()

        if not is_strong_password(password):
            raise InvalidInput(WEAK_PASSWORD_MESSAGE)

        salt = generate_salt()
        identity = self.create_identity(role, username, salt, generate_hash(password, salt))

        logger.info(f"Created {role.value} account {username}")
        return identity

    def authenticate(self, role: UserRole, username: str, password: str) -> str:
        """Verify credentials; unknown users and wrong passwords look the same."""
        role = UserRole(role)
        credentials = self.fetch_credentials(role, username)
        if credentials is None or not verify_password(password, *credentials):
            logger.warning(f"Failed {role.value} login for {username}")
            raise Unauthorized("Please try again!")
        return username

    def login(self, session: SessionState, role: UserRole, username: str, password: str) -> SessionState:
        session.ensure_anonymous()
        self.authenticate(role, username, password)
        session.login(role, username)

        logger.info(f"{session.role.value.capitalize()} logged in as {username}")
        return session

    def logout(self, session: SessionState) -> str:
        username = session.logout()
        logger.info(f"{username} logged out")
        return username
