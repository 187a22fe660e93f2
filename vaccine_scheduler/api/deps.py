from fastapi import Depends, Header
from typing import Optional

from ..core.database import get_redis
from ..core.exceptions import NotFound
from ..core.session import SessionState, SessionStore

SESSION_HEADER = "X-Session-Token"

def get_session_store(redis_client = Depends(get_redis)) -> SessionStore:
    """Session store backed by the shared redis client."""
    return SessionStore(redis_client)

def get_session_token(
    x_session_token: Optional[str] = Header(None, alias=SESSION_HEADER)
) -> str:
    """Extract the session token from the request headers."""
    if not x_session_token:
        raise NotFound(f"Missing {SESSION_HEADER} header, open a session first")
    return x_session_token

def get_session(
    token: str = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store)
) -> SessionState:
    """Load the caller's session state."""
    return store.load(token)

# Role-gated dependencies
def get_authenticated_session(
    session: SessionState = Depends(get_session)
) -> SessionState:
    """Require a patient or caregiver login."""
    session.require_authenticated()
    return session

def get_patient_session(
    session: SessionState = Depends(get_session)
) -> SessionState:
    """Require patient login."""
    session.require_patient()
    return session

def get_caregiver_session(
    session: SessionState = Depends(get_session)
) -> SessionState:
    """Require caregiver login."""
    session.require_caregiver()
    return session
