from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import UserRole
from ...core.session import SessionState, SessionStore
from ...api.deps import get_session, get_session_store, get_session_token
from ...services.auth_service import AuthService
from ...schemas.scheduler import (
    Credentials, IdentityResponse, MessageResponse, SessionResponse
)

router = APIRouter(tags=["Authentication"])

@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def open_session(
    store: SessionStore = Depends(get_session_store)
):
    """Open an anonymous session; send its token as X-Session-Token."""
    return SessionResponse(session_token=store.create())

@router.get("/sessions/current", response_model=SessionResponse)
async def current_session(
    token: str = Depends(get_session_token),
    session: SessionState = Depends(get_session)
):
    """Show who the session is logged in as."""
    return SessionResponse(session_token=token, role=session.role, username=session.username)

@router.post("/auth/patients", response_model=IdentityResponse, status_code=201)
async def create_patient(
    credentials: Credentials,
    db: Session = Depends(get_db)
):
    """Register a new patient."""
    identity = AuthService(db).register(UserRole.PATIENT, credentials.username, credentials.password)
    return IdentityResponse(
        username=identity.username,
        role=UserRole.PATIENT,
        message="Account created successfully"
    )

@router.post("/auth/caregivers", response_model=IdentityResponse, status_code=201)
async def create_caregiver(
    credentials: Credentials,
    db: Session = Depends(get_db)
):
    """Register a new caregiver."""
    identity = AuthService(db).register(UserRole.CAREGIVER, credentials.username, credentials.password)
    return IdentityResponse(
        username=identity.username,
        role=UserRole.CAREGIVER,
        message="Account created successfully"
    )

@router.post("/auth/login/{role}", response_model=SessionResponse)
async def login(
    role: UserRole,
    credentials: Credentials,
    token: str = Depends(get_session_token),
    session: SessionState = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
    db: Session = Depends(get_db)
):
    """Authenticate the current session as a patient or caregiver."""
    AuthService(db).login(session, role, credentials.username, credentials.password)
    store.save(token, session)
    return SessionResponse(session_token=token, role=session.role, username=session.username)

@router.post("/auth/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_session_token),
    session: SessionState = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
    db: Session = Depends(get_db)
):
    """Return the current session to anonymous."""
    AuthService(db).logout(session)
    store.save(token, session)
    return MessageResponse(message="You have been logged out")
