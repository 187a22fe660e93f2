from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.session import SessionState
from ...api.deps import (
    get_authenticated_session, get_caregiver_session, get_patient_session
)
from ...services.appointment_service import AppointmentService
from ...services.availability_service import AvailabilityService
from ...services.inventory_service import InventoryService
from ...services.reservation_service import ReservationService
from ...schemas.scheduler import (
    AppointmentSummary, AvailabilityRequest, AvailabilityResponse, DosesRequest,
    ReservationRequest, ReservationResponse, ScheduleResponse, VaccineStock
)

router = APIRouter(tags=["Scheduling"])

@router.get("/schedule/{date}", response_model=ScheduleResponse)
async def search_caregiver_schedule(
    date: str,
    session: SessionState = Depends(get_authenticated_session),
    db: Session = Depends(get_db)
):
    """List caregivers available on a date and the vaccine inventory."""
    return AvailabilityService(db).search_schedule(session, date)

@router.post("/reservations", response_model=ReservationResponse, status_code=201)
async def reserve(
    reservation: ReservationRequest,
    session: SessionState = Depends(get_patient_session),
    db: Session = Depends(get_db)
):
    """Reserve a vaccination appointment (patients only)."""
    return ReservationService(db).reserve(session, reservation.date, reservation.vaccine)

@router.post("/availabilities", response_model=AvailabilityResponse, status_code=201)
async def upload_availability(
    availability: AvailabilityRequest,
    session: SessionState = Depends(get_caregiver_session),
    db: Session = Depends(get_db)
):
    """Publish one availability slot for the logged-in caregiver."""
    day = AvailabilityService(db).upload_availability(session, availability.date)
    return AvailabilityResponse(caregiver=session.username, date=day)

@router.post("/vaccines/{name}/doses", response_model=VaccineStock)
async def add_doses(
    name: str,
    doses: DosesRequest,
    session: SessionState = Depends(get_caregiver_session),
    db: Session = Depends(get_db)
):
    """Create a vaccine or add doses to its stock (caregivers only)."""
    vaccine = InventoryService(db).add_doses(session, name, doses.count)
    return VaccineStock.model_validate(vaccine)

@router.get("/appointments", response_model=List[AppointmentSummary])
async def show_appointments(
    session: SessionState = Depends(get_authenticated_session),
    db: Session = Depends(get_db)
):
    """List the logged-in user's appointments."""
    return AppointmentService(db).show_appointments(session)
