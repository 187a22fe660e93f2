import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.security import UserRole

# Requests
class Credentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)

class ReservationRequest(BaseModel):
    date: str = Field(..., description="Appointment date, YYYY-MM-DD")
    vaccine: str = Field(..., min_length=1)

class AvailabilityRequest(BaseModel):
    date: str = Field(..., description="Available date, YYYY-MM-DD")

class DosesRequest(BaseModel):
    count: int

# Responses
class MessageResponse(BaseModel):
    message: str

class SessionResponse(BaseModel):
    session_token: str
    role: Optional[UserRole] = None
    username: Optional[str] = None

class IdentityResponse(BaseModel):
    username: str
    role: UserRole
    message: str

class VaccineStock(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    doses: int

class ScheduleResponse(BaseModel):
    date: datetime.date
    caregivers: List[str]
    vaccines: List[VaccineStock]

class ReservationResponse(BaseModel):
    appointment_id: int
    caregiver: str
    vaccine: str
    date: datetime.date

class AvailabilityResponse(BaseModel):
    caregiver: str
    date: datetime.date

class AppointmentSummary(BaseModel):
    """An appointment as seen by one of its two participants."""
    id: int
    vaccine: str
    date: datetime.date
    counterpart: str
    counterpart_role: UserRole
