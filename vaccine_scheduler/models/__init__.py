from .patient import Patient
from .caregiver import Caregiver
from .vaccine import Vaccine
from .availability import Availability
from .appointment import Appointment
from .counter import Counter, APPOINTMENT_ID_COUNTER

__all__ = [
    "Patient",
    "Caregiver",
    "Vaccine",
    "Availability",
    "Appointment",
    "Counter",
    "APPOINTMENT_ID_COUNTER",
]
