"""
Reservation engine.

A reservation runs in three phases:

1. Validation reads: the date parses, the vaccine exists and has stock, and
   at least one caregiver is open on the date.
2. The appointment id is allocated from the persisted sequence and committed,
   so it is never reused even if the next phase fails.
3. One transaction locks the first open slot (smallest caregiver username),
   inserts the appointment, deletes the slot and takes one dose. The slot
   delete and the dose decrement are guarded by their row counts, so a
   reservation that lost a race fails instead of double-booking, and any
   failure rolls back all three writes.
"""

import logging
from sqlalchemy.orm import Session

from .base import BaseService
from .appointment_service import AppointmentService
from .availability_service import AvailabilityService
from .inventory_service import InventoryService
from ..core.exceptions import NoAvailability, OutOfStock, VaccineNotFound
from ..core.session import SessionState
from ..core.validators import parse_date
from ..schemas.scheduler import ReservationResponse

logger = logging.getLogger(__name__)

class ReservationService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.inventory = InventoryService(db)
        self.availability = AvailabilityService(db)
        self.appointments = AppointmentService(db)

    def reserve(self, session: SessionState, date_value: str, vaccine_name: str) -> ReservationResponse:
        """Book the logged-in patient with an open caregiver on the given date."""
        patient = session.require_patient()
        day = parse_date(date_value)

        with self.transaction("reserving an appointment", commit=False):
            vaccine = self.inventory.get(vaccine_name)
            if vaccine is None:
                raise VaccineNotFound()
            if vaccine.doses <= 0:
                logger.warning(f"Reservation rejected: {vaccine_name} is out of stock")
                raise OutOfStock()
            if not self.availability.query(day):
                logger.warning(f"Reservation rejected: no caregivers available on {day}")
                raise NoAvailability()

        appointment_id = self.appointments.next_id()

        with self.transaction("reserving an appointment"):
            caregiver = self.availability.first_open(day)
            if caregiver is None:
                raise NoAvailability()
            self.appointments.insert(appointment_id, vaccine_name, day, patient, caregiver)
            if not self.availability.remove(caregiver, day):
                raise NoAvailability()
            self.inventory.decrement(vaccine_name)

        logger.info(f"Reservation {appointment_id} made with {caregiver} for {patient} on {day}")
        return ReservationResponse(
            appointment_id=appointment_id,
            caregiver=caregiver,
            vaccine=vaccine_name,
            date=day,
        )
