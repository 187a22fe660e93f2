from datetime import date
from typing import List
import logging

from sqlalchemy.exc import SQLAlchemyError

from .base import BaseService
from ..models import Appointment, Counter, APPOINTMENT_ID_COUNTER
from ..core.exceptions import StorageFailure
from ..core.security import UserRole
from ..core.session import SessionState
from ..schemas.scheduler import AppointmentSummary

logger = logging.getLogger(__name__)

class AppointmentService(BaseService):
    """Appointment ledger and the persisted appointment-id sequence."""

    def next_id(self) -> int:
        """
        Allocate the next appointment id in its own committed transaction.

        The counter row is locked by the UPDATE, so concurrent callers get
        distinct ids, and an id handed out here is never given out again even
        if the reservation that asked for it fails.
        """
        try:
            updated = (
                self.db.query(Counter)
                .filter(Counter.name == APPOINTMENT_ID_COUNTER)
                .update({Counter.value: Counter.value + 1})
            )
            if not updated:
                raise StorageFailure("Appointment id sequence is not initialized")
            value = (
                self.db.query(Counter.value)
                .filter(Counter.name == APPOINTMENT_ID_COUNTER)
                .scalar()
            )
            self.db.commit()
        except StorageFailure:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to allocate appointment id: {e}")
            raise StorageFailure("Error occurred when reserving an appointment")
        return value

    def insert(
        self,
        appointment_id: int,
        vaccine_name: str,
        day: date,
        patient_name: str,
        caregiver_name: str,
    ) -> Appointment:
        appointment = Appointment(
            id=appointment_id,
            vaccine_name=vaccine_name,
            time=day,
            patient_name=patient_name,
            caregiver_name=caregiver_name,
        )
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def for_patient(self, username: str) -> List[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.patient_name == username)
            .order_by(Appointment.id)
            .all()
        )

    def for_caregiver(self, username: str) -> List[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.caregiver_name == username)
            .order_by(Appointment.id)
            .all()
        )

    def show_appointments(self, session: SessionState) -> List[AppointmentSummary]:
        """The current user's appointments, each naming the other participant."""
        username = session.require_authenticated()

        with self.transaction("showing appointments", commit=False):
            if session.is_caregiver:
                return [
                    AppointmentSummary(
                        id=a.id,
                        vaccine=a.vaccine_name,
                        date=a.time,
                        counterpart=a.patient_name,
                        counterpart_role=UserRole.PATIENT,
                    )
                    for a in self.for_caregiver(username)
                ]
            return [
                AppointmentSummary(
                    id=a.id,
                    vaccine=a.vaccine_name,
                    date=a.time,
                    counterpart=a.caregiver_name,
                    counterpart_role=UserRole.CAREGIVER,
                )
                for a in self.for_patient(username)
            ]
