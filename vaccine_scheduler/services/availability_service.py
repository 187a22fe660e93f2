from datetime import date
from typing import List, Optional
import logging

from sqlalchemy import insert
from sqlalchemy.orm import Query

from .base import BaseService
from .inventory_service import InventoryService
from ..models import Availability
from ..core.exceptions import DuplicateAvailability
from ..core.session import SessionState
from ..core.validators import parse_date
from ..schemas.scheduler import ScheduleResponse, VaccineStock

logger = logging.getLogger(__name__)

class AvailabilityService(BaseService):
    """Ledger of (caregiver, date) slots open for booking."""

    def publish(self, caregiver: str, day: date) -> None:
        # Core insert so a duplicate always reaches the primary key constraint
        self.db.execute(insert(Availability).values(time=day, username=caregiver))

    def query(self, day: date) -> List[str]:
        """Caregivers with an open slot on ``day``, lexicographically ordered."""
        rows = (
            self.db.query(Availability.username)
            .filter(Availability.time == day)
            .order_by(Availability.username)
            .all()
        )
        return [row.username for row in rows]

    def open_slots_for_update(self, day: date) -> Query:
        # Rows locked by a concurrent reservation are skipped so its caregiver
        # never hides the others open on the same day
        return (
            self.db.query(Availability)
            .filter(Availability.time == day)
            .order_by(Availability.username)
            .with_for_update(skip_locked=True)
        )

    def first_open(self, day: date) -> Optional[str]:
        """Lock and return the caregiver who gets the next booking on ``day``."""
        slot = self.open_slots_for_update(day).first()
        return slot.username if slot else None

    def remove(self, caregiver: str, day: date) -> bool:
        deleted = (
            self.db.query(Availability)
            .filter(Availability.username == caregiver, Availability.time == day)
            .delete()
        )
        return deleted == 1

    def upload_availability(self, session: SessionState, date_value: str) -> date:
        """Publish one slot for the logged-in caregiver."""
        caregiver = session.require_caregiver()
        day = parse_date(date_value)

        with self.transaction("uploading availability", on_conflict=DuplicateAvailability):
            self.publish(caregiver, day)

        logger.info(f"Caregiver {caregiver} is available on {day}")
        return day

    def search_schedule(self, session: SessionState, date_value: str) -> ScheduleResponse:
        """Caregivers open on the date plus the full vaccine inventory."""
        session.require_authenticated()
        day = parse_date(date_value)

        with self.transaction("searching caregiver schedule", commit=False):
            caregivers = self.query(day)
            vaccines = [
                VaccineStock.model_validate(vaccine)
                for vaccine in InventoryService(self.db).list_all()
            ]

        return ScheduleResponse(date=day, caregivers=caregivers, vaccines=vaccines)
