from typing import List, Optional
import logging

from .base import BaseService
from ..models import Vaccine
from ..core.exceptions import InvalidInput, OutOfStock
from ..core.session import SessionState
from ..core.validators import MAX_DOSES, parse_dose_count

logger = logging.getLogger(__name__)

class InventoryService(BaseService):
    """Vaccine dose ledger. Dose counts never go below zero."""

    def get(self, name: str, lock: bool = False) -> Optional[Vaccine]:
        query = self.db.query(Vaccine).filter(Vaccine.name == name)
        if lock:
            query = query.with_for_update()
        return query.first()

    def list_all(self) -> List[Vaccine]:
        return self.db.query(Vaccine).order_by(Vaccine.name).all()

    def create(self, name: str, doses: int) -> Vaccine:
        vaccine = Vaccine(name=name, doses=doses)
        self.db.add(vaccine)
        self.db.flush()
        return vaccine

    def increment(self, vaccine: Vaccine, count: int) -> Vaccine:
        """Add ``count`` doses to a vaccine row read under lock."""
        if vaccine.doses + count > MAX_DOSES:
            raise InvalidInput(
                f"{vaccine.name} already has {vaccine.doses} doses, "
                f"the stock cannot exceed {MAX_DOSES}!"
            )
        vaccine.doses = Vaccine.doses + count
        self.db.flush()
        self.db.refresh(vaccine)
        return vaccine

    def decrement(self, name: str, count: int = 1) -> None:
        """Take ``count`` doses, failing rather than going below zero."""
        updated = (
            self.db.query(Vaccine)
            .filter(Vaccine.name == name, Vaccine.doses >= count)
            .update({Vaccine.doses: Vaccine.doses - count})
        )
        if not updated:
            raise OutOfStock()

    def add_doses(self, session: SessionState, name: str, count) -> Vaccine:
        """Create the vaccine with ``count`` doses, or add them to its stock."""
        session.require_caregiver()
        count = parse_dose_count(count)
        if not name:
            raise InvalidInput("Please enter a valid vaccine!")

        with self.transaction("adding doses"):
            vaccine = self.get(name, lock=True)
            if vaccine is None:
                vaccine = self.create(name, count)
            else:
                vaccine = self.increment(vaccine, count)
            doses = vaccine.doses

        logger.info(f"Added {count} doses of {name}, {doses} now available")
        return vaccine
