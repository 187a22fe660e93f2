from sqlalchemy import Column, String, Date, ForeignKey
from sqlalchemy.orm import relationship

from ..core.database import Base

class Availability(Base):
    """One caregiver offering one appointment on one date."""
    __tablename__ = "availabilities"

    # The composite key makes (date, caregiver) unique
    time = Column(Date, primary_key=True)
    username = Column(String(255), ForeignKey("caregivers.username"), primary_key=True)

    # Relationships
    caregiver = relationship("Caregiver", back_populates="availabilities")

    def __repr__(self):
        return f"<Availability(username='{self.username}', time='{self.time}')>"
