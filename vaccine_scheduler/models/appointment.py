from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship

from ..core.database import Base

class Appointment(Base):
    __tablename__ = "appointments"

    # Assigned from the appointment-id counter, never autoincremented
    id = Column(Integer, primary_key=True, autoincrement=False)

    vaccine_name = Column(String(255), ForeignKey("vaccines.name"), nullable=False)
    time = Column(Date, nullable=False, index=True)

    # Relationships
    patient_name = Column(String(255), ForeignKey("patients.username"), nullable=False, index=True)
    caregiver_name = Column(String(255), ForeignKey("caregivers.username"), nullable=False, index=True)

    patient = relationship("Patient", back_populates="appointments")
    caregiver = relationship("Caregiver", back_populates="appointments")

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, vaccine='{self.vaccine_name}', time='{self.time}', "
            f"patient='{self.patient_name}', caregiver='{self.caregiver_name}')>"
        )
