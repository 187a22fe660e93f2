from sqlalchemy import Column, String, LargeBinary
from sqlalchemy.orm import relationship

from ..core.database import Base

class Patient(Base):
    __tablename__ = "patients"

    username = Column(String(255), primary_key=True)

    # Credentials
    salt = Column(LargeBinary(16), nullable=False)
    hash = Column(LargeBinary(16), nullable=False)

    # Relationships
    appointments = relationship("Appointment", back_populates="patient")

    def __repr__(self):
        return f"<Patient(username='{self.username}')>"
