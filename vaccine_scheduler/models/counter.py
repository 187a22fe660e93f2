from sqlalchemy import Column, Integer, String

from ..core.database import Base

APPOINTMENT_ID_COUNTER = "appointment_id"

class Counter(Base):
    """Persisted named sequence; ``value`` is the last id handed out."""
    __tablename__ = "counters"

    name = Column(String(64), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Counter(name='{self.name}', value={self.value})>"
