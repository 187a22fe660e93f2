from sqlalchemy import Column, Integer, String, CheckConstraint

from ..core.database import Base
from ..core.validators import MAX_DOSES

class Vaccine(Base):
    __tablename__ = "vaccines"
    __table_args__ = (
        CheckConstraint("doses >= 0", name="ck_vaccines_doses_non_negative"),
        CheckConstraint(f"doses <= {MAX_DOSES}", name="ck_vaccines_doses_max"),
    )

    name = Column(String(255), primary_key=True)
    doses = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Vaccine(name='{self.name}', doses={self.doses})>"
