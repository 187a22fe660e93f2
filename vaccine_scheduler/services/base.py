from contextlib import contextmanager
from typing import Optional, Type
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import Conflict, SchedulerError, StorageFailure

logger = logging.getLogger(__name__)

class BaseService:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(
        self,
        action: str,
        commit: bool = True,
        on_conflict: Optional[Type[Conflict]] = None,
    ):
        """
        Run a unit of work against the database.

        Commits on success (unless ``commit`` is False) and rolls back on any
        failure. Integrity violations become ``on_conflict`` when given; any
        other storage error surfaces as ``StorageFailure``. Errors from outside
        SQLAlchemy are re-raised unchanged after the rollback.
        """
        try:
            yield self.db
            if commit:
                self.db.commit()
        except SchedulerError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            if on_conflict is not None:
                raise on_conflict()
            logger.error(f"Integrity error while {action}: {e}")
            raise StorageFailure(f"Error occurred when {action}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage failure while {action}: {e}")
            raise StorageFailure(f"Error occurred when {action}")
        except Exception:
            self.db.rollback()
            logger.exception(f"Unexpected error while {action}")
            raise
