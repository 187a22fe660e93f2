from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator, Optional
import redis
from .config import settings

def create_db_engine(url: str) -> Engine:
    """Create an engine with pool settings suited to the backend."""
    if url.startswith("sqlite"):
        # SQLite connections are shared between the API worker threads
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

engine = create_db_engine(settings.get_database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Redis setup - mock for testing
if settings.TESTING:
    # Use a simple dict-based mock for Redis in tests
    class RedisMock:
        def __init__(self):
            self.data = {}

        def setex(self, key, time, value):
            self.data[key] = value
            return True

        def get(self, key):
            return self.data.get(key)

        def delete(self, key):
            if key in self.data:
                del self.data[key]
            return 1

    redis_client = RedisMock()
else:
    # Real Redis client for production
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Redis dependency
def get_redis():
    """Get Redis client."""
    return redis_client

def configure_database(url: str) -> Engine:
    """Point the session factory at another database (used by the CLI)."""
    global engine
    engine = create_db_engine(url)
    SessionLocal.configure(bind=engine)
    return engine

# Database initialization
def init_db(bind: Optional[Engine] = None):
    """Initialize database tables and seed the appointment-id sequence."""
    from ..models import Counter, APPOINTMENT_ID_COUNTER

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    # Ids start at 1: the counter holds the last id handed out
    with Session(bind=bind) as db:
        if db.get(Counter, APPOINTMENT_ID_COUNTER) is None:
            db.add(Counter(name=APPOINTMENT_ID_COUNTER, value=0))
            db.commit()
