from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Vaccine Scheduler"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./scheduler.db")
    TEST_DATABASE_URL: str = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

    # Password hashing (PBKDF2-HMAC-SHA1, 128-bit key)
    PASSWORD_HASH_ROUNDS: int = 65536
    PASSWORD_SALT_BYTES: int = 16
    PASSWORD_HASH_BYTES: int = 16

    # Redis (per-client sessions for the HTTP API)
    REDIS_URL: str = "redis://localhost:6379"
    SESSION_EXPIRE_MINUTES: int = 60

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080", "http://testserver"]

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def get_database_url(self):
        """Return the appropriate database URL based on if we're testing"""
        if self.TESTING:
            return self.TEST_DATABASE_URL
        return self.DATABASE_URL

# Create settings instance
settings = Settings()
