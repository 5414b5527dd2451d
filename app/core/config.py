# app/core/config.py

from pathlib import Path
from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Savings Tracker API"
    DEBUG: bool = False
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_URL: str = f"sqlite+aiosqlite:///{BASE_DIR / 'savings.db'}"

    # JWT / Security Configuration
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    # Notification preference defaults (applied when a user has no row yet)
    DEFAULT_DEADLINE_DAYS_THRESHOLD: int = 7
    DEFAULT_PROGRESS_THRESHOLD: float = 20.0
    DEFAULT_SPENDING_THRESHOLD: float = 120.0
    DEFAULT_NOTIFICATION_TYPES: List[str] = ["goal", "expense", "system"]

    # Spending baseline used by the monthly spending trigger
    DEFAULT_MONTHLY_SPENDING_BASELINE: float = 50000.0
    SPENDING_BASELINE_MONTHS: int = 3

    # Periodic goal trigger sweep; 0 disables it
    TRIGGER_SWEEP_INTERVAL_SECONDS: int = 3600

    # Optional: Environment
    ENVIRONMENT: str = "development"

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_sqlite(self) -> bool:
        """Check if we're running against a local SQLite file"""
        return self.DATABASE_URL.startswith("sqlite")

# Create a global settings instance
settings = Settings()
