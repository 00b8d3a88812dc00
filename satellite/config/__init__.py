"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Database
    # ======================
    DATABASE_URL: str = "sqlite+aiosqlite:///./satellite.db"
    AUTO_CREATE_TABLES: bool = False

    # "database" uses SQLAlchemy, "memory" keeps everything in process
    STORAGE_BACKEND: str = "database"

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # ======================
    # Scheduler
    # ======================
    SCHEDULER_ENABLED: bool = False
    DAILY_CHECK_TIME: str = "05:00"

    # ======================
    # Timezone
    # ======================
    TIMEZONE: str = "UTC"

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.DEBUG or self.APP_ENV == "development"


settings = Settings()
