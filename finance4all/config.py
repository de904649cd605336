from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from finance4all import __version__


_default_db_path = Path(__file__).resolve().parents[1] / "finance4all.sqlite3"


class Settings(BaseSettings):
    APP_NAME: str = "finance4all-backend"
    VERSION: str = __version__
    ENVIRONMENT: str = "development"

    DATABASE_URL: str = f"sqlite:///{_default_db_path}"
    SQL_ECHO: bool = False

    # Browser origins of the web client; auth uses bearer headers, not cookies
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Firebase Admin SDK. Without explicit service account values the SDK
    # falls back to application default credentials.
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CLIENT_EMAIL: Optional[str] = None
    FIREBASE_PRIVATE_KEY: Optional[str] = None
    FIREBASE_AUTH_EMULATOR_HOST: Optional[str] = None

    # Age used for projections when the user has no date of birth on file
    DEFAULT_BASE_AGE: int = 30

    APP_LOG_LEVEL: str = "INFO"
    THIRD_PARTY_LOG_LEVEL: str = "WARNING"
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="F4A_", case_sensitive=False)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


def get_settings() -> Settings:
    return Settings()
