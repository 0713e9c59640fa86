from typing import List, Optional

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "School Results"
    API_PREFIX: str = "/api"
    DATABASE_URL: str = "sqlite+aiosqlite:///./school_results.db"
    SECRET_KEY: str = "school-results-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    SESSION_COOKIE_NAME: str = "results_session"
    COOKIE_SECURE: bool = False
    ENVIRONMENT: str = "development"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5000",
        "http://127.0.0.1:8000",
    ]

    # Session/class mutations, student delete and subject create are open by default.
    REQUIRE_ADMIN_FOR_ALL_WRITES: bool = False

    SEED_DATABASE: bool = False
    SEED_DEMO_DATA: bool = True
    SEED_ADMIN_EMAIL: Optional[str] = None
    SEED_ADMIN_PASSWORD: Optional[str] = None
    SEED_ADMIN_NAME: str = "Default Admin"

    class Config:
        case_sensitive = True


settings = Settings()
