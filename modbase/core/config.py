# modbase/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./modbase.db"
    DATABASE_ECHO: bool = False

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and ("localhost" in v or v.startswith("sqlite")):
            raise ValueError("Production environment cannot use a local database")
        return v

    # === JWT ===
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    ACCESS_TOKEN_COOKIE: str = "access_token"

    # === Access control ===
    # Permission dependencies are advisory unless this is switched on
    ACCESS_ENFORCE_DEPENDENCIES: bool = False
    ACCESS_REQUIRE_CONFIRMED: bool = True
    ACCESS_DEFAULT_ROLE: Optional[str] = "User"
    ACCESS_SUPER_ROLE: str = "Administrator"

    # === Route gates ===
    UNAUTHORIZED_REDIRECT_URL: str = "/"
    UNAUTHORIZED_MESSAGE: str = "You do not have access to do that."
    FLASH_COOKIE_NAME: str = "flash_error"

    # === Repositories ===
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 1000

    # === Templates ===
    TEMPLATES_DIR: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Create a global settings instance
settings = Settings()
