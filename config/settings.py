"""
Configuration Management - Centralized Settings
Consolidates all environment variable handling for the visit counter service
"""

import os
from typing import Optional, Dict, Any
from functools import lru_cache
from dotenv import load_dotenv
from sqlalchemy.engine import URL, make_url

# Load environment variables once at module level
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """
    Centralized configuration management for the visit counter service

    Values are read from the environment when the instance is created, so a
    fresh Settings() always reflects the current environment.
    """

    def __init__(self) -> None:
        # Server Configuration
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "3000"))
        self.RELOAD: bool = _env_bool("RELOAD")

        # Relational Store Configuration
        self.DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL") or None
        self.DB_HOST: str = os.getenv("DB_HOST", "db")
        self.DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
        self.DB_USER: str = os.getenv("DB_USER", "postgres")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "password")
        self.DB_NAME: str = os.getenv("DB_NAME", "postgres")

        # Cache Store Configuration
        self.REDIS_URL: str = os.getenv("REDIS_URL", "redis://cache:6379")
        self.VISITS_KEY: str = os.getenv("VISITS_KEY", "visits")

        # Timeouts & Startup Retries (seconds)
        self.CACHE_TIMEOUT: float = float(os.getenv("CACHE_TIMEOUT", "5"))
        self.STARTUP_TIMEOUT: float = float(os.getenv("STARTUP_TIMEOUT", "5"))
        self.STARTUP_RETRIES: int = int(os.getenv("STARTUP_RETRIES", "5"))
        self.STARTUP_RETRY_WAIT: float = float(os.getenv("STARTUP_RETRY_WAIT", "2"))

        # Development & Debugging
        self.DEBUG: bool = _env_bool("DEBUG")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_FILE: Optional[str] = os.getenv("LOG_FILE") or None

    def validate_required_settings(self) -> None:
        """
        Validate configuration values that would otherwise fail much later
        Raises ValueError listing every problem found
        """
        problems = []

        if not self.REDIS_URL.strip():
            problems.append("REDIS_URL is empty")
        if not (0 < self.PORT < 65536):
            problems.append(f"PORT {self.PORT} is out of range")
        if self.STARTUP_RETRIES < 1:
            problems.append("STARTUP_RETRIES must be at least 1")
        if self.CACHE_TIMEOUT <= 0:
            problems.append("CACHE_TIMEOUT must be positive")
        if self.STARTUP_TIMEOUT <= 0:
            problems.append("STARTUP_TIMEOUT must be positive")
        if self.STARTUP_RETRY_WAIT < 0:
            problems.append("STARTUP_RETRY_WAIT must not be negative")

        if problems:
            raise ValueError(
                f"❌ Invalid configuration: {'; '.join(problems)}\n"
                f"Please check your .env file or environment configuration."
            )

    def get_database_url(self) -> URL:
        """
        Build the async SQLAlchemy URL for the relational store

        DATABASE_URL wins when set; otherwise the URL is assembled from the
        DB_* overrides. Plain postgresql:// URLs are switched to asyncpg.
        """
        if self.DATABASE_URL:
            url = make_url(self.DATABASE_URL)
            if url.drivername in ("postgresql", "postgres"):
                url = url.set(drivername="postgresql+asyncpg")
            return url

        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )

    def get_database_config(self) -> Dict[str, Any]:
        """Get relational store configuration"""
        return {
            "url": self.get_database_url(),
            "echo": self.DEBUG,
        }

    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.DEBUG or self.RELOAD


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance

    Uses lru_cache to ensure settings are loaded only once
    and reused across the application.
    """
    settings = Settings()
    settings.validate_required_settings()
    return settings


# Convenience instance for direct import
settings = get_settings()

__all__ = [
    "Settings",
    "get_settings",
    "settings",
]
