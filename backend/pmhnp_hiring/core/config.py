"""
Application Configuration

Centralized configuration management using Pydantic settings.
Handles environment variables, job source credentials, and pipeline tuning.
"""

from typing import List, Optional, Dict
from functools import lru_cache
import json
from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "PMHNP Hiring"
    VERSION: str = "1.0.0"
    DEBUG: bool = Field(False, env="DEBUG")
    ENVIRONMENT: str = Field("development", env="ENVIRONMENT")
    HOST: str = Field("0.0.0.0", env="HOST")
    PORT: int = Field(8000, env="PORT")
    LOG_LEVEL: str = Field("INFO", env="LOG_LEVEL")
    TESTING: bool = Field(False, env="TESTING")
    SITE_URL: str = Field("https://pmhnphiring.com", env="SITE_URL")

    # Security
    CRON_SECRET: Optional[str] = Field(None, env="CRON_SECRET")

    # Database
    DATABASE_URL: str = Field("sqlite+aiosqlite:///./pmhnp_jobs.db", env="DATABASE_URL")
    DATABASE_POOL_SIZE: int = Field(5, env="DATABASE_POOL_SIZE")
    DATABASE_MAX_OVERFLOW: int = Field(10, env="DATABASE_MAX_OVERFLOW")

    # Redis
    REDIS_URL: str = Field("redis://localhost:6379/0", env="REDIS_URL")

    # Job source credentials
    ADZUNA_APP_ID: Optional[str] = Field(None, env="ADZUNA_APP_ID")
    ADZUNA_APP_KEY: Optional[str] = Field(None, env="ADZUNA_APP_KEY")
    USAJOBS_API_KEY: Optional[str] = Field(None, env="USAJOBS_API_KEY")
    USAJOBS_USER_AGENT: Optional[str] = Field(None, env="USAJOBS_USER_AGENT")
    JOOBLE_API_KEY: Optional[str] = Field(None, env="JOOBLE_API_KEY")
    RAPIDAPI_KEY: Optional[str] = Field(None, env="RAPIDAPI_KEY")

    # Notifications
    DISCORD_WEBHOOK_URL: Optional[str] = Field(None, env="DISCORD_WEBHOOK_URL")

    # Fetching
    REQUEST_TIMEOUT_SECONDS: int = Field(30, env="REQUEST_TIMEOUT_SECONDS")
    REQUEST_DELAY_SECONDS: float = Field(0.5, env="REQUEST_DELAY_SECONDS")
    MAX_RETRIES: int = Field(3, env="MAX_RETRIES")

    # Pipeline
    JOB_EXPIRY_DAYS: int = Field(30, env="JOB_EXPIRY_DAYS")
    JOB_RENEWAL_DAYS: int = Field(60, env="JOB_RENEWAL_DAYS")

    # Celery
    CELERY_BROKER_URL: str = Field("redis://localhost:6379/1", env="CELERY_BROKER_URL")
    CELERY_RESULT_BACKEND: str = Field("redis://localhost:6379/2", env="CELERY_RESULT_BACKEND")

    # CORS - simplified to avoid parsing issues
    CORS_ORIGINS: str = Field("http://localhost:3000,http://127.0.0.1:3000", env="CORS_ORIGINS")
    CORS_CREDENTIALS: bool = Field(True, env="CORS_CREDENTIALS")
    CORS_METHODS: str = Field("*", env="CORS_METHODS")
    CORS_HEADERS: str = Field("*", env="CORS_HEADERS")

    def is_development(self) -> bool:
        """Whether the app runs in local development mode."""
        return self.ENVIRONMENT == "development"

    def get_cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def get_cors_methods_list(self) -> List[str]:
        """Get CORS methods as a list."""
        if self.CORS_METHODS == "*":
            return ["*"]
        return [method.strip() for method in self.CORS_METHODS.split(",")]

    def get_cors_headers_list(self) -> List[str]:
        """Get CORS headers as a list."""
        if self.CORS_HEADERS == "*":
            return ["*"]
        return [header.strip() for header in self.CORS_HEADERS.split(",")]

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def load_company_slugs(config_path: Path = Path("config/company_slugs.json")) -> Dict[str, List[str]]:
    """
    Load Greenhouse/Lever/Ashby board slugs from an optional JSON override file.

    Returns:
        Dict[str, List[str]]: Mapping of ATS name to board slugs, empty if
        the file does not exist
    """
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, FileNotFoundError) as e:
        raise ValueError(f"Error loading company slugs configuration: {e}")

    return {key: list(value) for key, value in data.items() if isinstance(value, list)}
