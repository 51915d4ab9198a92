"""Configuration settings for Microblog."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./microblog.db")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", secrets.token_urlsafe(32))
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "60"))

    # Hashing
    BCRYPT_COST: int = int(os.getenv("BCRYPT_COST", "12"))
    BCRYPT_MIN_COST: bool = os.getenv("BCRYPT_MIN_COST", "false").lower() == "true"

    # Account tokens
    PASSWORD_RESET_EXPIRE_HOURS: int = int(os.getenv("PASSWORD_RESET_EXPIRE_HOURS", "2"))
    REMEMBER_COOKIE_DAYS: int = int(os.getenv("REMEMBER_COOKIE_DAYS", "7300"))

    # Mail
    APP_BASE_URL: str = os.getenv("APP_BASE_URL", "http://localhost:8000")
    MAIL_BACKEND: str = os.getenv("MAIL_BACKEND", "console")  # console, memory, smtp
    MAIL_FROM: str = os.getenv("MAIL_FROM", "noreply@example.com")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def use_min_bcrypt_cost(self) -> bool:
        """Cheap hashing for test runs."""
        return self.BCRYPT_MIN_COST or self.APP_ENV == "test"

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if not os.getenv("JWT_SECRET_KEY"):
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if self.MAIL_BACKEND not in ("console", "memory", "smtp"):
            errors.append(f"Unknown MAIL_BACKEND '{self.MAIL_BACKEND}' - falling back to console")
        if self.MAIL_BACKEND == "smtp" and not self.SMTP_HOST:
            errors.append("MAIL_BACKEND is smtp but SMTP_HOST is not set")
        if self.APP_ENV == "production" and self.use_min_bcrypt_cost:
            errors.append("Minimum bcrypt cost is enabled in production")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
