"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback; .env.example is a template for developers. The only secret
with a value in source is a development-only signing key, which startup
rejects when ENVIRONMENT is production.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from app.config import settings
    print(settings.JWT_ISSUER)
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Local development only. Rejected when ENVIRONMENT=production.
DEV_SECRET_KEY = "dev-only-appetite-checker-secret-key-change-me-0123456789"

MIN_SECRET_KEY_LENGTH = 32


class Settings(BaseSettings):
    """
    Central configuration for the Appetite Checker API.

    The signing secret has a development default so the service starts
    locally without a .env file. Startup fails if the secret is shorter
    than 32 characters, or if the default is still in place while
    ENVIRONMENT is "production".
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Appetite Checker API"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # SQLite for local use; swap to a PostgreSQL (asyncpg) URL for deployment
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/appetite.db"
    # Upper bound for a single store call before the request is failed as retryable
    DB_TIMEOUT_SECONDS: float = 5.0

    # --- Tokens ---
    SECRET_KEY: str = DEV_SECRET_KEY
    ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "AppetiteChecker"
    JWT_AUDIENCE: str = "AppetiteCheckerUsers"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # --- Lockout policy ---
    MAX_FAILED_LOGIN_ATTEMPTS: int = 5
    LOCKOUT_MINUTES: int = 15

    # --- Password hashing work factor (Argon2id) ---
    ARGON2_TIME_COST: int = 3
    ARGON2_MEMORY_COST: int = 65536  # KiB
    ARGON2_PARALLELISM: int = 4

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:3002",
    ]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def expose_error_details(self) -> bool:
        """Whether 500 responses may carry the underlying cause."""
        return self.DEBUG and not self.is_production

    @model_validator(mode="after")
    def check_secret_key(self) -> "Settings":
        if len(self.SECRET_KEY) < MIN_SECRET_KEY_LENGTH:
            raise ValueError(
                f"SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters"
            )
        if self.is_production and self.SECRET_KEY == DEV_SECRET_KEY:
            raise ValueError(
                "SECRET_KEY must be set explicitly when ENVIRONMENT=production"
            )
        return self


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
