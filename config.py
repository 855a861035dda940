"""
Configuration settings for the mall directory.

Loads environment variables from .env file and provides typed configuration.
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    # Storage
    DATA_FILE: str = Field(
        default="./data/database.json", description="Path of the JSON document"
    )

    # Admin account (single built-in credential)
    ADMIN_USERNAME: str = Field(default="admin")
    ADMIN_PASSWORD: str = Field(default="admin123")

    # Security
    SECRET_KEY: str = Field(
        default="4f1c2a8e9b7d6e5f3a2b1c0d9e8f7a6b5c4d3e2f1a0b9c8d7e6f5a4b3c2d1e0f",
        description="Secret key used to sign session tokens",
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60, description="Session token lifetime in minutes"
    )
    MIN_PASSWORD_LENGTH: int = 6
    BCRYPT_ROUNDS: int = Field(default=12, description="bcrypt cost factor")

    # API
    CORS_ORIGINS: List[str] = Field(default=["*"], description="Allowed CORS origins")

    # Client
    API_URL: str = Field(default="http://localhost:8000/api")
    CLIENT_TIMEOUT_SECONDS: float = 10.0
    SESSION_FILE: str = Field(default="./data/session.json")
    COMPARE_LIMIT: int = 4

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")


# Global settings instance
settings = Settings()
