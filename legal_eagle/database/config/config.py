"""
Configuration: Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed application configuration using:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- Missing required fields raise a validation error at import time.
- `extra="ignore"`: unknown env vars are ignored (not an error).

Usage
-----
from legal_eagle.database.config.config import settings

# Example
ttl = settings.SESSION_TTL_HOURS
zone = settings.APPOINTMENT_TIMEZONE

Security
--------
- Never commit secrets or the `.env` file to source control.
- Prefer runtime environment variables in production (K8s/Secrets Manager/etc.).
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    FRONTEND_URL: str = Field("http://localhost:5173", description="Base URL of the frontend client application (CORS origin).")
    DB_DRIVER_NAME: str = Field(..., description="Database driver (e.g., `postgresql+psycopg2`, `sqlite`).")
    DB_DATABASE_NAME: str = Field(..., description="Name of the database, or the file path for SQLite.")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field(None, description="Hostname or IP address of the database server.")
    DB_PORT: Optional[int] = Field(None, description="Port of the database server.")
    SECRET_KEY: str = Field(..., description="Secret key used to sign session tokens.")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm.")
    SESSION_TTL_HOURS: int = Field(24, description="Lifetime of a session token, in hours.")
    APPOINTMENT_TIMEZONE: str = Field("UTC", description="IANA zone in which booked dates and times are expressed.")
    DEFAULT_APPOINTMENT_DURATION: int = Field(60, description="Default consultation length, in minutes.")
    TRANSACTIONS_PAGE_SIZE: int = Field(10, description="Default page size for transaction listings.")
    LOG_LEVEL: str = Field("INFO", description="Root logging level.")
    ADMIN_REGISTRATION_KEY: Optional[str] = Field(None, description="Shared secret required to register an `admin` account; admin registration is disabled when unset.")


# Singleton instance of Settings, ready to be imported across the app
settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
