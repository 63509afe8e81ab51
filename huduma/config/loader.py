"""
Project configuration loader.
The single source of truth is config/config.json.
Secrets and hosts are overridden from environment variables.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# PATHS
# =============================================================================

def get_project_root() -> Path:
    """Returns the project root directory."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Returns the path of config.json."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Loads config.json into a dict."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# SETTINGS SECTIONS
# =============================================================================

class SystemSettings(BaseModel):
    """System settings."""
    PROJECT_NAME: str = "huduma"
    VERSION: str = "0.3.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"
    ENVIRONMENT: str = "development"


class DeploymentSettings(BaseModel):
    """API process binding."""
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000
    API_WORKERS: int = 1
    API_PUBLIC_URL: str = "http://localhost:5000"
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(BaseModel):
    """Logging settings."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = True
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5


class DomainSettings(BaseModel):
    """Regional market settings."""
    DEFAULT_LANGUAGE: str = "en"
    SUPPORTED_LANGUAGES: list[str] = Field(default_factory=lambda: ["en", "sw"])
    DEFAULT_LOCATION: str = "Nairobi"
    TIMEZONE: str = "Africa/Nairobi"


class DatabaseSettings(BaseModel):
    """PostgreSQL settings."""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "huduma"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_MIN_POOL_SIZE: int = 5
    DB_MAX_POOL_SIZE: int = 20
    DB_COMMAND_TIMEOUT: int = 60
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_DELAY: float = 1.0

    @field_validator("DB_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Falls back to the DB_PASSWORD environment variable."""
        if not v:
            return os.getenv("DB_PASSWORD", "")
        return v

    @property
    def dsn(self) -> str:
        """PostgreSQL DSN."""
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


class RedisSettings(BaseModel):
    """Redis settings (used by the cross-process push relay)."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_NAMESPACE: str = "huduma"
    REDIS_MAX_CONNECTIONS: int = 50

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Falls back to the REDIS_PASSWORD environment variable."""
        if not v:
            return os.getenv("REDIS_PASSWORD", "")
        return v

    @property
    def url(self) -> str:
        """Redis URL."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class RealtimeSettings(BaseModel):
    """Push channel settings."""
    REALTIME_BACKEND: str = "local"  # local, redis
    PUSH_SEND_TIMEOUT: float = 2.0
    PUSH_CHANNEL_PREFIX: str = "push:user"
    WS_PATH: str = "/ws"
    CLIENT_RECONNECT_DELAY: float = 5.0

    @field_validator("REALTIME_BACKEND")
    @classmethod
    def check_backend(cls, v: str) -> str:
        if v not in ("local", "redis"):
            raise ValueError(f"Unsupported REALTIME_BACKEND: {v}")
        return v


class PaymentSettings(BaseModel):
    """Mobile-money payment initiation."""
    CURRENCY: str = "KES"
    MPESA_SIMULATE: bool = True
    MPESA_TRANSACTION_PREFIX: str = "TX"
    MPESA_MIN_AMOUNT: float = 1.0
    MPESA_MAX_AMOUNT: float = 150000.0


# =============================================================================
# SETTINGS
# =============================================================================

class Settings(BaseSettings):
    """
    Application settings.
    Aggregates every configuration section.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    domain: DomainSettings = Field(default_factory=DomainSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    realtime: RealtimeSettings = Field(default_factory=RealtimeSettings)
    payments: PaymentSettings = Field(default_factory=PaymentSettings)

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Builds Settings from config.json.
        Secrets and hosts are overridden from the environment.
        """
        config_data = load_config_json()
        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: dict[str, Any]) -> "Settings":
        """Maps a flat config dict onto the settings sections."""
        # Keys starting with _comment_ are documentation only
        data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "huduma"),
                VERSION=data.get("VERSION", "0.3.0"),
                DEBUG=data.get("DEBUG", True),
                LOG_LEVEL=data.get("LOG_LEVEL", "DEBUG"),
                ENVIRONMENT=os.getenv("ENVIRONMENT", data.get("ENVIRONMENT", "development")),
            ),
            deployment=DeploymentSettings(
                API_HOST=os.getenv("API_HOST", data.get("API_HOST", "0.0.0.0")),
                API_PORT=int(os.getenv("API_PORT", data.get("API_PORT", 5000))),
                API_WORKERS=data.get("API_WORKERS", 1),
                API_PUBLIC_URL=os.getenv("API_PUBLIC_URL", data.get("API_PUBLIC_URL", "http://localhost:5000")),
                CORS_ORIGINS=data.get("CORS_ORIGINS", ["*"]),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=data.get("LOG_LEVEL", "DEBUG"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", True),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            domain=DomainSettings(
                DEFAULT_LANGUAGE=data.get("DEFAULT_LANGUAGE", "en"),
                SUPPORTED_LANGUAGES=data.get("SUPPORTED_LANGUAGES", ["en", "sw"]),
                DEFAULT_LOCATION=data.get("DEFAULT_LOCATION", "Nairobi"),
                TIMEZONE=data.get("TIMEZONE", "Africa/Nairobi"),
            ),
            database=DatabaseSettings(
                DB_HOST=os.getenv("DB_HOST", data.get("DB_HOST", "localhost")),
                DB_PORT=int(os.getenv("DB_PORT", data.get("DB_PORT", 5432))),
                DB_NAME=os.getenv("DB_NAME", data.get("DB_NAME", "huduma")),
                DB_USER=os.getenv("DB_USER", data.get("DB_USER", "postgres")),
                DB_PASSWORD=os.getenv("DB_PASSWORD", data.get("DB_PASSWORD", "")),
                DB_MIN_POOL_SIZE=data.get("DB_MIN_POOL_SIZE", 5),
                DB_MAX_POOL_SIZE=data.get("DB_MAX_POOL_SIZE", 20),
                DB_COMMAND_TIMEOUT=data.get("DB_COMMAND_TIMEOUT", 60),
                DB_RETRY_ATTEMPTS=data.get("DB_RETRY_ATTEMPTS", 3),
                DB_RETRY_DELAY=data.get("DB_RETRY_DELAY", 1.0),
            ),
            redis=RedisSettings(
                REDIS_HOST=os.getenv("REDIS_HOST", data.get("REDIS_HOST", "localhost")),
                REDIS_PORT=int(os.getenv("REDIS_PORT", data.get("REDIS_PORT", 6379))),
                REDIS_DB=data.get("REDIS_DB", 0),
                REDIS_PASSWORD=os.getenv("REDIS_PASSWORD", data.get("REDIS_PASSWORD", "")),
                REDIS_NAMESPACE=data.get("REDIS_NAMESPACE", "huduma"),
                REDIS_MAX_CONNECTIONS=data.get("REDIS_MAX_CONNECTIONS", 50),
            ),
            realtime=RealtimeSettings(
                REALTIME_BACKEND=os.getenv("REALTIME_BACKEND", data.get("REALTIME_BACKEND", "local")),
                PUSH_SEND_TIMEOUT=data.get("PUSH_SEND_TIMEOUT", 2.0),
                PUSH_CHANNEL_PREFIX=data.get("PUSH_CHANNEL_PREFIX", "push:user"),
                WS_PATH=data.get("WS_PATH", "/ws"),
                CLIENT_RECONNECT_DELAY=data.get("CLIENT_RECONNECT_DELAY", 5.0),
            ),
            payments=PaymentSettings(
                CURRENCY=data.get("CURRENCY", "KES"),
                MPESA_SIMULATE=data.get("MPESA_SIMULATE", True),
                MPESA_TRANSACTION_PREFIX=data.get("MPESA_TRANSACTION_PREFIX", "TX"),
                MPESA_MIN_AMOUNT=data.get("MPESA_MIN_AMOUNT", 1.0),
                MPESA_MAX_AMOUNT=data.get("MPESA_MAX_AMOUNT", 150000.0),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Returns the cached application settings.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


settings = get_settings()
