# config.py
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings, read from environment variables and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    database_backend: Literal["mysql", "sqlite"] = Field(default="mysql")
    database_host: str = Field(default="localhost")
    database_port: int = Field(default=3306)
    database_user: str = Field(default="root")
    database_password: str = Field(default="")
    database_name: str = Field(default="inventory")
    # seconds, applied to connect, read and write
    database_timeout: int = Field(default=10)
    sqlite_path: str = Field(default="inventory.db")
    log_level: str = Field(default="INFO")
    port: int = Field(default=8000, alias="FASTAPIPORT")

    @field_validator("database_backend", mode="before")
    @classmethod
    def _lower_backend(cls, value):
        return value.lower() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def load_settings() -> Settings:
    return Settings()
