"""Configuration management for shellout."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shellout.drains import DEFAULT_CHUNK_SIZE


class Settings(BaseSettings):
    """Runner settings."""

    model_config = SettingsConfigDict(
        env_prefix="SHELLOUT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Process Configuration
    shell: str = Field(default="/bin/bash", description="Shell used to run command lines with -c")
    drain_mode: Literal["auto", "selector", "thread"] = Field(
        default="auto", description="How the output pipes are read"
    )
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0, description="Maximum bytes read from a pipe at once")

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Log level")


def get_settings() -> Settings:
    """Get settings from the environment and an optional .env file."""
    return Settings()
