"""
Environment configuration for browser-runner.

Loads configuration from environment variables using pydantic-settings.
"""

from pathlib import Path
from typing import List, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DEV_SERVER_PORTS = [3000, 3001, 3002, 5173, 5174, 8080, 8000, 4200, 5000, 9000, 1234, 4321, 3333]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="BROWSER_RUNNER_", env_file=".env", extra="ignore")

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Logging level"
    )
    log_format: Literal["text", "json"] = Field(
        default="text", description="Logging format - text for human-readable, json for structured logs"
    )

    # Executor Configuration
    work_dir: Path = Field(
        default_factory=Path.cwd, description="Directory holding temporary execution units"
    )
    temp_prefix: str = Field(default=".temp-execution-", description="File name prefix of execution units")
    temp_suffix: str = Field(default=".py", description="File name suffix of execution units")
    install_browser: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium", description="Browser binary fetched when the toolkit is installed"
    )

    # Dev-Server Detection
    dev_server_ports: List[int] = Field(
        default_factory=lambda: list(DEFAULT_DEV_SERVER_PORTS),
        description="Baseline ports probed for local dev servers",
    )
    probe_timeout: float = Field(default=0.5, gt=0, le=10.0, description="Per-probe timeout in seconds")

    # Passed straight through to the toolkit launch options
    headless: bool = Field(default=False, validation_alias=AliasChoices("HEADLESS", "BROWSER_RUNNER_HEADLESS"))
    slow_mo: int = Field(default=0, ge=0, validation_alias=AliasChoices("SLOW_MO", "BROWSER_RUNNER_SLOW_MO"))


settings = Settings()


def get_settings() -> Settings:
    return settings
