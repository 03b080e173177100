from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PublicConfig(BaseSettings):
    """
    Runtime config with safe defaults.

    Loaded from (in order):
      - process env
      - optional `.env` file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- logging ---
    log_level: str = Field(default="INFO", alias="BACKGROUND_LOG_LEVEL")
    # Unset => no file log; stream logging only.
    log_dir: Path | None = Field(default=None, alias="BACKGROUND_LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="BACKGROUND_LOG_MAX_BYTES")
    log_backup_count: int = Field(default=3, alias="BACKGROUND_LOG_BACKUP_COUNT")
    log_stream: str = Field(default="stderr", alias="BACKGROUND_LOG_STREAM")  # stderr|stdout
    log_json: bool = Field(default=True, alias="BACKGROUND_LOG_JSON")

    # --- background drains ---
    # How long app shutdown waits for in-flight drains before cancelling them.
    shutdown_timeout_sec: float = Field(default=30.0, alias="BACKGROUND_SHUTDOWN_TIMEOUT_SEC")

    # --- demo server ---
    host: str = Field(default="127.0.0.1", alias="BACKGROUND_HOST")
    port: int = Field(default=3001, alias="BACKGROUND_PORT")
    demo_email_delay_sec: float = Field(default=2.0, alias="BACKGROUND_DEMO_EMAIL_DELAY_SEC")
    demo_activity_delay_sec: float = Field(
        default=1.0, alias="BACKGROUND_DEMO_ACTIVITY_DELAY_SEC"
    )
