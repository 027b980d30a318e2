from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    pass


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Runtime settings for devtools-check.

    Loaded from (in order):
      - process env
      - optional `.env` file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- catalog ---
    # If unset, the catalog bundled with the package is used.
    catalog_path: Path | None = Field(default=None, alias="DEVTOOLS_CATALOG")
    install_hint: str | None = Field(default=None, alias="DEVTOOLS_INSTALL_HINT")

    # --- probing ---
    probe_timeout_s: float = Field(default=5.0, alias="DEVTOOLS_PROBE_TIMEOUT")
    jobs: int = Field(default=1, alias="DEVTOOLS_JOBS")

    # --- logging ---
    log_level: str = Field(default="WARNING", alias="DEVTOOLS_LOG_LEVEL")
    log_dir: Path | None = Field(default=None, alias="DEVTOOLS_LOG_DIR")
    log_max_bytes: int = Field(default=5 * 1024 * 1024, alias="DEVTOOLS_LOG_MAX_BYTES")
    log_backup_count: int = Field(default=3, alias="DEVTOOLS_LOG_BACKUP_COUNT")


def _validate_settings(s: Settings) -> None:
    problems: list[str] = []
    if not s.probe_timeout_s > 0:
        problems.append("DEVTOOLS_PROBE_TIMEOUT must be > 0")
    if s.jobs < 1:
        problems.append("DEVTOOLS_JOBS must be >= 1")
    if str(s.log_level).strip().upper() not in LOG_LEVELS:
        problems.append(f"DEVTOOLS_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
    if s.log_backup_count < 0:
        problems.append("DEVTOOLS_LOG_BACKUP_COUNT must be >= 0")
    if problems:
        raise ConfigError("Invalid configuration: " + "; ".join(problems))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    s = Settings()
    _validate_settings(s)
    return s
