"""Workbench core configuration loaded from environment variables."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from workbench_core.parser.dialects import Dialect

logger = logging.getLogger(__name__)


class WorkbenchEnv(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables with WORKBENCH_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="WORKBENCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    env: WorkbenchEnv = WorkbenchEnv.DEV
    debug: bool = False

    # Dialect used when a caller does not tag its SQL or plan payload.
    default_dialect: Dialect = Dialect.POSTGRESQL

    # Logging
    structured_logging: bool = False
    log_level: str = "INFO"

    # Plan analyzer thresholds
    seq_scan_row_threshold: int = 1000
    nested_loop_row_threshold: int = 10_000
    sort_time_threshold_ms: float = 100.0
    row_drift_ratio: float = 10.0
    high_cost_threshold: float = 10_000.0
    critical_cost_threshold: float = 100_000.0

    @field_validator("default_dialect", mode="before")
    @classmethod
    def parse_dialect(cls, v: object) -> Dialect:
        if isinstance(v, Dialect):
            return v
        return Dialect.parse(str(v))

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: object) -> str:
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v!r}")
        return level


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info(
            "Loaded settings for environment: %s (dialect=%s)",
            settings.env.value,
            settings.default_dialect.value,
        )

    return settings
