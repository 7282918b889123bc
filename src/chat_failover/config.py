"""Chat failover — configuration.

``FailoverConfig`` is the immutable value a ``FailoverChain`` is built with.
``Settings`` loads the same options from the environment / .env file.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_failover import constants as const


class FailoverConfig(BaseModel):
    """Retry, failover and circuit-breaker options for one chain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: int = Field(default=const.DEFAULT_MAX_RETRIES, ge=0)
    retry_delay_ms: int = Field(default=const.DEFAULT_RETRY_DELAY_MS, gt=0)
    circuit_breaker_enabled: bool = const.DEFAULT_CIRCUIT_BREAKER_ENABLED
    failure_threshold: int = Field(default=const.DEFAULT_FAILURE_THRESHOLD, gt=0)
    success_threshold: int = Field(default=const.DEFAULT_SUCCESS_THRESHOLD, gt=0)
    timeout_ms: int = Field(default=const.DEFAULT_CIRCUIT_BREAKER_TIMEOUT_MS, gt=0)


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="CHAT_FAILOVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool = False

    # ── Retry ────────────────────────────────────────────────
    max_retries: int = Field(default=const.DEFAULT_MAX_RETRIES, ge=0)
    retry_delay_ms: int = Field(default=const.DEFAULT_RETRY_DELAY_MS, gt=0)

    # ── Circuit breaker ──────────────────────────────────────
    circuit_breaker_enabled: bool = const.DEFAULT_CIRCUIT_BREAKER_ENABLED
    failure_threshold: int = Field(default=const.DEFAULT_FAILURE_THRESHOLD, gt=0)
    success_threshold: int = Field(default=const.DEFAULT_SUCCESS_THRESHOLD, gt=0)
    timeout_ms: int = Field(default=const.DEFAULT_CIRCUIT_BREAKER_TIMEOUT_MS, gt=0)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    def to_config(self) -> FailoverConfig:
        return FailoverConfig(
            max_retries=self.max_retries,
            retry_delay_ms=self.retry_delay_ms,
            circuit_breaker_enabled=self.circuit_breaker_enabled,
            failure_threshold=self.failure_threshold,
            success_threshold=self.success_threshold,
            timeout_ms=self.timeout_ms,
        )


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
