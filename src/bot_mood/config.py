"""Centralised application settings loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """All runtime configuration for the mood engine and its driver.

    Values are read from environment variables first, then from a *.env*
    file located at the project root.  Every variable lives in the flat
    ``BOT_MOOD_`` namespace (e.g. ``BOT_MOOD_RANDOM_SEED=7``).
    """

    model_config = SettingsConfigDict(
        env_prefix="BOT_MOOD_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ───────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool | None = None  # None → JSON unless stderr is a TTY

    # ── Engine ────────────────────────────────────────────────
    initial_confidence: float = Field(0.5, ge=0.0, le=1.0)
    random_seed: int | None = None  # None → OS-seeded generator
    degenerate_fallback: Literal["last_state", "uniform"] = "last_state"
    clamp_before_normalize: bool = False

    # ── Driver timing ─────────────────────────────────────────
    base_state_duration_seconds: float = Field(5.0, gt=0.0)
    dwell_jitter: float = Field(0.2, ge=0.0, le=1.0)  # ±20 %
    state_change_cooldown_seconds: float = Field(2.0, ge=0.0)
    interaction_window_seconds: float = Field(30.0, ge=0.0)

    # ── Day / night window (open interval, local hours) ───────
    day_start_hour: float = Field(6, ge=0, le=24)
    day_end_hour: float = Field(22, ge=0, le=24)

    # ── Activity tracker ──────────────────────────────────────
    adaptation_speed: float = Field(0.01, ge=0.0, le=1.0)
    default_activity_level: float = Field(0.5, ge=0.0, le=1.0)
    preferred_play_time: float = Field(0.5, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_day_window(self) -> Settings:
        if self.day_start_hour >= self.day_end_hour:
            raise ValueError(
                f"day_start_hour ({self.day_start_hour}) must be before day_end_hour ({self.day_end_hour})"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()
