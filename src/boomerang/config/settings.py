"""Application settings loaded from environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "BOOMERANG_"}

    openai_api_key: str = Field(description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI model name")
    openai_base_url: str | None = Field(
        default=None, description="Override for OpenAI-compatible endpoints"
    )
    db_path: Path = Field(
        default=Path.home() / ".boomerang" / "boomerang.db",
        description="SQLite database path",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Path | None = Field(default=None, description="Optional log file")
    confidence_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Rule confidence at or above which the LLM is skipped",
    )

    transport_provider: Literal["meta", "twilio"] = Field(
        default="twilio", description="Chat transport backend"
    )
    meta_access_token: str | None = Field(default=None)
    meta_phone_number_id: str | None = Field(default=None)
    meta_app_secret: str | None = Field(default=None)
    meta_verify_token: str | None = Field(default=None)
    twilio_account_sid: str | None = Field(default=None)
    twilio_auth_token: str | None = Field(default=None)
    twilio_whatsapp_number: str = Field(default="whatsapp:+14155238886")

    worker_concurrency: int = Field(default=5, ge=1, description="Parallel deliveries")
    job_max_attempts: int = Field(default=3, ge=1, description="Delivery attempts per job")
    job_backoff_seconds: float = Field(
        default=2.0, gt=0, description="Base delay for exponential retry backoff"
    )
    poll_interval_seconds: int = Field(
        default=60, ge=1, description="How often the worker picks up new reminders"
    )
    message_retention_days: int = Field(default=30, ge=1)
    summary_message_limit: int = Field(default=50, ge=1)
