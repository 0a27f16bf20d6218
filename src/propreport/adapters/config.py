# src/propreport/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # -----------------------------
    # Generation service (Responses API)
    # -----------------------------
    OPENAI_API_KEY: str | None = Field(default=None)
    OPENAI_PROMPT_ID: str | None = Field(default=None)  # pmpt_...
    OPENAI_MODEL: str = Field(default="gpt-5-mini-2025-08-07")
    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1")

    OPENAI_TIMEOUT_S: float = Field(default=120.0)
    OPENAI_MAX_RETRIES: int = Field(default=2)
    OPENAI_BACKOFF_BASE_S: float = Field(default=0.8)

    # -----------------------------
    # HTTP surface
    # -----------------------------
    # comma separated, "*" for any origin
    CORS_ALLOW_ORIGINS: str = Field(default="*")

    # raw upstream payloads bigger than this are not echoed back to clients
    RAW_RESPONSE_MAX_CHARS: int = Field(default=40_000)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("OPENAI_API_KEY", "OPENAI_PROMPT_ID", mode="before")
    @classmethod
    def _blank_is_missing(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("OPENAI_TIMEOUT_S", "OPENAI_BACKOFF_BASE_S", mode="before")
    @classmethod
    def _non_negative_seconds(cls, v: Any) -> Any:
        try:
            f = float(v)
        except (TypeError, ValueError) as err:
            raise ValueError("seconds must be numeric") from err
        if f < 0:
            raise ValueError("seconds must be non-negative")
        return f

    @field_validator("OPENAI_MAX_RETRIES", "RAW_RESPONSE_MAX_CHARS", mode="before")
    @classmethod
    def _non_negative_int(cls, v: Any) -> Any:
        try:
            i = int(float(v))
        except (TypeError, ValueError) as err:
            raise ValueError("value must be an integer") from err
        if i < 0:
            raise ValueError("value must be non-negative")
        return i

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()] or ["*"]


config = AppConfig()
