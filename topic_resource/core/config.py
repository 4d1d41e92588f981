# topic_resource/core/config.py
import json
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central settings loaded from environment variables (and .env).

    Notes
    -----
    - `settling_delay_sec` bounds the eventual-consistency window of Secrets
      Manager after secrets are created or deleted. Production deployments
      should not go below the default.
    - `cors_allow_origins` accepts JSON array or comma-separated string.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------- AWS ----------
    aws_region: str | None = None
    aws_connect_timeout_sec: float = 10.0
    aws_read_timeout_sec: float = 60.0
    aws_max_attempts: int = Field(default=5, ge=1)

    # ---------- Reconciliation ----------
    settling_delay_sec: float = Field(
        default=30.0, ge=0,
        description="Wait after secret store changes before dependent calls."
    )

    # ---------- Kafka admin client ----------
    kafka_client_id: str = "msk-topic-resource"
    kafka_api_version: str | None = None
    kafka_security_protocol: str = "SASL_SSL"
    kafka_sasl_mechanism: str = "OAUTHBEARER"

    # Client timeouts (ms)
    request_timeout_ms: int = 20_000

    # ---------- Logging ----------
    log_level: str = "INFO"

    # ---------- HTTP surface ----------
    cors_allow_origins: list[str] | None = None

    @field_validator("cors_allow_origins", mode="before")
    def _parse_cors_origins(cls, v):
        """Accept JSON array or comma-separated string."""
        if v is None:
            return None
        if isinstance(v, str):
            try:
                parsed = json.loads(v)  # JSON array
                if isinstance(parsed, list):
                    return [str(s).strip() for s in parsed if str(s).strip()]
            except ValueError:
                return [s.strip() for s in v.split(",") if s.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
