"""Settings for the Twinen feed backend."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


class Settings(BaseSettings):
    redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")
    rate_limit_backend: str = _env_field("memory", "RATE_LIMIT_BACKEND")
    # How often the in-process limiter drops expired counters
    rate_limit_cleanup_seconds: int = _env_field(300, "RATE_LIMIT_CLEANUP_SECONDS")

    feed_default_limit: int = _env_field(10, "FEED_DEFAULT_LIMIT")
    feed_max_limit: int = _env_field(50, "FEED_MAX_LIMIT")
    # Upper bound on candidates pulled per ranking call; newest first
    feed_candidate_limit: int = _env_field(1000, "FEED_CANDIDATE_LIMIT")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_metrics_public: bool = _env_field(True, "OBS_METRICS_PUBLIC")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("twinen-api", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
    cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment helpers
    def is_prod(self) -> bool:
        return self.environment.lower() in ("prod", "production", "live")

    def is_dev(self) -> bool:
        return self.environment.lower() in ("dev", "development")

    @field_validator("rate_limit_backend", mode="before")
    def _normalise_backend(cls, value):  # type: ignore[override]
        text = str(value or "memory").strip().lower()
        if text not in ("memory", "redis"):
            raise ValueError(f"unsupported rate limit backend: {value!r}")
        return text

    @field_validator("cors_allow_origins", mode="before")
    def _split_cors(cls, value):  # type: ignore[override]
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple, set)):
            return tuple(str(item).strip() for item in value if str(item).strip())
        return ()


def _normalise_level(level: str) -> str:
    return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)
