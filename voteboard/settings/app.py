"""Engine settings powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


ONE_WEEK_IN_SECONDS = 7 * 24 * 3600
VOTE_SCORE = 432.0


class EngineSettings(BaseSettings):
    """Centralized environment configuration.

    Every field can be overridden with a ``VOTEBOARD_``-prefixed environment
    variable, e.g. ``VOTEBOARD_REDIS_URL``.
    """

    model_config = SettingsConfigDict(
        env_prefix="VOTEBOARD_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    redis_url: str = Field(default="redis://localhost:6379")
    redis_db: Annotated[int, Field(ge=0)] = 15
    socket_timeout_seconds: Annotated[float, Field(gt=0)] = 5.0

    voting_window_seconds: Annotated[int, Field(gt=0)] = ONE_WEEK_IN_SECONDS
    # Initial boost over the creation timestamp (the submitter's vote).
    base_weight: Annotated[float, Field(ge=0)] = VOTE_SCORE
    vote_weight: Annotated[float, Field(gt=0)] = VOTE_SCORE
    page_size: Annotated[int, Field(ge=1)] = 25
    group_cache_ttl_seconds: Annotated[int, Field(gt=0)] = 60

    log_level: str = "INFO"
    log_json: bool = True


def get_settings() -> EngineSettings:
    """Get a settings instance."""
    return EngineSettings()
