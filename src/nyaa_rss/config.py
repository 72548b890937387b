"""Pydantic Settings configuration management."""

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nyaa_rss.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://nyaa.si/?page=rss&"

# Namespaced item fields as exposed by feedparser -> raw field names used by the normalizer
DEFAULT_FIELD_MAP: dict[str, str] = {
    "nyaa_infohash": "hash",
    "nyaa_size": "filesize",
    "nyaa_category": "category",
    "nyaa_categoryid": "sub_category",
    "nyaa_seeders": "seeders",
    "nyaa_leechers": "leechers",
    "nyaa_downloads": "completed",
}


def _find_env_file() -> Path | None:
    """Locate a .env file, honouring NYAA_ENV_FILE first."""
    env_file = os.environ.get("NYAA_ENV_FILE")
    if env_file:
        return Path(env_file)

    current = Path.cwd() / ".env"
    return current if current.exists() else None


class NyaaConfig(BaseSettings):
    """Client configuration.

    Every field can be overridden through an ``NYAA_``-prefixed environment
    variable or a ``.env`` file, e.g. ``NYAA_RETRY_DELAY=2.5``.
    """

    model_config = SettingsConfigDict(
        env_prefix="NYAA_",
        env_file=_find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = "nyaa-rss/0.1"

    # Feed shape
    page_size: int = Field(default=75, ge=1)
    result_ceiling: int = Field(default=1000, ge=1)
    max_pages: int = Field(default=15, ge=1)
    max_page_field: str = "nyaa_maxpage"
    field_map: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_FIELD_MAP))

    # Query defaults
    default_filter: int = Field(default=0, ge=0, le=2)
    default_category: str = "1_0"
    default_sort: str = "id"
    default_direction: str = "desc"

    # Fan-out and retry
    retry_delay: float = Field(default=1.0, ge=0)
    retry_max_attempts: int | None = Field(default=None, ge=1)
    retry_max_delay: float | None = Field(default=None, gt=0)
    max_concurrency: int | None = Field(default=None, ge=1)
    request_timeout: float | None = Field(default=None, gt=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL: {v}")
        if not v.endswith(("?", "&")):
            v = v + ("&" if "?" in v else "?")
        return v

    @field_validator("default_direction")
    @classmethod
    def validate_direction(cls, v: str) -> str:
        if v not in ("asc", "desc"):
            raise ValueError(f"default_direction must be 'asc' or 'desc': {v}")
        return v


@lru_cache
def get_config() -> NyaaConfig:
    """Get cached configuration instance loaded from the environment."""
    try:
        return NyaaConfig()
    except ValidationError as e:
        logger.error(f"Invalid nyaa-rss configuration: {e}")
        raise InvalidArgumentError(f"Invalid configuration: {e}", code="CONFIG_ERROR") from e
