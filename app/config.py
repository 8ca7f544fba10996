"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable, Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="IMDb Scraper API", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    imdb_base_url: HttpUrl = Field(
        default="https://www.imdb.com", alias="IMDB_BASE_URL"
    )
    interest_index_path: str = Field(
        default="/interest/all/", alias="INTEREST_INDEX_PATH"
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="USER_AGENT")
    request_timeout_seconds: float = Field(
        default=20.0, alias="REQUEST_TIMEOUT", gt=0
    )

    cache_ttl_seconds: int = Field(default=3_600, alias="CACHE_TTL", ge=1)
    cache_sweep_interval_seconds: int = Field(
        default=600, alias="CACHE_SWEEP_INTERVAL", ge=0
    )

    cors_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("*",), alias="CORS_ORIGINS"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: object) -> tuple[str, ...]:
        """Accept a comma separated string or an iterable of origins."""

        if value is None:
            return ("*",)
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError("CORS_ORIGINS must be a string or iterable of strings")

        cleaned = tuple(dict.fromkeys(entry for entry in raw_values if entry))
        return cleaned or ("*",)

    @field_validator("interest_index_path")
    @classmethod
    def _normalise_index_path(cls, value: str) -> str:
        path = value.strip() or "/interest/all/"
        if not path.startswith("/"):
            path = f"/{path}"
        return path

    @property
    def base_url(self) -> str:
        return str(self.imdb_base_url).rstrip("/")

    @property
    def interest_index_url(self) -> str:
        """Return the page listing every interest category."""

        return f"{self.base_url}{self.interest_index_path}"

    def genre_url(self, genre_id: str) -> str:
        """Return the interest page for a single genre identifier."""

        return f"{self.base_url}/interest/{genre_id}/"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
