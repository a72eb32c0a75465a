"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class ProviderDescriptor(BaseModel):
    """One upstream Stremio-addon indexing service."""

    name: str = Field(description="Unique provider key (used for health tracking).")
    base_url: str = Field(
        description="Addon base URL, e.g. https://torrentio.strem.fun"
    )
    priority: int = Field(description="Lower value is queried first.")
    enabled: bool = Field(default=True, description="Disabled providers are ignored.")

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("provider name must not be empty")
        return v

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"provider base_url must be http(s): {v!r}")
        return v.rstrip("/")


class CacheConfig(BaseModel):
    """Cache configuration (backend-agnostic)."""

    backend: Literal["diskcache", "redis"] = Field(
        default="diskcache",
        description="Cache backend: 'diskcache' (SQLite) or 'redis'",
    )
    directory: Path = Field(
        default=Path("./.cache/availarr"),
        validation_alias=AliasChoices("directory", "dir"),
        description="Diskcache SQLite DB path",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis)",
    )
    ttl_seconds: int = Field(
        default=3600,
        description="Default TTL for cache entries (seconds)",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel cache ops (semaphore limit)",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_directory(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("ttl_seconds")
    @classmethod
    def _validate_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache ttl_seconds must be >= 0")
        return v


class AvailabilityConfig(BaseModel):
    """Tuning for provider health, timeouts, batching and result caching."""

    failure_threshold: int = Field(
        default=3,
        description="Consecutive failures before a provider is skipped.",
    )
    health_check_interval_seconds: float = Field(
        default=300.0,
        description="Cool-down window after which a provider's failures are forgotten.",
    )
    request_timeout_seconds: float = Field(
        default=8.0,
        description="Total deadline for one provider stream request.",
    )
    probe_timeout_seconds: float = Field(
        default=5.0,
        description="Deadline for a provider liveness probe (manifest.json).",
    )
    batch_timeout_seconds: float = Field(
        default=15.0,
        description="Outer wall-clock timeout for a batch availability check.",
    )
    batch_concurrency: int = Field(
        default=5,
        description="Max items resolved in parallel within one batch.",
    )
    target_count: int = Field(
        default=20,
        description="Number of available items a batch tries to collect.",
    )
    candidate_count: int = Field(
        default=30,
        description="Max metadata candidates checked per feed.",
    )
    recent_window_days: int = Field(
        default=90,
        description="Movies released within this many days count as recent.",
    )
    recent_episode_days: int = Field(
        default=30,
        description="Series with an episode aired this recently count as recent.",
    )
    verified_ttl_seconds: int = Field(
        default=1800,
        description="Cache TTL for verified feed results.",
    )
    fallback_ttl_seconds: int = Field(
        default=300,
        description="Cache TTL for degraded (metadata-only) feed results.",
    )

    @field_validator(
        "health_check_interval_seconds",
        "request_timeout_seconds",
        "probe_timeout_seconds",
        "batch_timeout_seconds",
    )
    @classmethod
    def _validate_positive_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts and intervals must be > 0")
        return v

    @field_validator(
        "failure_threshold",
        "batch_concurrency",
        "target_count",
        "candidate_count",
        "recent_window_days",
        "recent_episode_days",
    )
    @classmethod
    def _validate_positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/cache/availability/providers).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    app_name: str = Field(default="availarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    http_user_agent: str = Field(
        default="Availarr/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )

    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # TMDB API key (required for the just-released feeds and id lookups)
    tmdb_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "tmdb_api_key",
            AliasPath("tmdb", "api_key"),
        ),
        description="TMDB API key for external-id lookups and discovery.",
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    availability: AvailabilityConfig = Field(default_factory=AvailabilityConfig)
    providers: list[ProviderDescriptor] = Field(default_factory=list)

    @field_validator("providers")
    @classmethod
    def _validate_unique_providers(
        cls, v: list[ProviderDescriptor]
    ) -> list[ProviderDescriptor]:
        seen: set[str] = set()
        for descriptor in v:
            if descriptor.name in seen:
                raise ValueError(f"duplicate provider name: {descriptor.name!r}")
            seen.add(descriptor.name)
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "user_agent": self.http_user_agent,
                "follow_redirects": self.http_follow_redirects,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "tmdb": {"api_key": "***" if self.tmdb_api_key else None},
            "cache": self.cache.model_dump(mode="json"),
            "availability": self.availability.model_dump(),
            "providers": [p.model_dump() for p in self.providers],
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read AVAILARR_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - AVAILARR_LOG_LEVEL
    - AVAILARR_TMDB_API_KEY
    - AVAILARR_CACHE_BACKEND
    - AVAILARR_REQUEST_TIMEOUT_SECONDS
    """

    model_config = SettingsConfigDict(
        env_prefix="AVAILARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_user_agent: Optional[str] = None
    http_follow_redirects: Optional[bool] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    tmdb_api_key: Optional[str] = None

    cache_backend: Optional[Literal["diskcache", "redis"]] = None
    cache_dir: Optional[Path] = None
    cache_redis_url: Optional[str] = None
    cache_ttl_seconds: Optional[int] = None

    failure_threshold: Optional[int] = None
    health_check_interval_seconds: Optional[float] = None
    request_timeout_seconds: Optional[float] = None
    probe_timeout_seconds: Optional[float] = None
    batch_timeout_seconds: Optional[float] = None
    batch_concurrency: Optional[int] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
