"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_PROVIDERS: list[dict[str, Any]] = [
    {"name": "torrentio", "base_url": "https://torrentio.strem.fun", "priority": 1},
    {"name": "comet", "base_url": "https://comet.elfhosted.com", "priority": 2},
    {
        "name": "mediafusion",
        "base_url": "https://mediafusion.elfhosted.com",
        "priority": 3,
    },
    {"name": "torrentsdb", "base_url": "https://torrentsdb.com", "priority": 4},
    {
        "name": "knightcrawler",
        "base_url": "https://knightcrawler.elfhosted.com",
        "priority": 5,
    },
]

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "availarr",
    "environment": "dev",
    "http": {
        "follow_redirects": True,
        "user_agent": "Availarr/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "dir": "./.cache/availarr",
        "backend": "diskcache",
        "redis_url": "redis://localhost:6379/0",
        "ttl_seconds": 3600,
    },
    "availability": {
        "failure_threshold": 3,
        "health_check_interval_seconds": 300.0,
        "request_timeout_seconds": 8.0,
        "probe_timeout_seconds": 5.0,
        "batch_timeout_seconds": 15.0,
        "batch_concurrency": 5,
        "target_count": 20,
        "candidate_count": 30,
        "recent_window_days": 90,
        "recent_episode_days": 30,
        "verified_ttl_seconds": 1800,
        "fallback_ttl_seconds": 300,
    },
    "providers": DEFAULT_PROVIDERS,
}
