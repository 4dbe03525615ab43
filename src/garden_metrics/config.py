"""Configuration and environment for the metrics exporter."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Exporter settings loaded from environment and .env."""

    model_config = SettingsConfigDict(
        env_prefix="GARDEN_METRICS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Kubernetes (garden cluster)
    kubeconfig: Path | None = Field(
        default=None,
        description="Path to the garden kubeconfig; uses in-cluster config or KUBECONFIG if unset",
    )
    context: str | None = Field(default=None, description="Kubernetes context to use")
    api_group: str = Field(default="core.gardener.cloud", description="API group of the Gardener resources")
    api_version: str = Field(default="v1beta1", description="API version of the Gardener resources")

    # Exposition
    bind_address: str = Field(default="0.0.0.0", description="Address the metrics endpoint listens on")
    port: int = Field(default=2718, ge=1, le=65535, description="Port the metrics endpoint listens on")

    # Cache behavior
    watch_timeout_seconds: int = Field(
        default=300,
        ge=1,
        description="Server-side timeout of a single watch request before it is re-established",
    )
    relist_backoff_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Pause after a failed list/watch before the cache relists",
    )
    sync_timeout_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="How long to wait for the initial cache sync before serving metrics",
    )

    # Response durations
    response_max_age_seconds: float = Field(
        default=300.0,
        gt=0.0,
        description="Age after which a measured Shoot API response time is no longer reported",
    )

    # Collection
    parallel_collect: bool = Field(
        default=False,
        description="Run the per-kind extractors concurrently during a scrape",
    )


def get_settings() -> Settings:
    """Return validated settings instance."""
    return Settings()
