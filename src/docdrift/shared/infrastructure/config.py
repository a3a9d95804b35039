"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (``DOCDRIFT_`` prefix) and an
optional .env file. A Settings instance is built once at process start and
passed explicitly to the components that need it.
"""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="DOCDRIFT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="docdrift", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="WARNING", description="Logging level")

    # Storage
    data_dir: str = Field(default=".docdrift", description="Project data directory")
    cache_dir: str = Field(default=".docdrift/cache", description="Spec cache directory")
    history_file: str = Field(default=".docdrift/history.jsonl", description="Snapshot history file")
    checkpoint_dir: str | None = Field(
        default=None,
        description="Checkpoint directory (defaults to the system temp dir)",
    )
    checkpoint_prefix: str = Field(default="docdrift", description="Checkpoint file name prefix")
    orphan_max_age_seconds: int = Field(default=3600, ge=0, description="Age after which a checkpoint is stale")

    # Batch processing
    yield_every: int = Field(default=5, ge=1, description="Items between cooperative yields")
    checkpoint_every: int = Field(default=1, ge=1, description="Items between checkpoint writes")

    # History retention
    history_max_entries: int | None = Field(default=500, ge=1, description="Snapshots kept after pruning")
    history_max_age_days: int | None = Field(default=None, ge=1, description="Maximum snapshot age in days")

    # Health scoring
    weight_completeness: float = Field(default=0.4, ge=0.0, description="Weight of completeness in health")
    weight_accuracy: float = Field(default=0.4, ge=0.0, description="Weight of accuracy in health")
    weight_examples: float = Field(default=0.2, ge=0.0, description="Weight of example validity in health")
    style: str = Field(default="minimal", description="Documentation style preset")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"

    @property
    def cache_path(self) -> Path:
        return Path(self.cache_dir)

    @property
    def history_path(self) -> Path:
        return Path(self.history_file)

    @model_validator(mode="after")
    def _validate_weights(self) -> "Settings":
        """Fail fast: at least completeness or accuracy must carry weight."""
        if self.weight_completeness + self.weight_accuracy <= 0:
            raise ValueError("Health weights for completeness and accuracy cannot both be zero")
        if self.style not in ("minimal", "verbose", "types-only"):
            raise ValueError(f"Unknown documentation style: {self.style}")
        return self
