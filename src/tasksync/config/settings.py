"""Application settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from ..models import SyncConfig


class Settings(BaseSettings):
    """Application settings, read from TASKSYNC_* environment variables."""

    api_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the remote sync API",
    )

    batch_size: int = Field(
        default=50,
        ge=1,
        description="Maximum mutations sent in one batch",
    )

    sync_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Timeout in seconds for a batch request",
    )

    health_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout in seconds for the connectivity probe",
    )

    max_retries: int = Field(
        default=3,
        ge=1,
        description="Failed attempts before a task is marked as errored",
    )

    database_path: Path = Field(
        default=Path("tasksync.db"),
        description="SQLite file holding tasks and the mutation queue",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    model_config = {
        "env_prefix": "TASKSYNC_",
    }

    def sync_config(self) -> SyncConfig:
        """Project the settings the sync components need."""
        return SyncConfig(
            base_url=self.api_base_url,
            batch_size=self.batch_size,
            sync_timeout=self.sync_timeout,
            health_timeout=self.health_timeout,
            max_retries=self.max_retries,
        )
