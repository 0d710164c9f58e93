"""Configuration passed explicitly into the sync components."""

from pydantic import BaseModel, Field


class SyncConfig(BaseModel):
    """Tunables for dispatch, reconciliation and probing.

    Built from :class:`tasksync.config.Settings` at the process edge; the
    sync components never read the environment themselves.
    """

    model_config = {"frozen": True}

    base_url: str = "http://localhost:3000/api"
    batch_size: int = Field(default=50, ge=1)
    sync_timeout: float = Field(default=15.0, gt=0)
    health_timeout: float = Field(default=5.0, gt=0)
    max_retries: int = Field(default=3, ge=1)
