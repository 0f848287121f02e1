"""Configuration for the generation pipeline."""

import os
from dataclasses import dataclass

LOCK_POLICIES = ("advisory", "enforce")


@dataclass
class PipelineConfig:
    """Pipeline limits and policies."""

    stage_timeout_seconds: float = 120.0
    queue_size: int = 16  # bounded channel between producer and SSE writer
    lock_enforcement: str = "advisory"  # "advisory" or "enforce"
    disconnect_poll_seconds: float = 0.5

    def __post_init__(self):
        if self.lock_enforcement not in LOCK_POLICIES:
            raise ValueError(
                f"Invalid lock enforcement '{self.lock_enforcement}'. Must be one of {LOCK_POLICIES}"
            )
        if self.stage_timeout_seconds <= 0:
            raise ValueError("stage_timeout_seconds must be positive")
        if self.queue_size < 1:
            raise ValueError("queue_size must be at least 1")

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Load configuration from environment variables."""
        return cls(
            stage_timeout_seconds=float(os.getenv("SKETCH2CAD_STAGE_TIMEOUT", "120")),
            queue_size=int(os.getenv("SKETCH2CAD_QUEUE_SIZE", "16")),
            lock_enforcement=os.getenv("SKETCH2CAD_LOCK_ENFORCEMENT", "advisory").strip().lower(),
            disconnect_poll_seconds=float(os.getenv("SKETCH2CAD_POLL_INTERVAL", "0.5")),
        )

    @property
    def enforces_locks(self) -> bool:
        return self.lock_enforcement == "enforce"
