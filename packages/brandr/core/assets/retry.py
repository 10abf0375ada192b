from __future__ import annotations

import random

from pydantic import BaseModel, Field, field_validator

from brandr.core.config.models import DownloadConfig


class RetryPolicy(BaseModel):
    """Retry policy for remote asset downloads.

    Exponential backoff: the n-th retry waits ``base_delay_s * 2**(n-1)``,
    capped at ``max_delay_s``.

    Args:
        max_attempts: Maximum number of attempts (including the first request)
        base_delay_s: Delay before the first retry
        max_delay_s: Upper bound on any single delay
        jitter: Jitter as fraction of delay (0.15 = +/-15% randomization)
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=3, ge=1)
    base_delay_s: float = Field(default=1.0, ge=0.0)
    max_delay_s: float = Field(default=8.0, ge=0.0)
    jitter: float = Field(default=0.0, ge=0.0, le=1.0)

    @field_validator("max_delay_s")
    @classmethod
    def validate_max_delay(cls, v: float, info) -> float:
        """Ensure max_delay_s >= base_delay_s."""
        base = info.data.get("base_delay_s", 1.0)
        if v < base:
            raise ValueError("max_delay_s must be >= base_delay_s")
        return v

    @classmethod
    def from_config(cls, config: DownloadConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            base_delay_s=config.base_delay_s,
            max_delay_s=max(config.max_delay_s, config.base_delay_s),
        )

    def compute_delay(self, attempt: int) -> float:
        """Delay before the retry that follows failed attempt ``attempt`` (1-indexed)."""
        delay: float = min(self.max_delay_s, self.base_delay_s * (2 ** (attempt - 1)))
        if self.jitter > 0:
            spread = delay * self.jitter
            delay = max(0.0, delay + random.uniform(-spread, spread))
        return delay
