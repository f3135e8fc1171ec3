"""Pacing delay between account actions."""

import math
import random
from dataclasses import dataclass

from config.settings import DelayConfig


@dataclass(frozen=True)
class DelayPolicy:
    min_seconds: float
    max_seconds: float

    def __post_init__(self):
        if not (math.isfinite(self.min_seconds) and math.isfinite(self.max_seconds)):
            raise ValueError(
                f"delay bounds must be finite, got [{self.min_seconds}, {self.max_seconds}]"
            )
        if self.min_seconds < 0 or self.max_seconds < self.min_seconds:
            raise ValueError(
                f"invalid delay range [{self.min_seconds}, {self.max_seconds}]"
            )

    @classmethod
    def fixed(cls, seconds: float) -> "DelayPolicy":
        return cls(seconds, seconds)

    @classmethod
    def from_config(cls, cfg: DelayConfig) -> "DelayPolicy":
        return cls(cfg.min_seconds, cfg.max_seconds)

    def sample(self, rng: random.Random) -> float:
        """Fixed delay when the bounds match, else uniform over the closed range."""
        if self.min_seconds == self.max_seconds:
            return self.min_seconds
        return rng.uniform(self.min_seconds, self.max_seconds)
