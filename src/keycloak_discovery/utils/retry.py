"""Retry policy shared by address resolution and directory registration."""

import random
from dataclasses import dataclass
from enum import Enum


class BackoffType(Enum):
    """Types of backoff strategies."""

    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    FIXED = "fixed"


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior.

    ``max_retries`` bounds the total number of attempts; ``calculate_delay``
    gives the pause after a failed attempt.
    """

    max_retries: int
    backoff_type: BackoffType = BackoffType.FIXED
    initial_delay: float = 5.0
    max_delay: float = 60.0
    jitter: bool = False

    def __post_init__(self):
        """Validate retry policy parameters."""
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be non-negative")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")

    @classmethod
    def fixed(cls, max_retries: int, interval: float) -> "RetryPolicy":
        return cls(
            max_retries=max_retries,
            backoff_type=BackoffType.FIXED,
            initial_delay=interval,
            max_delay=interval,
        )

    @classmethod
    def exponential(cls, initial_delay: float, max_delay: float, jitter: bool = True) -> "RetryPolicy":
        """Unbounded exponential policy, for callers that retry until stopped."""
        return cls(
            max_retries=2 ** 31 - 1,
            backoff_type=BackoffType.EXPONENTIAL,
            initial_delay=initial_delay,
            max_delay=max_delay,
            jitter=jitter,
        )

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay after a failed attempt.

        Args:
            attempt: Attempt number (1-based)

        Returns:
            Delay in seconds
        """
        if attempt <= 0:
            return 0.0

        if self.backoff_type == BackoffType.EXPONENTIAL:
            # Cap the exponent so long outages cannot overflow
            delay = self.initial_delay * (2 ** min(attempt - 1, 32))
        elif self.backoff_type == BackoffType.LINEAR:
            delay = self.initial_delay * attempt
        else:  # FIXED
            delay = self.initial_delay

        delay = min(delay, self.max_delay)

        # Add jitter to prevent thundering herd
        if self.jitter and delay > 0:
            jitter_range = delay * 0.1
            delay = max(0.0, delay + random.uniform(-jitter_range, jitter_range))

        return delay

    def should_retry(self, attempt: int) -> bool:
        """Whether another attempt may follow attempt number ``attempt``."""
        return attempt < self.max_retries
