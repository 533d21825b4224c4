"""Backoff curves for retry delays.

All delays are integer milliseconds. Attempt numbers are 1-based: the first
retry is attempt 1.
"""

from __future__ import annotations

from enum import Enum


class RetryStrategy(str, Enum):
    """Supported delay-growth curves."""

    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


def calculate_delay(attempt: int, base_delay: int, max_delay: int, strategy: str) -> int:
    """Calculate the delay before the given retry attempt.

    Args:
        attempt: 1-based retry attempt number
        base_delay: Base delay in milliseconds
        max_delay: Upper clamp in milliseconds
        strategy: Strategy name; anything unrecognized behaves as exponential

    Returns:
        Delay in milliseconds

    Raises:
        ValueError: If attempt is lower than 1
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")

    if strategy == RetryStrategy.FIXED:
        return min(base_delay, max_delay)
    if strategy == RetryStrategy.LINEAR:
        return min(base_delay * attempt, max_delay)
    return min(base_delay * 2 ** (attempt - 1), max_delay)
