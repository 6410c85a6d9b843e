# backend/app/services/scheduling/config.py
"""
Scheduling configuration for slot suggestion.
"""

from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class SchedulingConfig:
    """
    Configuration for the lesson scheduling engine.

    Attributes:
        default_days: Search horizon of a greedy pass, in calendar days
        default_step_minutes: Grid step for candidate start times
        default_buffer_minutes: Gap kept around existing lessons
        default_max_suggestions: How many suggestions are returned
        default_chunk_days: Size of one rollforward chunk
        default_max_chunks: How many chunks rollforward scans at most
        min_step_minutes: Smallest allowed grid step
        max_check_floor: Lower bound of the pre-verification candidate cap
        max_check_factor: Cap grows by this factor per requested suggestion
        chunk_pool_floor: Minimum suggestions gathered per rollforward chunk
        verify_concurrency: Parallel conflict checks against the lesson store
    """
    default_days: int = 7
    default_step_minutes: int = 15
    default_buffer_minutes: int = 0
    default_max_suggestions: int = 5
    default_chunk_days: int = 7
    default_max_chunks: int = 4
    min_step_minutes: int = 5
    max_check_floor: int = 200
    max_check_factor: int = 20
    chunk_pool_floor: int = 50
    verify_concurrency: int = 10

    def __post_init__(self):
        """Validate configuration."""
        if self.min_step_minutes < 1:
            raise ValueError(f"min_step_minutes must be positive, got {self.min_step_minutes}")
        if self.max_check_floor < 1 or self.max_check_factor < 1:
            raise ValueError("max_check_floor and max_check_factor must be positive")
        if self.verify_concurrency < 1:
            raise ValueError(f"verify_concurrency must be positive, got {self.verify_concurrency}")

    def effective_step(self, step_minutes: int | None) -> int:
        """Step in minutes, falling back to the default and never below the minimum."""
        return max(self.min_step_minutes, step_minutes or self.default_step_minutes)

    def max_check(self, max_suggestions: int) -> int:
        """
        How many candidates are verified against the lesson store at most.

        - 5 suggestions → 200
        - 20 suggestions → 400
        """
        return max(self.max_check_floor, max_suggestions * self.max_check_factor)


@lru_cache
def get_scheduling_config() -> SchedulingConfig:
    """
    Get scheduling configuration (singleton).
    """
    return SchedulingConfig()


def time_str_to_minutes(value: str | None) -> int:
    """Convert "HH:MM" to minutes since midnight. Missing parts count as zero."""
    parts = str(value or "00:00").split(":")
    try:
        hour = int(parts[0])
    except ValueError:
        hour = 0
    try:
        minute = int(parts[1]) if len(parts) > 1 else 0
    except ValueError:
        minute = 0
    return hour * 60 + minute
