# backend/app/services/scheduling/__init__.py
"""
Lesson scheduling module.

Resolvers: availability windows and busy time per party
Search: greedy (single horizon) and backtracking (rollforward chunks)
"""

from .config import SchedulingConfig, get_scheduling_config
from .engine import ALGORITHMS, BACKTRACKING, GREEDY, SlotRequest, SlotScheduler
from .errors import InvalidSlotRequest, SchedulingError, SchedulingStoreError
from .intervals import Interval, intersect, merge, subtract
from .recurrence import MAX_OCCURRENCES, expand_weekly
from .sql_store import (
    SqlAuditSink,
    SqlAvailabilityStore,
    SqlBookingStore,
    SqlGlobalSettingsStore,
    SqlHolidayStore,
    find_lesson_conflict,
)
from .stores import GlobalHours, Role, Suggestion


def build_scheduler(session_factory=None, with_audit: bool = True) -> SlotScheduler:
    """Scheduler wired to the SQL stores."""
    kwargs = {"session_factory": session_factory} if session_factory else {}
    return SlotScheduler(
        availability=SqlAvailabilityStore(**kwargs),
        holidays=SqlHolidayStore(**kwargs),
        settings=SqlGlobalSettingsStore(**kwargs),
        bookings=SqlBookingStore(**kwargs),
        audit=SqlAuditSink(**kwargs) if with_audit else None,
    )


__all__ = [
    "SchedulingConfig",
    "get_scheduling_config",
    "ALGORITHMS",
    "BACKTRACKING",
    "GREEDY",
    "SlotRequest",
    "SlotScheduler",
    "InvalidSlotRequest",
    "SchedulingError",
    "SchedulingStoreError",
    "Interval",
    "intersect",
    "merge",
    "subtract",
    "MAX_OCCURRENCES",
    "expand_weekly",
    "SqlAuditSink",
    "SqlAvailabilityStore",
    "SqlBookingStore",
    "SqlGlobalSettingsStore",
    "SqlHolidayStore",
    "find_lesson_conflict",
    "GlobalHours",
    "Role",
    "Suggestion",
    "build_scheduler",
]
