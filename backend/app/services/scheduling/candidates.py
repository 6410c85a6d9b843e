# backend/app/services/scheduling/candidates.py
"""
Candidate generation.

Shared free windows of both parties are discretized into fixed-step
start times of the requested duration. The result is capped before
anything is checked against the lesson store.
"""

import logging
from datetime import datetime, timedelta

from .config import SchedulingConfig, get_scheduling_config
from .dates import at_hour, day_of_week
from .intervals import Interval, intersect
from .stores import GlobalHours

logger = logging.getLogger(__name__)


def enumerate_starts(
    windows: list[Interval],
    duration_minutes: int,
    step_minutes: int | None,
    not_before: datetime | None = None,
    config: SchedulingConfig | None = None,
) -> list[datetime]:
    """
    Start times at step increments inside each window.

    Enumeration begins at max(window.start, not_before) and stops once
    start + duration would pass the window end.
    """
    config = config or get_scheduling_config()
    step = timedelta(minutes=config.effective_step(step_minutes))
    duration = timedelta(minutes=duration_minutes)

    starts: list[datetime] = []
    for w in windows:
        t = max(w.start, not_before) if not_before else w.start
        while t + duration <= w.end:
            starts.append(t)
            t += step
    return starts


def is_within_global_hours(hours: GlobalHours | None, start: datetime, end: datetime) -> bool:
    """Candidate lies on an open day, inside opening hours of its start day."""
    if hours is None:
        return True
    if day_of_week(start) not in hours.days_open:
        return False
    return start >= at_hour(start, hours.open_hour) and end <= at_hour(start, hours.close_hour)


def generate_candidates(
    teacher_free: list[Interval],
    student_free: list[Interval],
    duration_minutes: int,
    step_minutes: int | None,
    not_before: datetime | None,
    hours: GlobalHours | None,
    max_suggestions: int,
    config: SchedulingConfig | None = None,
) -> list[Interval]:
    """
    Candidate lessons both parties could take, earliest first.

    At most config.max_check(max_suggestions) candidates are returned;
    later valid slots past the cap are not reached in this call.
    """
    config = config or get_scheduling_config()
    shared = intersect(teacher_free, student_free)

    duration = timedelta(minutes=duration_minutes)
    candidates = [
        Interval(start, start + duration)
        for start in enumerate_starts(shared, duration_minutes, step_minutes, not_before, config)
    ]
    candidates = [c for c in candidates if is_within_global_hours(hours, c.start, c.end)]

    limit = config.max_check(max_suggestions)
    if len(candidates) > limit:
        logger.debug(f"candidate cap reached: {len(candidates)} → {limit}")
    return candidates[:limit]
