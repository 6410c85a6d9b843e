from datetime import timedelta

from app.services.scheduling.dates import day_of_week
from app.services.scheduling.recurrence import MAX_OCCURRENCES, expand_weekly

from conftest import MONDAY, at

WEDNESDAY = MONDAY + timedelta(days=2)


def test_defaults_to_weekday_of_first_occurrence() -> None:
    starts = expand_weekly(at(MONDAY, 10), count=3)

    assert starts == [at(MONDAY + timedelta(weeks=w), 10) for w in range(3)]


def test_every_other_week_on_two_days() -> None:
    starts = expand_weekly(at(MONDAY, 17, 30), count=4, interval=2, by_day=[1, 4])

    thursday = MONDAY + timedelta(days=3)
    assert starts == [
        at(MONDAY, 17, 30),
        at(thursday, 17, 30),
        at(MONDAY + timedelta(weeks=2), 17, 30),
        at(thursday + timedelta(weeks=2), 17, 30),
    ]


def test_earlier_weekday_rolls_into_next_week() -> None:
    starts = expand_weekly(at(WEDNESDAY, 9), count=3, by_day=[1, 3])

    assert starts[0] == at(WEDNESDAY, 9)
    assert starts[1] == at(MONDAY + timedelta(weeks=1), 9)
    assert all(s >= at(WEDNESDAY, 9) for s in starts)
    assert [day_of_week(s) for s in starts] == [3, 1, 3]


def test_count_is_clamped() -> None:
    assert len(expand_weekly(at(MONDAY, 10), count=500)) == MAX_OCCURRENCES
    assert len(expand_weekly(at(MONDAY, 10), count=0)) == 1
