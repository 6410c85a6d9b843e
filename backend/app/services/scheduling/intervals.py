# backend/app/services/scheduling/intervals.py
"""
Interval algebra over half-open [start, end) time ranges.

Pure functions, no I/O. Every resolver in the scheduler passes
lists of Interval through here.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, order=True)
class Interval:
    """Half-open time range; end is exclusive."""
    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and self.end > other.start


def merge(intervals: list[Interval]) -> list[Interval]:
    """
    Collapse overlapping or touching intervals.

    Returns disjoint intervals sorted by start.
    """
    out: list[Interval] = []
    for it in sorted(intervals, key=lambda i: i.start):
        if out and it.start <= out[-1].end:
            last = out[-1]
            out[-1] = Interval(last.start, max(last.end, it.end))
        else:
            out.append(it)
    return out


def subtract(windows: list[Interval], busy: list[Interval]) -> list[Interval]:
    """
    Remove busy time from every window.

    A window fully covered by busy time contributes nothing.
    """
    if not windows:
        return []
    if not busy:
        return [w for w in windows if w.end > w.start]

    blocked = merge(busy)
    out: list[Interval] = []

    for w in windows:
        cur = w.start
        for b in blocked:
            if b.end <= cur:
                continue
            if b.start >= w.end:
                break
            if b.start > cur:
                out.append(Interval(cur, b.start))
            cur = max(cur, b.end)
            if cur >= w.end:
                break
        if cur < w.end:
            out.append(Interval(cur, w.end))

    return [w for w in out if w.end > w.start]


def intersect(a_list: list[Interval], b_list: list[Interval]) -> list[Interval]:
    """Pairwise overlap of two interval lists, merged."""
    out: list[Interval] = []
    for a in a_list:
        for b in b_list:
            start = max(a.start, b.start)
            end = min(a.end, b.end)
            if end > start:
                out.append(Interval(start, end))
    return merge(out)
