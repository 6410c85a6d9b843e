# backend/app/services/scheduling/errors.py
"""
Scheduling errors.

InvalidSlotRequest is a caller error and is raised before any store is read.
SchedulingStoreError means an upstream read failed; the search fails with it.
An empty suggestion list is not an error.
"""


class SchedulingError(Exception):
    """Base class for scheduling failures."""


class InvalidSlotRequest(SchedulingError, ValueError):
    """Missing party, non-positive duration or unknown algorithm."""


class SchedulingStoreError(SchedulingError):
    """A store backing the scheduler could not be read."""
