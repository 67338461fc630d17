"""Helper functions for task due calculations."""

from datetime import datetime, timezone
from dateutil.relativedelta import relativedelta

from .errors import InvalidInterval
from .status import Status

DUE_SOON_DAYS = 7


def utc_now() -> datetime:
    """Current time. Only the CLI and web handlers should call this."""
    return datetime.now(timezone.utc)


def add_days(when: datetime, days: int) -> datetime:
    """Calendar-day addition (Jan 20 + 30 days = Feb 19)."""
    return when + relativedelta(days=days)


def days_until(when: datetime, now: datetime) -> int:
    """Signed calendar-day difference in UTC, 0 on the same day."""
    when_day = when.astimezone(timezone.utc).date()
    return (when_day - now.astimezone(timezone.utc).date()).days


def is_overdue(due: datetime, now: datetime) -> bool:
    """True iff the due date is strictly before now."""
    return due < now


def is_due_soon(due: datetime, now: datetime, window_days: int = DUE_SOON_DAYS) -> bool:
    """
    True iff the due date is after now and before now + window.

    Never true for an overdue task.
    """
    return now < due < add_days(now, window_days)


def days_until_due(due: datetime, now: datetime) -> int:
    """Days left before a task is due; negative when overdue."""
    return days_until(due, now)


def check_status(due: datetime, now: datetime, window_days: int = DUE_SOON_DAYS) -> Status:
    if is_overdue(due, now):
        return Status.OVERDUE
    if is_due_soon(due, now, window_days):
        return Status.DUE_SOON
    return Status.UPCOMING


def check_interval(days) -> int:
    """Reject intervals that are not whole, non-negative day counts."""
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        raise InvalidInterval(days)
    return days


def compute_next_due(
    interval_days: int, completed_at: datetime, previous_next_due: datetime
) -> datetime:
    """
    Calculate next due date after a completion.

    - Recurring: completed_at + interval_days
    - One-time (interval 0): previous due date is kept
    """
    check_interval(interval_days)
    if interval_days == 0:
        return previous_next_due
    return add_days(completed_at, interval_days)
