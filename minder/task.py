"""MaintenanceTask class for recurring or one-time work on an item."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .calculations import check_interval
from .priority import Priority


@dataclass
class MaintenanceTask:
    """
    A unit of maintenance tied to exactly one item.

    An interval of 0 days marks a one-time task that is never rescheduled
    on completion.
    """

    id: str
    item_id: str
    name: str
    interval_days: int
    next_due: datetime
    reminder_days_before: int = 3
    priority: Priority = Priority.MEDIUM
    description: Optional[str] = None
    last_completed: Optional[datetime] = None
    estimated_cost: Optional[float] = None
    notes: Optional[str] = None
    is_active: bool = True

    def __post_init__(self):
        self.priority = Priority.parse(self.priority)
        check_interval(self.interval_days)
        if isinstance(self.reminder_days_before, bool) or not isinstance(
            self.reminder_days_before, int
        ):
            raise ValueError(
                f"reminder_days_before must be a whole number, got {self.reminder_days_before!r}"
            )

    @property
    def is_recurring(self) -> bool:
        return self.interval_days > 0
