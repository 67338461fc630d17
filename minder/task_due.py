"""TaskDue dataclass for calculated task status."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from .status import Status

if TYPE_CHECKING:
    from .item import Item
    from .task import MaintenanceTask


@dataclass
class TaskDue:
    """Calculated due information for a task."""

    task: "MaintenanceTask"
    status: Status
    days_until_due: int
    item: Optional["Item"] = None
    reminder_date: Optional[datetime] = None

    @property
    def is_due(self) -> bool:
        return self.status in (Status.OVERDUE, Status.DUE_SOON)
