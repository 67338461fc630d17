"""MaintenanceLog class for completed maintenance records."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class MaintenanceLog:
    """
    A record of one completed occurrence of a task.

    Logs are never changed after creation and outlive the task and item
    they refer to, so the names at completion time are kept alongside the ids.
    """

    id: str
    task_id: str
    item_id: str
    completed_at: datetime
    cost: Optional[float] = None
    provider: Optional[str] = None
    notes: Optional[str] = None
    task_name: Optional[str] = None
    item_name: Optional[str] = None
