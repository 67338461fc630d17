"""AppState class - the aggregate of all items, tasks, logs and settings."""

from datetime import datetime
from typing import List, Optional

from .calculations import DUE_SOON_DAYS, check_status, days_until_due
from .item import Item
from .log_entry import MaintenanceLog
from .reminders import compute_reminder_fire_date
from .settings import Settings
from .status import Status
from .task import MaintenanceTask
from .task_due import TaskDue


class AppState:
    """Complete application data, passed explicitly to every calculation."""

    def __init__(
        self,
        items: Optional[List[Item]] = None,
        tasks: Optional[List[MaintenanceTask]] = None,
        logs: Optional[List[MaintenanceLog]] = None,
        settings: Optional[Settings] = None,
    ):
        self.items = items or []
        self.tasks = tasks or []
        self.logs = logs or []
        self.settings = settings or Settings()

    def get_item(self, item_id: str) -> Optional[Item]:
        """Find an item by its id."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def get_task(self, task_id: str) -> Optional[MaintenanceTask]:
        """Find a task by its id."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_tasks_for_item(self, item_id: str) -> List[MaintenanceTask]:
        return [t for t in self.tasks if t.item_id == item_id]

    def get_logs_for_item(self, item_id: str) -> List[MaintenanceLog]:
        """Logs for an item, including those of deleted items and tasks."""
        return [log for log in self.logs if log.item_id == item_id]

    def get_logs_for_task(self, task_id: str) -> List[MaintenanceLog]:
        return [log for log in self.logs if log.task_id == task_id]

    def get_logs_sorted(self, reverse: bool = True) -> List[MaintenanceLog]:
        """Logs by completion time, newest first by default."""
        return sorted(self.logs, key=lambda log: log.completed_at, reverse=reverse)

    @property
    def last_log(self) -> Optional[MaintenanceLog]:
        """The most recent completion overall."""
        if not self.logs:
            return None
        return max(self.logs, key=lambda log: log.completed_at)

    def find_items(self, query: str) -> List[Item]:
        """Case-insensitive search over item names, brands and models."""
        needle = query.lower()
        return [
            item
            for item in self.items
            if any(
                needle in (field or "").lower()
                for field in (item.name, item.brand, item.model, item.subtype)
            )
        ]

    def find_tasks(self, query: str) -> List[MaintenanceTask]:
        needle = query.lower()
        return [
            task
            for task in self.tasks
            if needle in task.name.lower() or needle in (task.description or "").lower()
        ]

    def calculate_task_due(
        self, task: MaintenanceTask, now: datetime, window_days: int = DUE_SOON_DAYS
    ) -> TaskDue:
        """
        Calculate the status of a single task.

        Inactive tasks are reported as INACTIVE regardless of their due date.
        """
        status = Status.INACTIVE
        if task.is_active:
            status = check_status(task.next_due, now, window_days)
        return TaskDue(
            task=task,
            status=status,
            days_until_due=days_until_due(task.next_due, now),
            item=self.get_item(task.item_id),
            reminder_date=compute_reminder_fire_date(
                task.next_due, task.reminder_days_before
            ),
        )

    def get_all_task_status(
        self, now: datetime, window_days: int = DUE_SOON_DAYS
    ) -> List[TaskDue]:
        """
        Status for every task, most urgent first.

        Ties on status and due date are broken by priority, highest first.
        """
        statuses = [self.calculate_task_due(t, now, window_days) for t in self.tasks]
        statuses.sort(
            key=lambda s: (s.status.value, s.task.next_due, -s.task.priority.rank)
        )
        return statuses

    def get_upcoming(
        self, now: datetime, window_days: int = DUE_SOON_DAYS
    ) -> List[TaskDue]:
        """Overdue and due-soon tasks only."""
        return [s for s in self.get_all_task_status(now, window_days) if s.is_due]
