"""Task lifecycle controller: creating, completing, deferring and deleting."""

import logging
import threading
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

from .calculations import add_days, check_interval, compute_next_due
from .category import Category
from .errors import NotFound
from .item import Item
from .loader import YamlStore
from .log_entry import MaintenanceLog
from .priority import Priority
from .reminders import Reminder, ReminderScheduler, reschedule_all
from .settings import Settings
from .task import MaintenanceTask
from .templates import expand_templates, new_id

logger = logging.getLogger(__name__)

_TASK_FIELDS = {f.name for f in fields(MaintenanceTask)} - {"id"}
_ITEM_FIELDS = {f.name for f in fields(Item)} - {"id", "created_at", "updated_at"}
_SETTINGS_FIELDS = {f.name for f in fields(Settings)}


def _check_fields(changes: dict, allowed: set, kind: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Cannot change {kind} field(s): {', '.join(sorted(unknown))}")


class TaskLifecycle:
    """
    Orchestrates every mutation against the store.

    Each operation reads the collections it needs, changes them and writes
    them back before returning. Operations are serialized by a lock, since a
    whole-collection write would otherwise overwrite a concurrent change.
    When a reminder scheduler is given, reminders are recomputed after
    every mutation.
    """

    def __init__(
        self,
        store: YamlStore,
        scheduler: Optional[ReminderScheduler] = None,
        make_id: Callable[[], str] = new_id,
    ):
        self.store = store
        self.scheduler = scheduler
        self.make_id = make_id
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Lookup helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _find_task(tasks: List[MaintenanceTask], task_id: str) -> int:
        for index, task in enumerate(tasks):
            if task.id == task_id:
                return index
        raise NotFound("Task", task_id)

    @staticmethod
    def _find_item(items: List[Item], item_id: str) -> int:
        for index, item in enumerate(items):
            if item.id == item_id:
                return index
        raise NotFound("Item", item_id)

    def _after_change(self, now: datetime) -> None:
        if self.scheduler is not None:
            self.reschedule_reminders(now)

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def add_item(self, name: str, category, now: datetime, **details: Any) -> Item:
        """Register a new item."""
        _check_fields(details, _ITEM_FIELDS, "item")
        with self._lock:
            item = Item(
                id=self.make_id(),
                name=name,
                category=Category.parse(category),
                created_at=now,
                updated_at=now,
                **details,
            )
            items = self.store.load_items()
            items.append(item)
            self.store.save_items(items)
            logger.info("Added item %s (%s)", item.name, item.id)
            self._after_change(now)
            return item

    def update_item(self, item_id: str, now: datetime, **changes: Any) -> Item:
        """Change item fields; the id and creation time are fixed."""
        _check_fields(changes, _ITEM_FIELDS, "item")
        with self._lock:
            items = self.store.load_items()
            index = self._find_item(items, item_id)
            if "category" in changes:
                changes["category"] = Category.parse(changes["category"])
            items[index] = replace(items[index], updated_at=now, **changes)
            self.store.save_items(items)
            logger.info("Updated item %s", item_id)
            self._after_change(now)
            return items[index]

    def delete_item(self, item_id: str, now: datetime) -> List[MaintenanceTask]:
        """
        Delete an item and all of its tasks.

        Logs are kept for record-keeping. Returns the removed tasks.
        """
        with self._lock:
            items = self.store.load_items()
            index = self._find_item(items, item_id)
            del items[index]

            tasks = self.store.load_tasks()
            removed = [t for t in tasks if t.item_id == item_id]
            kept = [t for t in tasks if t.item_id != item_id]

            self.store.save_items(items)
            self.store.save_tasks(kept)
            if self.scheduler is not None:
                self.scheduler.cancel_reminders_for_item(item_id)
            logger.info("Deleted item %s and %d tasks", item_id, len(removed))
            self._after_change(now)
            return removed

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def create_task(
        self,
        item_id: str,
        name: str,
        interval_days: int,
        now: datetime,
        next_due: Optional[datetime] = None,
        reminder_days_before: Optional[int] = None,
        priority=Priority.MEDIUM,
        **details: Any,
    ) -> MaintenanceTask:
        """
        Add a task to an item.

        Without an explicit next_due the task is due interval_days from now.
        The reminder lead time defaults to the settings value.
        """
        check_interval(interval_days)
        _check_fields(details, _TASK_FIELDS, "task")
        with self._lock:
            items = self.store.load_items()
            self._find_item(items, item_id)
            if reminder_days_before is None:
                reminder_days_before = self.store.load_settings().default_reminder_days

            task = MaintenanceTask(
                id=self.make_id(),
                item_id=item_id,
                name=name,
                interval_days=interval_days,
                next_due=next_due or add_days(now, interval_days),
                reminder_days_before=reminder_days_before,
                priority=priority,
                **details,
            )
            tasks = self.store.load_tasks()
            tasks.append(task)
            self.store.save_tasks(tasks)
            logger.info("Created task %s for item %s", task.name, item_id)
            self._after_change(now)
            return task

    def add_tasks_from_templates(
        self,
        item_id: str,
        now: datetime,
        category=None,
        reminder_days_before: Optional[int] = None,
        templates=None,
    ) -> List[MaintenanceTask]:
        """Quick-add the starter tasks for an item's category."""
        with self._lock:
            items = self.store.load_items()
            item = items[self._find_item(items, item_id)]
            if reminder_days_before is None:
                reminder_days_before = self.store.load_settings().default_reminder_days

            new_tasks = expand_templates(
                category or item.category,
                templates,
                reminder_days_before,
                now,
                item_id=item.id,
                make_id=self.make_id,
            )
            if new_tasks:
                tasks = self.store.load_tasks()
                tasks.extend(new_tasks)
                self.store.save_tasks(tasks)
            logger.info("Added %d template tasks to item %s", len(new_tasks), item_id)
            self._after_change(now)
            return new_tasks

    def complete_task(
        self,
        task_id: str,
        completed_at: datetime,
        cost: Optional[float] = None,
        provider: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[MaintenanceTask, MaintenanceLog]:
        """
        Mark a task done: append one log and move the task to its next due date.

        One-time tasks keep their current due date. now defaults to the
        completion time and is only used for recomputing reminders.
        """
        with self._lock:
            tasks = self.store.load_tasks()
            index = self._find_task(tasks, task_id)
            task = tasks[index]
            item_name = None
            for item in self.store.load_items():
                if item.id == task.item_id:
                    item_name = item.name
                    break

            log = MaintenanceLog(
                id=self.make_id(),
                task_id=task.id,
                item_id=task.item_id,
                completed_at=completed_at,
                cost=cost,
                provider=provider,
                notes=notes,
                task_name=task.name,
                item_name=item_name,
            )
            logs = self.store.load_logs()
            logs.append(log)
            self.store.save_logs(logs)

            tasks[index] = replace(
                task,
                last_completed=completed_at,
                next_due=compute_next_due(
                    task.interval_days, completed_at, task.next_due
                ),
            )
            self.store.save_tasks(tasks)
            logger.info(
                "Completed task %s, next due %s", task.name, tasks[index].next_due
            )
            self._after_change(now or completed_at)
            return tasks[index], log

    def defer_task(self, task_id: str, days: int, now: datetime) -> MaintenanceTask:
        """Push a task's due date to now + days without logging a completion."""
        check_interval(days)
        with self._lock:
            tasks = self.store.load_tasks()
            index = self._find_task(tasks, task_id)
            tasks[index] = replace(tasks[index], next_due=add_days(now, days))
            self.store.save_tasks(tasks)
            logger.info("Deferred task %s by %d days", task_id, days)
            self._after_change(now)
            return tasks[index]

    def edit_task(self, task_id: str, now: datetime, **changes: Any) -> MaintenanceTask:
        """
        Change task fields. The id cannot change; next_due is left alone
        unless given.
        """
        _check_fields(changes, _TASK_FIELDS, "task")
        with self._lock:
            tasks = self.store.load_tasks()
            index = self._find_task(tasks, task_id)
            if "item_id" in changes:
                self._find_item(self.store.load_items(), changes["item_id"])
            tasks[index] = replace(tasks[index], **changes)
            self.store.save_tasks(tasks)
            logger.info("Edited task %s: %s", task_id, ", ".join(sorted(changes)))
            self._after_change(now)
            return tasks[index]

    def delete_task(self, task_id: str, now: datetime) -> MaintenanceTask:
        """Remove a task. Its logs are kept."""
        with self._lock:
            tasks = self.store.load_tasks()
            index = self._find_task(tasks, task_id)
            task = tasks.pop(index)
            self.store.save_tasks(tasks)
            if self.scheduler is not None:
                self.scheduler.cancel_reminders_for_task(task_id)
            logger.info("Deleted task %s", task_id)
            self._after_change(now)
            return task

    # -------------------------------------------------------------------------
    # Settings and reminders
    # -------------------------------------------------------------------------

    def update_settings(self, now: datetime, **changes: Any) -> Settings:
        """Change preferences; saved immediately."""
        _check_fields(changes, _SETTINGS_FIELDS, "settings")
        with self._lock:
            settings = replace(self.store.load_settings(), **changes)
            self.store.save_settings(settings)
            logger.info("Updated settings: %s", ", ".join(sorted(changes)))
            self._after_change(now)
            return settings

    def clear_all(self, now: datetime) -> None:
        """Remove every item, task, log and setting."""
        with self._lock:
            self.store.clear()
            logger.info("Cleared all data")
            self._after_change(now)

    def reschedule_reminders(self, now: datetime) -> List[Reminder]:
        """Recompute every reminder from the stored tasks."""
        if self.scheduler is None:
            return []
        with self._lock:
            return reschedule_all(
                self.store.load_tasks(),
                self.store.load_items(),
                self.scheduler,
                now,
                enabled=self.store.load_settings().notifications_enabled,
            )
