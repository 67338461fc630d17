"""Reminder derivation and batched rescheduling."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta

from .item import Item
from .task import MaintenanceTask

logger = logging.getLogger(__name__)

WARRANTY_REMINDER_DAYS = 30


@dataclass(frozen=True)
class Reminder:
    """
    A notification to fire ahead of a task's due date.

    Warranty reminders belong to an item only and have no task_id.
    """

    task_id: Optional[str]
    item_id: str
    fire_date: datetime
    title: str
    body: str


class ReminderScheduler:
    """Interface of the notification-scheduling collaborator."""

    def schedule_reminder(
        self,
        task_id: Optional[str],
        item_id: str,
        fire_date: datetime,
        title: str,
        body: str,
    ) -> None:
        raise NotImplementedError

    def cancel_reminders_for_task(self, task_id: str) -> None:
        raise NotImplementedError

    def cancel_reminders_for_item(self, item_id: str) -> None:
        """Cancel task and warranty reminders that belong to an item."""
        raise NotImplementedError

    def cancel_all(self) -> None:
        raise NotImplementedError


def compute_reminder_fire_date(next_due: datetime, reminder_days_before: int) -> datetime:
    """Fire date: next_due minus the lead time in days."""
    return next_due - relativedelta(days=reminder_days_before)


def is_reminder_elapsed(fire_date: datetime, now: datetime) -> bool:
    """A reminder whose fire date is not in the future is suppressed."""
    return fire_date <= now


def format_reminder(task: MaintenanceTask, item: Item) -> tuple:
    """Title and body shown in the notification."""
    days = task.reminder_days_before
    if days == 0:
        when = "today"
    elif days == 1:
        when = "in 1 day"
    else:
        when = f"in {days} days"
    title = f"{task.name} Due Soon"
    body = f"{item.name}: {task.name} is due {when}"
    return title, body


def derive_reminder(
    task: MaintenanceTask, item: Item, now: datetime
) -> Optional[Reminder]:
    """Build the reminder for a task, or None when it should not be scheduled."""
    if not task.is_active:
        return None
    fire_date = compute_reminder_fire_date(task.next_due, task.reminder_days_before)
    if is_reminder_elapsed(fire_date, now):
        return None
    title, body = format_reminder(task, item)
    return Reminder(task.id, item.id, fire_date, title, body)


def derive_warranty_reminder(
    item: Item, now: datetime, days_before: int = WARRANTY_REMINDER_DAYS
) -> Optional[Reminder]:
    """Reminder ahead of an item's warranty expiry, or None when there is none."""
    if item.warranty_expiry is None:
        return None
    fire_date = compute_reminder_fire_date(item.warranty_expiry, days_before)
    if is_reminder_elapsed(fire_date, now):
        return None
    expiry = item.warranty_expiry
    body = f"{item.name} - Warranty expires on {expiry:%b} {expiry.day}, {expiry.year}"
    return Reminder(None, item.id, fire_date, "Warranty Expiring Soon", body)


def reschedule_all(
    tasks: List[MaintenanceTask],
    items: List[Item],
    scheduler: ReminderScheduler,
    now: datetime,
    enabled: bool = True,
) -> List[Reminder]:
    """
    Replace every scheduled reminder with a fresh set.

    All previous reminders are cancelled first, so repeated calls never
    accumulate duplicates. Tasks whose item no longer exists are skipped.
    Items with a warranty expiry also get a warranty reminder.
    """
    scheduler.cancel_all()
    if not enabled:
        logger.debug("Notifications disabled, cleared all reminders")
        return []

    items_by_id: Dict[str, Item] = {item.id: item for item in items}
    candidates = []
    for task in tasks:
        item = items_by_id.get(task.item_id)
        if item is not None:
            candidates.append(derive_reminder(task, item, now))
    candidates.extend(derive_warranty_reminder(item, now) for item in items)

    scheduled = []
    for reminder in candidates:
        if reminder is None:
            continue
        scheduler.schedule_reminder(
            reminder.task_id,
            reminder.item_id,
            reminder.fire_date,
            reminder.title,
            reminder.body,
        )
        scheduled.append(reminder)

    logger.info(
        "Scheduled %d reminders for %d tasks and %d items",
        len(scheduled),
        len(tasks),
        len(items),
    )
    return scheduled
