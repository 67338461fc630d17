"""
Maintenance scheduling for vehicles, homes and appliances.

This package provides the models and scheduling engine:
- Category, Priority, Status: closed enums shared by every component
- Item, MaintenanceTask, MaintenanceLog, Settings: stored records
- TaskDue: calculated task status
- AppState: aggregate of all records
- calculations: due-date status and recurrence
- reminders: reminder fire dates and batched rescheduling
- templates: starter tasks per category
- TaskLifecycle: completing, deferring, editing and deleting tasks
- BackupShelf: named local snapshots of all data
"""

from .errors import MinderError, InvalidInterval, NotFound, InvalidImportFormat
from .status import Status
from .category import Category
from .priority import Priority
from .item import Item
from .task import MaintenanceTask
from .log_entry import MaintenanceLog
from .settings import Settings
from .task_due import TaskDue
from .state import AppState
from .calculations import (
    add_days,
    check_interval,
    check_status,
    compute_next_due,
    days_until_due,
    is_due_soon,
    is_overdue,
    utc_now,
)
from .reminders import (
    Reminder,
    ReminderScheduler,
    compute_reminder_fire_date,
    derive_reminder,
    derive_warranty_reminder,
    is_reminder_elapsed,
    reschedule_all,
)
from .templates import TaskTemplate, expand_templates, get_templates
from .loader import YamlStore, load_state
from .outbox import ReminderOutbox
from .lifecycle import TaskLifecycle
from .backup import BackupMetadata, BackupShelf, export_data, import_data

__all__ = [
    "MinderError",
    "InvalidInterval",
    "NotFound",
    "InvalidImportFormat",
    "Status",
    "Category",
    "Priority",
    "Item",
    "MaintenanceTask",
    "MaintenanceLog",
    "Settings",
    "TaskDue",
    "AppState",
    "add_days",
    "check_interval",
    "check_status",
    "compute_next_due",
    "days_until_due",
    "is_due_soon",
    "is_overdue",
    "utc_now",
    "Reminder",
    "ReminderScheduler",
    "compute_reminder_fire_date",
    "derive_reminder",
    "derive_warranty_reminder",
    "is_reminder_elapsed",
    "reschedule_all",
    "TaskTemplate",
    "expand_templates",
    "get_templates",
    "YamlStore",
    "load_state",
    "ReminderOutbox",
    "TaskLifecycle",
    "BackupMetadata",
    "BackupShelf",
    "export_data",
    "import_data",
]
