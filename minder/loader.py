"""YAML loading and saving utilities for maintenance data."""

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dateutil.parser import isoparse

from .item import Item
from .log_entry import MaintenanceLog
from .settings import Settings
from .state import AppState
from .task import MaintenanceTask

logger = logging.getLogger(__name__)


# =============================================================================
# Field conversion
# =============================================================================


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive values and bare dates are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    else:
        result = isoparse(str(value))
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values for cleaner files."""
    return {k: v for k, v in d.items() if v is not None}


def item_from_dict(dct: Dict[str, Any]) -> Item:
    created = parse_timestamp(dct.get("createdAt"))
    return Item(
        id=dct["id"],
        name=dct["name"],
        category=dct.get("category") or dct.get("type"),
        created_at=created,
        updated_at=parse_timestamp(dct.get("updatedAt")) or created,
        subtype=dct.get("subtype"),
        brand=dct.get("brand"),
        model=dct.get("model"),
        location=dct.get("location"),
        purchase_date=parse_timestamp(dct.get("purchaseDate")),
        warranty_expiry=parse_timestamp(dct.get("warrantyExpiry")),
        notes=dct.get("notes"),
    )


def item_to_dict(item: Item) -> Dict[str, Any]:
    return _compact(
        {
            "id": item.id,
            "name": item.name,
            "category": item.category.value,
            "subtype": item.subtype,
            "brand": item.brand,
            "model": item.model,
            "location": item.location,
            "purchaseDate": format_timestamp(item.purchase_date),
            "warrantyExpiry": format_timestamp(item.warranty_expiry),
            "notes": item.notes,
            "createdAt": format_timestamp(item.created_at),
            "updatedAt": format_timestamp(item.updated_at),
        }
    )


def task_from_dict(dct: Dict[str, Any]) -> MaintenanceTask:
    return MaintenanceTask(
        id=dct["id"],
        item_id=dct["itemId"],
        name=dct["name"],
        interval_days=int(dct.get("intervalDays") or 0),
        next_due=parse_timestamp(dct["nextDue"]),
        reminder_days_before=int(dct.get("reminderDaysBefore", 3)),
        priority=dct.get("priority", "medium"),
        description=dct.get("description"),
        last_completed=parse_timestamp(dct.get("lastCompleted")),
        estimated_cost=dct.get("estimatedCost"),
        notes=dct.get("notes"),
        is_active=dct.get("isActive", True),
    )


def task_to_dict(task: MaintenanceTask) -> Dict[str, Any]:
    return _compact(
        {
            "id": task.id,
            "itemId": task.item_id,
            "name": task.name,
            "description": task.description,
            "intervalDays": task.interval_days,
            "lastCompleted": format_timestamp(task.last_completed),
            "nextDue": format_timestamp(task.next_due),
            "reminderDaysBefore": task.reminder_days_before,
            "priority": task.priority.value,
            "estimatedCost": task.estimated_cost,
            "notes": task.notes,
            "isActive": task.is_active,
        }
    )


def log_from_dict(dct: Dict[str, Any]) -> MaintenanceLog:
    return MaintenanceLog(
        id=dct["id"],
        task_id=dct["taskId"],
        item_id=dct["itemId"],
        completed_at=parse_timestamp(dct["completedAt"]),
        cost=dct.get("cost"),
        provider=dct.get("provider"),
        notes=dct.get("notes"),
        task_name=dct.get("taskName"),
        item_name=dct.get("itemName"),
    )


def log_to_dict(log: MaintenanceLog) -> Dict[str, Any]:
    return _compact(
        {
            "id": log.id,
            "taskId": log.task_id,
            "itemId": log.item_id,
            "completedAt": format_timestamp(log.completed_at),
            "cost": log.cost,
            "provider": log.provider,
            "notes": log.notes,
            "taskName": log.task_name,
            "itemName": log.item_name,
        }
    )


def settings_from_dict(dct: Optional[Dict[str, Any]]) -> Settings:
    dct = dct or {}
    defaults = Settings()
    return Settings(
        notifications_enabled=dct.get(
            "notificationsEnabled", defaults.notifications_enabled
        ),
        default_reminder_days=int(
            dct.get("defaultReminderDays", defaults.default_reminder_days)
        ),
        dark_mode=dct.get("darkMode", defaults.dark_mode),
    )


def settings_to_dict(settings: Settings) -> Dict[str, Any]:
    return {
        "notificationsEnabled": settings.notifications_enabled,
        "defaultReminderDays": settings.default_reminder_days,
        "darkMode": settings.dark_mode,
    }


# =============================================================================
# Store
# =============================================================================


class YamlStore:
    """
    Persistence for all collections in a single YAML data file.

    Every save replaces one whole collection: the raw file is loaded, the
    key is replaced and the file is written back. A missing file reads as
    empty collections and default settings.
    """

    def __init__(self, filename: Union[str, Path]):
        self.path = Path(filename)

    def _load_raw(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as fp:
            return yaml.load(fp, Loader=yaml.SafeLoader) or {}

    def _save_key(self, key: str, value: Any) -> None:
        data = self._load_raw()
        data[key] = value
        self._write_raw(data)
        logger.debug("Saved %s to %s", key, self.path)

    def _write_raw(self, data: Dict[str, Any]) -> None:
        with open(self.path, "w") as fp:
            yaml.dump(
                data,
                fp,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=120,
            )

    def load_items(self) -> List[Item]:
        return [item_from_dict(d) for d in self._load_raw().get("items") or []]

    def save_items(self, items: List[Item]) -> None:
        self._save_key("items", [item_to_dict(i) for i in items])

    def load_tasks(self) -> List[MaintenanceTask]:
        return [task_from_dict(d) for d in self._load_raw().get("tasks") or []]

    def save_tasks(self, tasks: List[MaintenanceTask]) -> None:
        self._save_key("tasks", [task_to_dict(t) for t in tasks])

    def load_logs(self) -> List[MaintenanceLog]:
        return [log_from_dict(d) for d in self._load_raw().get("logs") or []]

    def save_logs(self, logs: List[MaintenanceLog]) -> None:
        self._save_key("logs", [log_to_dict(log) for log in logs])

    def load_settings(self) -> Settings:
        return settings_from_dict(self._load_raw().get("settings"))

    def save_settings(self, settings: Settings) -> None:
        self._save_key("settings", settings_to_dict(settings))

    def load_state(self) -> AppState:
        """Load every collection into an AppState."""
        data = self._load_raw()
        return AppState(
            items=[item_from_dict(d) for d in data.get("items") or []],
            tasks=[task_from_dict(d) for d in data.get("tasks") or []],
            logs=[log_from_dict(d) for d in data.get("logs") or []],
            settings=settings_from_dict(data.get("settings")),
        )

    def clear(self) -> None:
        """Remove all stored data."""
        if self.path.exists():
            self.path.unlink()
            logger.info("Cleared data file %s", self.path)


def load_state(filename: Union[str, Path]) -> AppState:
    """Load all data from a YAML file."""
    return YamlStore(filename).load_state()
