"""File-backed notification scheduler."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import yaml

from .loader import format_timestamp, parse_timestamp
from .reminders import Reminder, ReminderScheduler

logger = logging.getLogger(__name__)


class ReminderOutbox(ReminderScheduler):
    """
    Scheduled reminders kept in a YAML file.

    A notifier process polls due() and delivers whatever has reached its
    fire date.
    """

    def __init__(self, filename: Union[str, Path]):
        self.path = Path(filename)

    def load(self) -> List[Reminder]:
        if not self.path.exists():
            return []
        with open(self.path, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
        return [
            Reminder(
                task_id=d.get("taskId"),
                item_id=d["itemId"],
                fire_date=parse_timestamp(d["fireDate"]),
                title=d["title"],
                body=d["body"],
            )
            for d in data.get("reminders") or []
        ]

    def _save(self, reminders: List[Reminder]) -> None:
        data = {
            "reminders": [
                {
                    "taskId": r.task_id,
                    "itemId": r.item_id,
                    "fireDate": format_timestamp(r.fire_date),
                    "title": r.title,
                    "body": r.body,
                }
                for r in reminders
            ]
        }
        with open(self.path, "w") as fp:
            yaml.dump(
                data,
                fp,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=120,
            )

    def schedule_reminder(
        self,
        task_id: Optional[str],
        item_id: str,
        fire_date: datetime,
        title: str,
        body: str,
    ) -> None:
        reminders = self.load()
        reminders.append(Reminder(task_id, item_id, fire_date, title, body))
        self._save(reminders)
        logger.debug("Scheduled reminder for item %s at %s", item_id, fire_date)

    def cancel_reminders_for_task(self, task_id: str) -> None:
        self._save([r for r in self.load() if r.task_id != task_id])

    def cancel_reminders_for_item(self, item_id: str) -> None:
        self._save([r for r in self.load() if r.item_id != item_id])

    def cancel_all(self) -> None:
        self._save([])

    def due(self, now: datetime) -> List[Reminder]:
        """Reminders whose fire date has been reached, oldest first."""
        return sorted(
            (r for r in self.load() if r.fire_date <= now),
            key=lambda r: r.fire_date,
        )
