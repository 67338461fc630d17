"""JSON export and import of all maintenance data, and local snapshots."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import yaml
from jsonschema import validate, ValidationError

from .errors import InvalidImportFormat, NotFound
from .loader import (
    YamlStore,
    format_timestamp,
    item_from_dict,
    item_to_dict,
    log_from_dict,
    log_to_dict,
    parse_timestamp,
    settings_from_dict,
    settings_to_dict,
    task_from_dict,
    task_to_dict,
)

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0.0"
BACKUP_LIMIT = 10

IMPORT_SCHEMA = {
    "type": "object",
    "required": ["items", "tasks", "logs"],
    "properties": {
        "items": {"type": "array", "items": {"type": "object"}},
        "tasks": {"type": "array", "items": {"type": "object"}},
        "logs": {"type": "array", "items": {"type": "object"}},
        "settings": {"type": "object"},
    },
}


def export_data(store: YamlStore, now: datetime) -> str:
    """Serialize every collection to a JSON document."""
    state = store.load_state()
    data = {
        "version": EXPORT_VERSION,
        "createdAt": format_timestamp(now),
        "items": [item_to_dict(i) for i in state.items],
        "tasks": [task_to_dict(t) for t in state.tasks],
        "logs": [log_to_dict(log) for log in state.logs],
        "settings": settings_to_dict(state.settings),
    }
    return json.dumps(data, indent=2)


def import_data(store: YamlStore, text: str) -> dict:
    """
    Replace all local collections with the contents of an export.

    Settings are only replaced when the payload has them. Returns the
    number of records imported per collection.
    """
    try:
        data = json.loads(text)
        validate(instance=data, schema=IMPORT_SCHEMA)
        items = [item_from_dict(d) for d in data["items"]]
        tasks = [task_from_dict(d) for d in data["tasks"]]
        logs = [log_from_dict(d) for d in data["logs"]]
    except json.JSONDecodeError as e:
        raise InvalidImportFormat(f"Not valid JSON: {e}") from e
    except ValidationError as e:
        raise InvalidImportFormat(f"Invalid backup format: {e.message}") from e
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidImportFormat(f"Invalid record in backup: {e}") from e

    store.save_items(items)
    store.save_tasks(tasks)
    store.save_logs(logs)
    if data.get("settings"):
        store.save_settings(settings_from_dict(data["settings"]))

    counts = {"items": len(items), "tasks": len(tasks), "logs": len(logs)}
    logger.info("Imported %s", counts)
    return counts


# =============================================================================
# Local snapshots
# =============================================================================


@dataclass
class BackupMetadata:
    id: str
    created_at: datetime
    size: int
    item_count: int
    task_count: int
    name: Optional[str] = None


class BackupShelf:
    """
    Named snapshots of the data, kept as export documents in a directory.

    index.yaml lists them newest first. Only the most recent `limit`
    snapshots are kept; older ones are deleted when a new one is made.
    """

    def __init__(self, directory: Union[str, Path], limit: int = BACKUP_LIMIT):
        self.directory = Path(directory)
        self.limit = limit

    @property
    def index_path(self) -> Path:
        return self.directory / "index.yaml"

    def _backup_path(self, backup_id: str) -> Path:
        return self.directory / f"{backup_id}.json"

    def list_backups(self) -> List[BackupMetadata]:
        if not self.index_path.exists():
            return []
        with open(self.index_path, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
        return [
            BackupMetadata(
                id=d["id"],
                created_at=parse_timestamp(d["createdAt"]),
                size=d["size"],
                item_count=d["itemCount"],
                task_count=d["taskCount"],
                name=d.get("name"),
            )
            for d in data.get("backups") or []
        ]

    def _save_index(self, backups: List[BackupMetadata]) -> None:
        data = {
            "backups": [
                {
                    "id": b.id,
                    "name": b.name,
                    "createdAt": format_timestamp(b.created_at),
                    "size": b.size,
                    "itemCount": b.item_count,
                    "taskCount": b.task_count,
                }
                for b in backups
            ]
        }
        with open(self.index_path, "w") as fp:
            yaml.dump(
                data,
                fp,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=120,
            )

    def create(
        self, store: YamlStore, now: datetime, name: Optional[str] = None
    ) -> BackupMetadata:
        """Snapshot every collection. Returns the new snapshot's metadata."""
        self.directory.mkdir(parents=True, exist_ok=True)
        text = export_data(store, now)
        data = json.loads(text)

        stamp = int(now.timestamp() * 1000)
        while self._backup_path(f"backup_{stamp}").exists():
            stamp += 1
        backup_id = f"backup_{stamp}"
        self._backup_path(backup_id).write_text(text)

        metadata = BackupMetadata(
            id=backup_id,
            created_at=now,
            size=len(text.encode("utf-8")),
            item_count=len(data["items"]),
            task_count=len(data["tasks"]),
            name=name,
        )
        backups = [metadata] + self.list_backups()
        for old in backups[self.limit :]:
            self._backup_path(old.id).unlink(missing_ok=True)
        self._save_index(backups[: self.limit])
        logger.info("Created backup %s in %s", backup_id, self.directory)
        return metadata

    def get(self, backup_id: str) -> str:
        """The export document of a snapshot."""
        path = self._backup_path(backup_id)
        known = {b.id for b in self.list_backups()}
        if backup_id not in known or not path.exists():
            raise NotFound("Backup", backup_id)
        return path.read_text()

    def restore(self, store: YamlStore, backup_id: str) -> dict:
        """Replace all collections with a snapshot's contents."""
        counts = import_data(store, self.get(backup_id))
        logger.info("Restored backup %s", backup_id)
        return counts

    def delete(self, backup_id: str) -> None:
        backups = self.list_backups()
        kept = [b for b in backups if b.id != backup_id]
        if len(kept) == len(backups):
            raise NotFound("Backup", backup_id)
        self._backup_path(backup_id).unlink(missing_ok=True)
        self._save_index(kept)
        logger.info("Deleted backup %s", backup_id)
