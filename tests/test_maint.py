#!/usr/bin/env python3
"""Tests for maint CLI formatting, table helpers and commands."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from minder import (
    AppState,
    Category,
    Item,
    MaintenanceLog,
    MaintenanceTask,
    Priority,
    ReminderOutbox,
    Status,
    TaskDue,
    YamlStore,
)
from maint import (
    format_cost,
    format_date,
    format_days_left,
    format_interval,
    main,
    make_history_table,
    make_status_table,
    resolve_task,
    truncate,
)

T0 = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class TestFormatCost:
    """Tests for format_cost."""

    def test_formats_number(self):
        assert format_cost(45.0) == "$45.00"
        assert format_cost(1250) == "$1,250.00"
        assert format_cost(0) == "$0.00"

    def test_none_returns_dash(self):
        assert format_cost(None) == "-"


class TestFormatDate:
    """Tests for format_date."""

    def test_formats_date(self):
        assert format_date(T0) == "2024-01-01"

    def test_none_returns_dash(self):
        assert format_date(None) == "-"


class TestFormatInterval:
    """Tests for format_interval."""

    def test_recurring(self):
        assert format_interval(90) == "90d"

    def test_one_time(self):
        assert format_interval(0) == "once"


class TestFormatDaysLeft:
    """Tests for format_days_left."""

    def test_today(self):
        assert format_days_left(0) == "today"

    def test_future_and_overdue(self):
        assert format_days_left(3) == "3d"
        assert format_days_left(-2) == "-2d"


class TestTruncate:
    """Tests for truncate."""

    def test_none_returns_dash(self):
        assert truncate(None) == "-"

    def test_short_text_unchanged(self):
        assert truncate("Synthetic oil") == "Synthetic oil"

    def test_long_text_truncated_with_ellipsis(self):
        result = truncate("a" * 40)
        assert len(result) == 30
        assert result.endswith("...")

    def test_custom_max_len(self):
        assert truncate("abcdefghij", max_len=8) == "abcde..."


class TestMakeStatusTable:
    """Tests for make_status_table."""

    def test_empty_list_returns_empty_rows(self):
        assert make_status_table([]) == []

    def test_single_task_row(self):
        item = Item("car", "Honda Accord", Category.VEHICLE, T0, T0)
        task = MaintenanceTask(
            "oil", "car", "Oil Change", 90, T0 + timedelta(days=90),
            priority=Priority.HIGH, last_completed=T0,
        )
        svc = TaskDue(task=task, status=Status.UPCOMING, days_until_due=12, item=item)
        assert make_status_table([svc]) == [
            ["Oil Change", "Honda Accord", "high", "90d", "2024-01-01", "2024-03-31", "12d"]
        ]

    def test_last_done_dash_when_never_completed(self):
        task = MaintenanceTask("x", "gone", "Recall", 0, T0)
        svc = TaskDue(task=task, status=Status.OVERDUE, days_until_due=0)
        row = make_status_table([svc])[0]
        assert row[1] == "-"
        assert row[3] == "once"
        assert row[4] == "-"
        assert row[6] == "today"


class TestMakeHistoryTable:
    """Tests for make_history_table."""

    def test_converts_entries_to_rows(self):
        state = AppState(
            items=[Item("car", "Honda Accord", Category.VEHICLE, T0, T0)],
            tasks=[MaintenanceTask("oil", "car", "Oil Change", 90, T0)],
        )
        log = MaintenanceLog("l1", "oil", "car", T0, cost=45.0, provider="Jiffy Lube")
        assert make_history_table([log], state) == [
            ["2024-01-01", "Oil Change", "Honda Accord", "Jiffy Lube", "$45.00", "-"]
        ]

    def test_deleted_records_use_snapshot_names(self):
        log = MaintenanceLog(
            "l1", "oil", "car", T0, task_name="Oil Change", item_name="Old Civic"
        )
        row = make_history_table([log], AppState())[0]
        assert row[1] == "Oil Change"
        assert row[2] == "Old Civic"

    def test_no_snapshot_falls_back_to_ids(self):
        log = MaintenanceLog("l1", "oil", "car", T0)
        row = make_history_table([log], AppState())[0]
        assert row[1:3] == ["oil", "car"]


class TestResolveTask:
    """Tests for resolve_task."""

    @pytest.fixture
    def state(self):
        return AppState(
            tasks=[
                MaintenanceTask("abc123", "car", "Oil Change", 90, T0),
                MaintenanceTask("abd456", "car", "Tire Rotation", 90, T0),
            ]
        )

    def test_by_id_prefix(self, state):
        assert resolve_task(state, "abc").id == "abc123"

    def test_by_name_case_insensitive(self, state):
        assert resolve_task(state, "oil change").id == "abc123"

    def test_ambiguous_prefix(self, state):
        assert resolve_task(state, "ab") is None


# =============================================================================
# Command tests
# =============================================================================


class TestCommands:
    """End-to-end runs of the CLI against a temporary data file."""

    @pytest.fixture
    def data_file(self, tmp_path):
        return tmp_path / "data.yaml"

    def run(self, data_file, *args):
        return main([str(data_file), *args])

    def test_add_item_with_templates(self, data_file, capsys):
        assert self.run(data_file, "add-item", "Honda Accord", "--category", "car", "--templates") == 0
        state = YamlStore(data_file).load_state()
        assert state.items[0].category == Category.VEHICLE
        assert len(state.tasks) == 15
        assert "Added 15 starter tasks." in capsys.readouterr().out

    def test_reminders_file_defaults_next_to_data(self, data_file):
        self.run(data_file, "add-item", "Honda Accord", "--category", "vehicle", "--templates")
        assert data_file.with_suffix(".reminders.yaml").exists()

    def test_dry_run_writes_nothing(self, data_file, capsys):
        assert self.run(data_file, "add-item", "Fridge", "--dry-run") == 0
        assert not data_file.exists()
        assert "dry run" in capsys.readouterr().out

    def test_complete_then_history(self, data_file, capsys):
        self.run(data_file, "add-item", "Honda Accord", "--category", "vehicle")
        self.run(data_file, "add-task", "Honda Accord", "Oil Change", "--interval", "90")
        assert self.run(
            data_file, "complete", "oil change", "--date", "2024-04-05",
            "--cost", "45", "--by", "Jiffy Lube",
        ) == 0

        task = YamlStore(data_file).load_tasks()[0]
        assert task.next_due == datetime(2024, 7, 4, tzinfo=timezone.utc)
        assert "Next due 2024-07-04." in capsys.readouterr().out

        assert self.run(data_file, "history") == 0
        out = capsys.readouterr().out
        assert "Jiffy Lube" in out
        assert "$45.00" in out

    def test_history_of_deleted_item(self, data_file, capsys):
        self.run(data_file, "add-item", "Old Civic", "--category", "vehicle")
        self.run(data_file, "add-task", "Old Civic", "Oil Change")
        self.run(data_file, "complete", "Oil Change", "--date", "2024-02-01")
        assert self.run(data_file, "delete-item", "Old Civic") == 0
        capsys.readouterr()

        assert self.run(data_file, "history", "--item", "old civic") == 0
        out = capsys.readouterr().out
        assert "Oil Change" in out
        assert "Showing: 1 (filtered)" in out

    def test_defer(self, data_file, capsys):
        self.run(data_file, "add-item", "House", "--category", "home")
        self.run(data_file, "add-task", "House", "Gutters", "--interval", "180")
        assert self.run(data_file, "defer", "Gutters", "3") == 0
        task = YamlStore(data_file).load_tasks()[0]
        assert task.last_completed is None
        assert (task.next_due.date() - datetime.now(timezone.utc).date()).days == 3

    def test_unknown_task(self, data_file, capsys):
        self.run(data_file, "add-item", "House", "--category", "home")
        assert self.run(data_file, "complete", "Nope") == 1
        assert "No single task matches 'Nope'" in capsys.readouterr().out

    def test_status_lists_overdue(self, data_file, capsys):
        self.run(data_file, "add-item", "House", "--category", "home")
        self.run(data_file, "add-task", "House", "Smoke Detectors", "--due", "2000-01-01")
        capsys.readouterr()
        assert self.run(data_file, "status") == 0
        out = capsys.readouterr().out
        assert "OVERDUE:" in out
        assert "Smoke Detectors" in out

    def test_settings(self, data_file, capsys):
        assert self.run(data_file, "settings", "--reminder-days", "7", "--notifications", "off") == 0
        settings = YamlStore(data_file).load_settings()
        assert settings.default_reminder_days == 7
        assert settings.notifications_enabled is False

    def test_export_import(self, data_file, tmp_path, capsys):
        self.run(data_file, "add-item", "Fridge", "--category", "appliance", "--templates")
        backup = tmp_path / "backup.json"
        assert self.run(data_file, "export", "--output", str(backup)) == 0
        assert len(json.loads(backup.read_text())["tasks"]) == 15

        other = tmp_path / "other.yaml"
        assert self.run(other, "import", str(backup)) == 0
        assert len(YamlStore(other).load_tasks()) == 15

    def test_import_bad_file(self, data_file, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text('{"items": {}}')
        assert self.run(data_file, "import", str(bad)) == 1
        assert "Error:" in capsys.readouterr().out

    def test_templates(self, capsys, data_file):
        assert self.run(data_file, "templates", "home") == 0
        out = capsys.readouterr().out
        assert "HOME:" in out
        assert "HVAC Filter Change" in out

    def test_edit_task_keeps_due_date(self, data_file, capsys):
        self.run(data_file, "add-item", "Honda Accord", "--category", "vehicle")
        self.run(data_file, "add-task", "Honda Accord", "Oil Change", "--due", "2030-05-01")
        assert self.run(
            data_file, "edit-task", "Oil Change", "--interval", "120", "--priority", "critical"
        ) == 0
        task = YamlStore(data_file).load_tasks()[0]
        assert task.interval_days == 120
        assert task.priority == Priority.CRITICAL
        assert task.next_due == datetime(2030, 5, 1, tzinfo=timezone.utc)

    def test_edit_task_due_date(self, data_file):
        self.run(data_file, "add-item", "House", "--category", "home")
        self.run(data_file, "add-task", "House", "Gutters", "--due", "2030-05-01")
        assert self.run(data_file, "edit-task", "Gutters", "--due", "2030-06-15", "--active", "off") == 0
        task = YamlStore(data_file).load_tasks()[0]
        assert task.next_due == datetime(2030, 6, 15, tzinfo=timezone.utc)
        assert task.is_active is False

    def test_edit_task_dry_run(self, data_file, capsys):
        self.run(data_file, "add-item", "House", "--category", "home")
        self.run(data_file, "add-task", "House", "Gutters", "--interval", "180")
        before = YamlStore(data_file).load_tasks()
        assert self.run(data_file, "edit-task", "Gutters", "--interval", "90", "--dry-run") == 0
        assert YamlStore(data_file).load_tasks() == before
        assert "interval_days: 90" in capsys.readouterr().out

    def test_edit_item(self, data_file, capsys):
        self.run(data_file, "add-item", "Fridge", "--category", "appliance")
        assert self.run(
            data_file, "edit-item", "Fridge", "--brand", "LG", "--warranty", "2030-01-01"
        ) == 0
        item = YamlStore(data_file).load_items()[0]
        assert item.brand == "LG"
        assert item.warranty_expiry == datetime(2030, 1, 1, tzinfo=timezone.utc)
        titles = [r.title for r in ReminderOutbox(data_file.with_suffix(".reminders.yaml")).load()]
        assert titles == ["Warranty Expiring Soon"]

    def test_edit_item_nothing_to_change(self, data_file, capsys):
        self.run(data_file, "add-item", "Fridge", "--category", "appliance")
        assert self.run(data_file, "edit-item", "Fridge") == 0
        assert "Nothing to change." in capsys.readouterr().out

    def test_backup_and_restore(self, data_file, capsys):
        self.run(data_file, "add-item", "Fridge", "--category", "appliance", "--templates")
        assert self.run(data_file, "backup", "--name", "before move") == 0
        assert "15 tasks" in capsys.readouterr().out

        assert self.run(data_file, "clear", "--yes") == 0
        assert YamlStore(data_file).load_tasks() == []

        assert self.run(data_file, "backups") == 0
        out = capsys.readouterr().out
        assert "before move" in out
        backup_id = out.splitlines()[-1].split()[0]

        assert self.run(data_file, "restore", backup_id) == 0
        assert len(YamlStore(data_file).load_tasks()) == 15
        assert "Restored 1 items, 15 tasks" in capsys.readouterr().out

        assert self.run(data_file, "delete-backup", backup_id) == 0
        assert self.run(data_file, "restore", backup_id) == 1
        assert "Error:" in capsys.readouterr().out

    def test_backups_dir_defaults_next_to_data(self, data_file):
        self.run(data_file, "add-item", "Fridge", "--category", "appliance")
        self.run(data_file, "backup")
        assert (data_file.with_suffix(".backups") / "index.yaml").exists()

    def test_clear_needs_confirmation(self, data_file, capsys):
        self.run(data_file, "add-item", "Fridge", "--category", "appliance")
        assert self.run(data_file, "clear") == 1
        assert self.run(data_file, "clear", "--dry-run") == 0
        assert len(YamlStore(data_file).load_items()) == 1
        assert "Pass --yes" in capsys.readouterr().out
