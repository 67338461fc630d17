#!/usr/bin/env python3
"""Tests for reminder derivation and rescheduling."""
import pytest
from datetime import datetime, timedelta, timezone
from minder import (
    Category,
    Item,
    MaintenanceTask,
    ReminderScheduler,
    compute_reminder_fire_date,
    derive_reminder,
    derive_warranty_reminder,
    is_reminder_elapsed,
    reschedule_all,
)

NOW = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


class RecordingScheduler(ReminderScheduler):
    """In-memory scheduler that keeps what it was asked to schedule."""

    def __init__(self):
        self.scheduled = []
        self.cancel_all_calls = 0

    def schedule_reminder(self, task_id, item_id, fire_date, title, body):
        self.scheduled.append((task_id, item_id, fire_date, title, body))

    def cancel_reminders_for_task(self, task_id):
        self.scheduled = [s for s in self.scheduled if s[0] != task_id]

    def cancel_reminders_for_item(self, item_id):
        self.scheduled = [s for s in self.scheduled if s[1] != item_id]

    def cancel_all(self):
        self.cancel_all_calls += 1
        self.scheduled = []


@pytest.fixture
def item():
    return Item("i1", "Honda Accord", Category.VEHICLE, NOW, NOW)


def make_task(task_id="t1", due_in_days=10, lead=3, **overrides):
    return MaintenanceTask(
        id=task_id,
        item_id=overrides.pop("item_id", "i1"),
        name=overrides.pop("name", "Oil Change"),
        interval_days=90,
        next_due=NOW + timedelta(days=due_in_days),
        reminder_days_before=lead,
        **overrides,
    )


class TestComputeReminderFireDate:
    """Tests for compute_reminder_fire_date."""

    def test_subtracts_lead_time(self):
        due = datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)
        assert compute_reminder_fire_date(due, 3) == datetime(
            2024, 2, 28, 9, 0, tzinfo=timezone.utc
        )

    def test_zero_lead_fires_at_due_time(self):
        due = datetime(2024, 3, 2, tzinfo=timezone.utc)
        assert compute_reminder_fire_date(due, 0) == due


class TestIsReminderElapsed:
    """Tests for reminder suppression."""

    def test_past_fire_date_elapsed(self):
        assert is_reminder_elapsed(NOW - timedelta(days=1), NOW) is True

    def test_fire_date_now_elapsed(self):
        assert is_reminder_elapsed(NOW, NOW) is True

    def test_future_fire_date_not_elapsed(self):
        assert is_reminder_elapsed(NOW + timedelta(minutes=1), NOW) is False


class TestDeriveReminder:
    """Tests for derive_reminder."""

    def test_future_reminder(self, item):
        task = make_task(due_in_days=10, lead=3)
        reminder = derive_reminder(task, item, NOW)
        assert reminder is not None
        assert reminder.fire_date == NOW + timedelta(days=7)
        assert reminder.task_id == "t1"
        assert reminder.item_id == "i1"
        assert reminder.title == "Oil Change Due Soon"
        assert reminder.body == "Honda Accord: Oil Change is due in 3 days"

    def test_elapsed_reminder_suppressed(self, item):
        """Due in 2 days with a 3 day lead fires yesterday: suppressed."""
        task = make_task(due_in_days=2, lead=3)
        assert derive_reminder(task, item, NOW) is None

    def test_inactive_task_has_no_reminder(self, item):
        task = make_task(is_active=False)
        assert derive_reminder(task, item, NOW) is None

    def test_body_wording_for_short_leads(self, item):
        assert derive_reminder(make_task(lead=1), item, NOW).body.endswith("due in 1 day")
        assert derive_reminder(make_task(lead=0), item, NOW).body.endswith("due today")


class TestRescheduleAll:
    """Tests for reschedule_all."""

    def test_schedules_only_future_reminders(self, item):
        scheduler = RecordingScheduler()
        tasks = [
            make_task("t1", due_in_days=10),
            make_task("t2", due_in_days=2),
            make_task("t3", due_in_days=-5),
        ]
        result = reschedule_all(tasks, [item], scheduler, NOW)
        assert [r.task_id for r in result] == ["t1"]
        assert [s[0] for s in scheduler.scheduled] == ["t1"]

    def test_clears_previous_reminders_first(self, item):
        scheduler = RecordingScheduler()
        scheduler.scheduled = [("stale", "i1", NOW, "old", "old")]
        reschedule_all([make_task("t1")], [item], scheduler, NOW)
        assert scheduler.cancel_all_calls == 1
        assert [s[0] for s in scheduler.scheduled] == ["t1"]

    def test_idempotent(self, item):
        """Running twice leaves the same set, not a doubled one."""
        scheduler = RecordingScheduler()
        tasks = [make_task("t1"), make_task("t2", due_in_days=20)]
        reschedule_all(tasks, [item], scheduler, NOW)
        first = list(scheduler.scheduled)
        reschedule_all(tasks, [item], scheduler, NOW)
        assert scheduler.scheduled == first
        assert len(scheduler.scheduled) == 2

    def test_skips_inactive_tasks(self, item):
        scheduler = RecordingScheduler()
        reschedule_all([make_task(is_active=False)], [item], scheduler, NOW)
        assert scheduler.scheduled == []

    def test_skips_tasks_without_item(self, item):
        scheduler = RecordingScheduler()
        reschedule_all([make_task(item_id="gone")], [item], scheduler, NOW)
        assert scheduler.scheduled == []

    def test_disabled_only_clears(self, item):
        scheduler = RecordingScheduler()
        scheduler.scheduled = [("t1", "i1", NOW, "old", "old")]
        result = reschedule_all([make_task("t1")], [item], scheduler, NOW, enabled=False)
        assert result == []
        assert scheduler.scheduled == []


class TestDeriveWarrantyReminder:
    """Tests for derive_warranty_reminder."""

    def make_item(self, expires_in_days=None):
        expiry = None
        if expires_in_days is not None:
            expiry = datetime(2024, 6, 1, tzinfo=timezone.utc) + timedelta(days=expires_in_days)
        return Item("f1", "Fridge", Category.APPLIANCE, NOW, NOW, warranty_expiry=expiry)

    def test_fires_thirty_days_before_expiry(self):
        reminder = derive_warranty_reminder(self.make_item(100), NOW)
        assert reminder.task_id is None
        assert reminder.item_id == "f1"
        assert reminder.fire_date == datetime(2024, 8, 10, tzinfo=timezone.utc)
        assert reminder.title == "Warranty Expiring Soon"
        assert reminder.body == "Fridge - Warranty expires on Sep 9, 2024"

    def test_custom_lead(self):
        reminder = derive_warranty_reminder(self.make_item(100), NOW, days_before=7)
        assert reminder.fire_date == datetime(2024, 9, 2, tzinfo=timezone.utc)

    def test_elapsed_suppressed(self):
        """Expiring in 20 days means the 30-day reminder is already past."""
        assert derive_warranty_reminder(self.make_item(20), NOW) is None

    def test_no_warranty(self):
        assert derive_warranty_reminder(self.make_item(), NOW) is None

    def test_scheduled_with_task_reminders(self, item):
        scheduler = RecordingScheduler()
        fridge = self.make_item(100)
        result = reschedule_all([make_task("t1")], [item, fridge], scheduler, NOW)
        assert [(r.task_id, r.item_id) for r in result] == [("t1", "i1"), (None, "f1")]

    def test_item_cancel_drops_warranty_and_tasks(self, item):
        scheduler = RecordingScheduler()
        fridge = self.make_item(100)
        tasks = [make_task("t1"), make_task("t2", item_id="f1")]
        reschedule_all(tasks, [item, fridge], scheduler, NOW)
        scheduler.cancel_reminders_for_item("f1")
        assert [s[0] for s in scheduler.scheduled] == ["t1"]
