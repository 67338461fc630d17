#!/usr/bin/env python3
"""Tests for statistics and warranty tracking."""

from datetime import datetime, timedelta, timezone

import pytest

from minder import AppState, Category, Item, MaintenanceLog, MaintenanceTask
from minder.stats import get_warranties, summarize, warranty_status

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_item(item_id, category, warranty_in_days=None):
    expiry = None
    if warranty_in_days is not None:
        expiry = NOW + timedelta(days=warranty_in_days)
    return Item(item_id, item_id.title(), category, NOW, NOW, warranty_expiry=expiry)


@pytest.fixture
def state():
    items = [make_item("car", Category.VEHICLE), make_item("fridge", Category.APPLIANCE)]
    tasks = [
        MaintenanceTask("oil", "car", "Oil Change", 90, NOW - timedelta(days=1)),
        MaintenanceTask("coils", "fridge", "Coil Cleaning", 180, NOW + timedelta(days=30)),
        MaintenanceTask("old", "car", "Old", 30, NOW - timedelta(days=50), is_active=False),
    ]
    logs = [
        MaintenanceLog("l1", "oil", "car", NOW - timedelta(days=2), cost=45.0, task_name="Oil Change"),
        MaintenanceLog("l2", "oil", "car", NOW - timedelta(days=100), cost=40.0, task_name="Oil Change"),
        MaintenanceLog("l3", "coils", "fridge", NOW - timedelta(days=5), task_name="Coil Cleaning"),
        MaintenanceLog("l4", "x", "boat", NOW - timedelta(days=1), cost=15.0, task_name="Hull"),
    ]
    return AppState(items=items, tasks=tasks, logs=logs)


class TestSummarize:
    """Tests for summarize."""

    def test_counts(self, state):
        summary = summarize(state, NOW)
        assert summary.total_items == 2
        assert summary.total_tasks == 3
        assert summary.active_tasks == 2
        assert summary.overdue_tasks == 1
        assert summary.completed == 4

    def test_completion_rate(self, state):
        assert summarize(state, NOW).completion_rate == pytest.approx(4 / 6 * 100)

    def test_spending(self, state):
        summary = summarize(state, NOW)
        assert summary.total_spent == 100.0
        assert summary.average_cost == 25.0
        assert summary.spent_by_category == {"vehicle": 85.0}

    def test_this_month_and_most_common(self, state):
        summary = summarize(state, NOW)
        assert summary.completed_this_month == 3
        assert summary.most_common_tasks[0] == ("Oil Change", 2)

    def test_empty_state(self):
        summary = summarize(AppState(), NOW)
        assert summary.completion_rate == 0.0
        assert summary.average_cost == 0.0


class TestWarranties:
    """Tests for warranty tracking."""

    def test_no_warranty(self):
        assert warranty_status(make_item("car", Category.VEHICLE), NOW) is None

    def test_expiring_soon(self):
        status = warranty_status(make_item("tv", Category.APPLIANCE, 20), NOW)
        assert status.days_remaining == 20
        assert status.is_expiring_soon
        assert not status.is_expired

    def test_expired(self):
        status = warranty_status(make_item("tv", Category.APPLIANCE, -3), NOW)
        assert status.is_expired
        assert not status.is_expiring_soon

    def test_sorted_soonest_first(self):
        state = AppState(
            items=[
                make_item("a", Category.APPLIANCE, 400),
                make_item("b", Category.APPLIANCE, -10),
                make_item("c", Category.HOME),
                make_item("d", Category.APPLIANCE, 12),
            ]
        )
        assert [w.item.id for w in get_warranties(state, NOW)] == ["b", "d", "a"]
