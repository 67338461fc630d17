"""Spending and completion statistics, and warranty tracking."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .calculations import days_until, is_overdue
from .item import Item
from .state import AppState

WARRANTY_EXPIRING_DAYS = 30


@dataclass
class Summary:
    """Overview numbers for the statistics view."""

    total_items: int
    total_tasks: int
    active_tasks: int
    overdue_tasks: int
    completed: int
    completion_rate: float
    total_spent: float
    average_cost: float
    spent_by_category: Dict[str, float] = field(default_factory=dict)
    items_by_category: Dict[str, int] = field(default_factory=dict)
    completed_this_month: int = 0
    most_common_tasks: List[Tuple[str, int]] = field(default_factory=list)


def summarize(state: AppState, now: datetime) -> Summary:
    """
    Compute overview statistics.

    Completion rate is completions / (completions + active tasks), as a
    percentage. Spending by category only counts logs whose item still exists.
    """
    active = [t for t in state.tasks if t.is_active]
    overdue = [t for t in active if is_overdue(t.next_due, now)]
    completed = len(state.logs)
    total_spent = sum(log.cost for log in state.logs if log.cost is not None)

    completion_rate = 0.0
    if completed + len(active) > 0:
        completion_rate = completed / (completed + len(active)) * 100

    spent_by_category: Dict[str, float] = {}
    for log in state.logs:
        item = state.get_item(log.item_id)
        if item is None or not log.cost:
            continue
        key = item.category.value
        spent_by_category[key] = spent_by_category.get(key, 0.0) + log.cost

    items_by_category = dict(Counter(item.category.value for item in state.items))

    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    completed_this_month = sum(
        1 for log in state.logs if month_start <= log.completed_at <= now
    )

    names = Counter(log.task_name for log in state.logs if log.task_name)
    most_common = names.most_common(10)

    return Summary(
        total_items=len(state.items),
        total_tasks=len(state.tasks),
        active_tasks=len(active),
        overdue_tasks=len(overdue),
        completed=completed,
        completion_rate=completion_rate,
        total_spent=total_spent,
        average_cost=total_spent / completed if completed else 0.0,
        spent_by_category=spent_by_category,
        items_by_category=items_by_category,
        completed_this_month=completed_this_month,
        most_common_tasks=most_common,
    )


@dataclass
class WarrantyStatus:
    item: Item
    days_remaining: int

    @property
    def is_expired(self) -> bool:
        return self.days_remaining < 0

    @property
    def is_expiring_soon(self) -> bool:
        return 0 <= self.days_remaining <= WARRANTY_EXPIRING_DAYS


def warranty_status(item: Item, now: datetime) -> Optional[WarrantyStatus]:
    if item.warranty_expiry is None:
        return None
    return WarrantyStatus(item, days_until(item.warranty_expiry, now))


def get_warranties(state: AppState, now: datetime) -> List[WarrantyStatus]:
    """Items with a warranty, soonest expiry first."""
    statuses = [warranty_status(item, now) for item in state.items]
    return sorted(
        (s for s in statuses if s is not None), key=lambda s: s.days_remaining
    )
