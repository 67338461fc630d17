#!/usr/bin/env python3
"""
Unified CLI for home, vehicle and appliance maintenance tracking.

Commands:
  status       - Show what maintenance is overdue, due soon, or upcoming
  items        - List tracked items and their warranties
  add-item     - Register an item, optionally with starter tasks
  edit-item    - Change an item's details
  delete-item  - Delete an item and its tasks (history is kept)
  tasks        - List maintenance tasks
  add-task     - Add a task to an item
  edit-task    - Change a task; its due date only moves when --due is given
  complete     - Mark a task done and reschedule it
  defer        - Push a task's due date back
  delete-task  - Delete a task
  history      - View completed maintenance
  templates    - List starter task templates
  reminders    - Recompute or list scheduled reminders
  stats        - Spending and completion statistics
  settings     - View or change preferences
  export       - Write all data as JSON
  import       - Replace all data from a JSON export
  backup       - Save a local snapshot of all data
  backups      - List local snapshots
  restore      - Replace all data from a local snapshot
  delete-backup - Delete a local snapshot
  clear        - Delete all items, tasks, history and settings
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from minder import (
    AppState,
    BackupShelf,
    Category,
    Item,
    MaintenanceLog,
    MaintenanceTask,
    MinderError,
    Priority,
    ReminderOutbox,
    Status,
    TaskDue,
    TaskLifecycle,
    YamlStore,
    export_data,
    get_templates,
    import_data,
    utc_now,
)
from minder.loader import parse_timestamp
from minder.stats import get_warranties, summarize

# =============================================================================
# Formatting helpers
# =============================================================================


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"${cost:,.2f}" if cost is not None else "-"


def format_date(when: Optional[datetime]) -> str:
    """Format a timestamp as a calendar date."""
    return when.date().isoformat() if when is not None else "-"


def format_interval(days: int) -> str:
    """Format an interval (e.g., '90d' or 'once')."""
    return f"{days}d" if days > 0 else "once"


def format_days_left(days: int) -> str:
    """Format remaining days for display (e.g., 'today', '3d', '-2d')."""
    if days == 0:
        return "today"
    return f"{days}d"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_date_arg(value: Optional[str]) -> Optional[datetime]:
    """Parse a YYYY-MM-DD (or full ISO) command-line date."""
    if not value:
        return None
    return parse_timestamp(value)


def parse_switch(value: str) -> bool:
    """Parse on/off style flags."""
    lowered = value.lower()
    if lowered in ("on", "yes", "true", "1"):
        return True
    if lowered in ("off", "no", "false", "0"):
        return False
    raise argparse.ArgumentTypeError(f"expected on/off, got '{value}'")


# =============================================================================
# Lookup helpers
# =============================================================================


def resolve_item(state: AppState, ref: str) -> Optional[Item]:
    """Find an item by id, id prefix, or case-insensitive name."""
    matches = [i for i in state.items if i.id == ref]
    if not matches:
        matches = [i for i in state.items if i.id.startswith(ref)]
    if not matches:
        matches = [i for i in state.items if i.name.lower() == ref.lower()]
    return matches[0] if len(matches) == 1 else None


def resolve_task(state: AppState, ref: str) -> Optional[MaintenanceTask]:
    """Find a task by id, id prefix, or case-insensitive name."""
    matches = [t for t in state.tasks if t.id == ref]
    if not matches:
        matches = [t for t in state.tasks if t.id.startswith(ref)]
    if not matches:
        matches = [t for t in state.tasks if t.name.lower() == ref.lower()]
    return matches[0] if len(matches) == 1 else None


def print_task_choices(state: AppState, ref: str) -> None:
    print(f"Error: No single task matches '{ref}'")
    print("\nAvailable tasks:")
    for task in sorted(state.tasks, key=lambda t: t.name):
        item = state.get_item(task.item_id)
        print(f"  {task.name} ({item.name if item else '?'})")
        print(f"    Id: {task.id}")


def print_item_choices(state: AppState, ref: str) -> None:
    print(f"Error: No single item matches '{ref}'")
    print("\nAvailable items:")
    for item in sorted(state.items, key=lambda i: i.name):
        print(f"  {item.name}")
        print(f"    Id: {item.id}")


def open_lifecycle(args) -> TaskLifecycle:
    """Controller over the data file, with the reminder outbox attached."""
    return TaskLifecycle(YamlStore(args.data_file), ReminderOutbox(args.reminders_file))


# =============================================================================
# Status command
# =============================================================================


def make_status_table(statuses: List[TaskDue]) -> List[List[str]]:
    """Convert task status list to table rows."""
    rows = []
    for svc in statuses:
        rows.append(
            [
                svc.task.name,
                svc.item.name if svc.item else "-",
                svc.task.priority.value,
                format_interval(svc.task.interval_days),
                format_date(svc.task.last_completed),
                format_date(svc.task.next_due),
                format_days_left(svc.days_until_due),
            ]
        )
    return rows


def cmd_status(args):
    """Show what maintenance is overdue, due soon, or upcoming."""
    state = YamlStore(args.data_file).load_state()
    now = utc_now()

    statuses = state.get_all_task_status(now, window_days=args.window)
    if args.item:
        item = resolve_item(state, args.item)
        if item is None:
            print_item_choices(state, args.item)
            return 1
        statuses = [s for s in statuses if s.task.item_id == item.id]

    print(f"Items: {len(state.items)}")
    print(f"Tasks: {len(state.tasks)}")
    print(f"Due-soon window: {args.window} days")
    print()

    headers = ["Task", "Item", "Priority", "Interval", "Last Done", "Due", "Left"]
    groups = [
        (Status.OVERDUE, "OVERDUE:"),
        (Status.DUE_SOON, "DUE SOON:"),
        (Status.UPCOMING, "UPCOMING:"),
    ]
    for status, title in groups:
        group = [s for s in statuses if s.status == status]
        if status == Status.UPCOMING and not args.all:
            if group:
                print(f"UPCOMING: {len(group)} tasks (use --all to list)")
                print()
            continue
        if group:
            print(title)
            print(tabulate(make_status_table(group), headers=headers, tablefmt="simple"))
            print()

    inactive = [s for s in statuses if s.status == Status.INACTIVE]
    if inactive:
        print(f"INACTIVE ({len(inactive)} tasks switched off):")
        for svc in inactive:
            print(f"  {svc.task.name}")
        print()

    if not statuses:
        print("No tasks found.")

    return 0


# =============================================================================
# Item commands
# =============================================================================


def cmd_items(args):
    """List tracked items."""
    state = YamlStore(args.data_file).load_state()
    now = utc_now()

    items = state.find_items(args.search) if args.search else state.items
    if not items:
        print("No items found.")
        return 0

    warranties = {w.item.id: w for w in get_warranties(state, now)}
    rows = []
    for item in sorted(items, key=lambda i: (i.category.value, i.name)):
        warranty = warranties.get(item.id)
        if warranty is None:
            warranty_str = "-"
        elif warranty.is_expired:
            warranty_str = "expired"
        else:
            warranty_str = f"{warranty.days_remaining}d left"
        rows.append(
            [
                item.display_name,
                item.category.label,
                len(state.get_tasks_for_item(item.id)),
                len(state.get_logs_for_item(item.id)),
                warranty_str,
                item.id,
            ]
        )

    headers = ["Item", "Category", "Tasks", "Logs", "Warranty", "Id"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_add_item(args):
    """Register a new item."""
    now = utc_now()
    category = Category.parse(args.category)
    templates = get_templates(category) if args.templates else []

    print(f"Adding item to {args.data_file}:")
    print(f"  Name:     {args.name}")
    print(f"  Category: {category.label}")
    if args.brand or args.model:
        print(f"  Make:     {' '.join(p for p in (args.brand, args.model) if p)}")
    if args.templates:
        print(f"  Starter tasks: {len(templates)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    lifecycle = open_lifecycle(args)
    item = lifecycle.add_item(
        args.name,
        category,
        now,
        subtype=args.subtype,
        brand=args.brand,
        model=args.model,
        location=args.location,
        purchase_date=parse_date_arg(args.purchase_date),
        warranty_expiry=parse_date_arg(args.warranty),
        notes=args.notes,
    )
    print(f"Item saved. Id: {item.id}")

    if args.templates:
        tasks = lifecycle.add_tasks_from_templates(item.id, now)
        print(f"Added {len(tasks)} starter tasks.")

    return 0


def print_changes(changes: dict) -> None:
    for field, value in changes.items():
        if isinstance(value, datetime):
            value = format_date(value)
        elif hasattr(value, "value"):
            value = value.value
        print(f"  {field}: {value}")


def cmd_edit_item(args):
    """Change an item's details."""
    store = YamlStore(args.data_file)
    state = store.load_state()
    item = resolve_item(state, args.item)
    if item is None:
        print_item_choices(state, args.item)
        return 1

    changes = {
        "name": args.name,
        "category": Category.parse(args.category) if args.category else None,
        "subtype": args.subtype,
        "brand": args.brand,
        "model": args.model,
        "location": args.location,
        "purchase_date": parse_date_arg(args.purchase_date),
        "warranty_expiry": parse_date_arg(args.warranty),
        "notes": args.notes,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        print("Nothing to change.")
        return 0

    print(f"Editing {item.name}:")
    print_changes(changes)
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    open_lifecycle(args).update_item(item.id, utc_now(), **changes)
    print("Item saved.")
    return 0


def cmd_delete_item(args):
    """Delete an item and all of its tasks."""
    store = YamlStore(args.data_file)
    state = store.load_state()
    item = resolve_item(state, args.item)
    if item is None:
        print_item_choices(state, args.item)
        return 1

    tasks = state.get_tasks_for_item(item.id)
    logs = state.get_logs_for_item(item.id)
    print(f"Deleting {item.name}: {len(tasks)} tasks removed, {len(logs)} log entries kept")

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    open_lifecycle(args).delete_item(item.id, utc_now())
    print("Item deleted.")
    return 0


# =============================================================================
# Task commands
# =============================================================================


def cmd_tasks(args):
    """List maintenance tasks."""
    state = YamlStore(args.data_file).load_state()

    tasks = state.find_tasks(args.search) if args.search else state.tasks
    if args.item:
        item = resolve_item(state, args.item)
        if item is None:
            print_item_choices(state, args.item)
            return 1
        tasks = [t for t in tasks if t.item_id == item.id]

    if not tasks:
        print("No tasks found.")
        return 0

    rows = []
    for task in sorted(tasks, key=lambda t: (t.next_due, -t.priority.rank)):
        item = state.get_item(task.item_id)
        rows.append(
            [
                task.name,
                item.name if item else "-",
                task.priority.value,
                format_interval(task.interval_days),
                format_date(task.next_due),
                f"{task.reminder_days_before}d",
                format_cost(task.estimated_cost),
                task.id,
            ]
        )

    headers = ["Task", "Item", "Priority", "Interval", "Due", "Remind", "Est. Cost", "Id"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_add_task(args):
    """Add a task to an item."""
    store = YamlStore(args.data_file)
    state = store.load_state()
    item = resolve_item(state, args.item)
    if item is None:
        print_item_choices(state, args.item)
        return 1

    print(f"Adding task to {item.name}:")
    print(f"  Name:     {args.name}")
    print(f"  Interval: {format_interval(args.interval)}")
    print(f"  Priority: {args.priority}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    task = open_lifecycle(args).create_task(
        item.id,
        args.name,
        args.interval,
        utc_now(),
        next_due=parse_date_arg(args.due),
        reminder_days_before=args.reminder_days,
        priority=Priority.parse(args.priority),
        description=args.description,
        estimated_cost=args.cost,
    )
    print(f"Task saved. Due {format_date(task.next_due)}. Id: {task.id}")
    return 0


def cmd_edit_task(args):
    """Change a task. The due date only moves when --due is given."""
    store = YamlStore(args.data_file)
    state = store.load_state()
    task = resolve_task(state, args.task)
    if task is None:
        print_task_choices(state, args.task)
        return 1

    changes = {
        "name": args.name,
        "interval_days": args.interval,
        "priority": Priority.parse(args.priority) if args.priority else None,
        "reminder_days_before": args.reminder_days,
        "next_due": parse_date_arg(args.due),
        "estimated_cost": args.cost,
        "description": args.description,
        "notes": args.notes,
        "is_active": args.active,
    }
    if args.item:
        item = resolve_item(state, args.item)
        if item is None:
            print_item_choices(state, args.item)
            return 1
        changes["item_id"] = item.id
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        print("Nothing to change.")
        return 0

    print(f"Editing {task.name}:")
    print_changes(changes)
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    updated = open_lifecycle(args).edit_task(task.id, utc_now(), **changes)
    print(f"Task saved. Due {format_date(updated.next_due)}.")
    return 0


def cmd_complete(args):
    """Mark a task done and reschedule it."""
    store = YamlStore(args.data_file)
    state = store.load_state()
    task = resolve_task(state, args.task)
    if task is None:
        print_task_choices(state, args.task)
        return 1

    now = utc_now()
    completed_at = parse_date_arg(args.date) or now

    print(f"Completing {task.name}:")
    print(f"  Date:    {format_date(completed_at)}")
    if args.by:
        print(f"  By:      {args.by}")
    if args.notes:
        print(f"  Notes:   {args.notes}")
    if args.cost is not None:
        print(f"  Cost:    {format_cost(args.cost)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    updated, _ = open_lifecycle(args).complete_task(
        task.id,
        completed_at,
        cost=args.cost,
        provider=args.by,
        notes=args.notes,
        now=now,
    )
    if updated.is_recurring:
        print(f"Entry saved. Next due {format_date(updated.next_due)}.")
    else:
        print("Entry saved. One-time task, due date unchanged.")
    return 0


def cmd_defer(args):
    """Push a task's due date back."""
    store = YamlStore(args.data_file)
    state = store.load_state()
    task = resolve_task(state, args.task)
    if task is None:
        print_task_choices(state, args.task)
        return 1

    if args.dry_run:
        print(f"Would defer {task.name} by {args.days} days")
        print("(dry run - no changes made)")
        return 0

    updated = open_lifecycle(args).defer_task(task.id, args.days, utc_now())
    print(f"{task.name} now due {format_date(updated.next_due)}.")
    return 0


def cmd_delete_task(args):
    """Delete a task."""
    store = YamlStore(args.data_file)
    state = store.load_state()
    task = resolve_task(state, args.task)
    if task is None:
        print_task_choices(state, args.task)
        return 1

    if args.dry_run:
        print(f"Would delete {task.name}")
        print("(dry run - no changes made)")
        return 0

    open_lifecycle(args).delete_task(task.id, utc_now())
    print(f"Deleted {task.name}. History kept.")
    return 0


# =============================================================================
# History command
# =============================================================================


def make_history_table(logs: List[MaintenanceLog], state: AppState) -> List[List[str]]:
    """Convert log entries to table rows."""
    rows = []
    for log in logs:
        # Fall back to the names captured at completion time
        task = state.get_task(log.task_id)
        item = state.get_item(log.item_id)
        task_name = task.name if task else (log.task_name or log.task_id)
        item_name = item.name if item else (log.item_name or log.item_id)

        rows.append(
            [
                format_date(log.completed_at),
                task_name,
                item_name,
                log.provider or "-",
                format_cost(log.cost),
                truncate(log.notes),
            ]
        )
    return rows


def cmd_history(args):
    """View completed maintenance."""
    state = YamlStore(args.data_file).load_state()

    logs = state.get_logs_sorted(reverse=not args.asc)

    if args.item:
        item = resolve_item(state, args.item)
        if item is not None:
            logs = [log for log in logs if log.item_id == item.id]
        else:
            # Deleted items are still found by their id or remembered name
            ref = args.item.lower()
            logs = [
                log
                for log in logs
                if log.item_id == args.item or (log.item_name or "").lower() == ref
            ]

    if args.since:
        since = parse_date_arg(args.since)
        logs = [log for log in logs if log.completed_at >= since]

    total_cost = sum(log.cost for log in logs if log.cost is not None)
    last = state.last_log

    if last:
        print(f"Last service: {format_date(last.completed_at)}")
    print(f"Total services: {len(state.logs)}")
    if args.item or args.since:
        print(f"Showing: {len(logs)} (filtered)")
    if total_cost > 0:
        print(f"Total cost: {format_cost(total_cost)}")
    print()

    if not logs:
        print("No history entries found.")
        return 0

    headers = ["Date", "Task", "Item", "Performed By", "Cost", "Notes"]
    print(tabulate(make_history_table(logs, state), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Templates command
# =============================================================================


def cmd_templates(args):
    """List starter task templates."""
    categories = [Category.parse(args.category)] if args.category else list(Category)

    for category in categories:
        templates = get_templates(category)
        if not templates:
            continue
        print(f"{category.label.upper()}:")
        rows = [
            [t.name, format_interval(t.interval_days), t.priority.value, t.description or "-"]
            for t in templates
        ]
        print(
            tabulate(
                rows, headers=["Task", "Interval", "Priority", "Description"], tablefmt="simple"
            )
        )
        print()
    return 0


# =============================================================================
# Reminders command
# =============================================================================


def cmd_reminders(args):
    """Recompute or list scheduled reminders."""
    now = utc_now()
    outbox = ReminderOutbox(args.reminders_file)

    if args.reschedule:
        scheduled = open_lifecycle(args).reschedule_reminders(now)
        print(f"Scheduled {len(scheduled)} reminders.")
        print()

    reminders = outbox.due(now) if args.due else outbox.load()
    if not reminders:
        print("No reminders.")
        return 0

    rows = [
        [format_date(r.fire_date), r.title, r.body]
        for r in sorted(reminders, key=lambda r: r.fire_date)
    ]
    print(tabulate(rows, headers=["Fires", "Title", "Message"], tablefmt="simple"))
    return 0


# =============================================================================
# Stats command
# =============================================================================


def cmd_stats(args):
    """Spending and completion statistics."""
    state = YamlStore(args.data_file).load_state()
    now = utc_now()
    summary = summarize(state, now)

    print(f"Items:          {summary.total_items}")
    print(f"Tasks:          {summary.total_tasks} ({summary.active_tasks} active)")
    print(f"Overdue:        {summary.overdue_tasks}")
    print(f"Completed:      {summary.completed} ({summary.completed_this_month} this month)")
    print(f"Completion:     {summary.completion_rate:.0f}%")
    print(f"Total spent:    {format_cost(summary.total_spent)}")
    print(f"Average cost:   {format_cost(summary.average_cost)}")
    print()

    if summary.spent_by_category:
        rows = [
            [category, format_cost(amount)]
            for category, amount in sorted(summary.spent_by_category.items())
        ]
        print(tabulate(rows, headers=["Category", "Spent"], tablefmt="simple"))
        print()

    if summary.most_common_tasks:
        print(
            tabulate(
                summary.most_common_tasks, headers=["Task", "Times Done"], tablefmt="simple"
            )
        )
        print()

    expiring = [w for w in get_warranties(state, now) if w.is_expiring_soon]
    if expiring:
        print("WARRANTIES EXPIRING SOON:")
        for w in expiring:
            print(f"  {w.item.name}: {format_days_left(w.days_remaining)}")
    return 0


# =============================================================================
# Settings command
# =============================================================================


def cmd_settings(args):
    """View or change preferences."""
    changes = {}
    if args.notifications is not None:
        changes["notifications_enabled"] = args.notifications
    if args.reminder_days is not None:
        changes["default_reminder_days"] = args.reminder_days
    if args.dark_mode is not None:
        changes["dark_mode"] = args.dark_mode

    if changes:
        settings = open_lifecycle(args).update_settings(utc_now(), **changes)
        print("Settings saved.")
    else:
        settings = YamlStore(args.data_file).load_settings()

    print(f"Notifications:         {'on' if settings.notifications_enabled else 'off'}")
    print(f"Default reminder days: {settings.default_reminder_days}")
    print(f"Dark mode:             {'on' if settings.dark_mode else 'off'}")
    return 0


# =============================================================================
# Export / Import commands
# =============================================================================


def cmd_export(args):
    """Write all data as JSON."""
    text = export_data(YamlStore(args.data_file), utc_now())
    if args.output:
        args.output.write_text(text)
        print(f"Exported to {args.output}")
    else:
        print(text)
    return 0


def cmd_import(args):
    """Replace all data from a JSON export."""
    if not args.input.exists():
        print(f"Error: File not found: {args.input}")
        return 1

    lifecycle = open_lifecycle(args)
    counts = import_data(lifecycle.store, args.input.read_text())
    lifecycle.reschedule_reminders(utc_now())
    print(
        f"Imported {counts['items']} items, {counts['tasks']} tasks, "
        f"{counts['logs']} log entries."
    )
    return 0


# =============================================================================
# Backup commands
# =============================================================================


def cmd_backup(args):
    """Save a local snapshot of all data."""
    shelf = BackupShelf(args.backups_dir)
    metadata = shelf.create(YamlStore(args.data_file), utc_now(), name=args.name)
    print(
        f"Backup {metadata.id} saved: {metadata.item_count} items, "
        f"{metadata.task_count} tasks."
    )
    return 0


def cmd_backups(args):
    """List local snapshots, newest first."""
    backups = BackupShelf(args.backups_dir).list_backups()
    if not backups:
        print("No backups.")
        return 0

    rows = [
        [
            b.id,
            b.name or "-",
            b.created_at.strftime("%Y-%m-%d %H:%M"),
            b.item_count,
            b.task_count,
            f"{b.size:,} B",
        ]
        for b in backups
    ]
    headers = ["Id", "Name", "Created", "Items", "Tasks", "Size"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_restore(args):
    """Replace all data from a local snapshot."""
    shelf = BackupShelf(args.backups_dir)
    shelf.get(args.backup_id)
    if args.dry_run:
        print(f"Would restore {args.backup_id} over {args.data_file}")
        print("(dry run - no changes made)")
        return 0

    lifecycle = open_lifecycle(args)
    counts = shelf.restore(lifecycle.store, args.backup_id)
    lifecycle.reschedule_reminders(utc_now())
    print(
        f"Restored {counts['items']} items, {counts['tasks']} tasks, "
        f"{counts['logs']} log entries."
    )
    return 0


def cmd_delete_backup(args):
    """Delete a local snapshot."""
    BackupShelf(args.backups_dir).delete(args.backup_id)
    print(f"Deleted backup {args.backup_id}.")
    return 0


def cmd_clear(args):
    """Delete all items, tasks, history and settings."""
    state = YamlStore(args.data_file).load_state()
    print(
        f"Clearing {len(state.items)} items, {len(state.tasks)} tasks, "
        f"{len(state.logs)} log entries"
    )

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0
    if not args.yes:
        print("Error: Pass --yes to delete all data")
        return 1

    open_lifecycle(args).clear_all(utc_now())
    print("All data cleared.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Home, vehicle and appliance maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data.yaml add-item "Honda Accord" --category vehicle --templates
  %(prog)s data.yaml status
  %(prog)s data.yaml status --all --window 14
  %(prog)s data.yaml complete "Oil Change" --cost 45 --by "Jiffy Lube"
  %(prog)s data.yaml defer "Car Wash" 3
  %(prog)s data.yaml edit-task "Oil Change" --interval 120
  %(prog)s data.yaml history --item "Honda Accord"
  %(prog)s data.yaml reminders --reschedule
  %(prog)s data.yaml export --output backup.json
  %(prog)s data.yaml backup --name "before move"
""",
    )
    parser.add_argument(
        "data_file",
        type=Path,
        help="Path to the YAML data file (created on first write)",
    )
    parser.add_argument(
        "--reminders-file",
        type=Path,
        help="Path to the reminder outbox (default: <data_file>.reminders.yaml)",
    )
    parser.add_argument(
        "--backups-dir",
        type=Path,
        help="Directory for local snapshots (default: <data_file>.backups)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Status subcommand
    status_parser = subparsers.add_parser(
        "status", help="Show what maintenance is overdue, due soon, or upcoming"
    )
    status_parser.add_argument(
        "--window",
        type=int,
        default=7,
        help="Days ahead that count as due soon (default: 7)",
    )
    status_parser.add_argument(
        "--all",
        action="store_true",
        help="Also list upcoming tasks",
    )
    status_parser.add_argument("--item", type=str, help="Only tasks for this item")

    # Items subcommand
    items_parser = subparsers.add_parser("items", help="List tracked items")
    items_parser.add_argument("--search", type=str, help="Filter by name, brand or model")

    # Add item subcommand
    add_item_parser = subparsers.add_parser("add-item", help="Register an item")
    add_item_parser.add_argument("name", type=str, help="Item name (e.g., 'Honda Accord')")
    add_item_parser.add_argument(
        "--category",
        choices=[c.value for c in Category] + ["car"],
        default="other",
        help="Item category (default: other)",
    )
    add_item_parser.add_argument("--subtype", type=str, help="Subtype (e.g., 'Sedan')")
    add_item_parser.add_argument("--brand", type=str, help="Brand or make")
    add_item_parser.add_argument("--model", type=str, help="Model")
    add_item_parser.add_argument("--location", type=str, help="Where the item is")
    add_item_parser.add_argument(
        "--purchase-date", type=str, help="Purchase date (YYYY-MM-DD)"
    )
    add_item_parser.add_argument(
        "--warranty", type=str, help="Warranty expiry date (YYYY-MM-DD)"
    )
    add_item_parser.add_argument("--notes", type=str, help="Notes")
    add_item_parser.add_argument(
        "--templates",
        action="store_true",
        help="Also add the starter tasks for the category",
    )
    add_item_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    # Delete item subcommand
    delete_item_parser = subparsers.add_parser(
        "delete-item", help="Delete an item and its tasks"
    )
    delete_item_parser.add_argument("item", type=str, help="Item id, id prefix or name")
    delete_item_parser.add_argument("--dry-run", action="store_true")

    # Edit item subcommand
    edit_item_parser = subparsers.add_parser("edit-item", help="Change an item's details")
    edit_item_parser.add_argument("item", type=str, help="Item id, id prefix or name")
    edit_item_parser.add_argument("--name", type=str, help="New name")
    edit_item_parser.add_argument(
        "--category", choices=[c.value for c in Category] + ["car"]
    )
    edit_item_parser.add_argument("--subtype", type=str)
    edit_item_parser.add_argument("--brand", type=str)
    edit_item_parser.add_argument("--model", type=str)
    edit_item_parser.add_argument("--location", type=str)
    edit_item_parser.add_argument(
        "--purchase-date", type=str, help="Purchase date (YYYY-MM-DD)"
    )
    edit_item_parser.add_argument(
        "--warranty", type=str, help="Warranty expiry date (YYYY-MM-DD)"
    )
    edit_item_parser.add_argument("--notes", type=str)
    edit_item_parser.add_argument("--dry-run", action="store_true")

    # Tasks subcommand
    tasks_parser = subparsers.add_parser("tasks", help="List maintenance tasks")
    tasks_parser.add_argument("--item", type=str, help="Only tasks for this item")
    tasks_parser.add_argument("--search", type=str, help="Filter by name or description")

    # Add task subcommand
    add_task_parser = subparsers.add_parser("add-task", help="Add a task to an item")
    add_task_parser.add_argument("item", type=str, help="Item id, id prefix or name")
    add_task_parser.add_argument("name", type=str, help="Task name")
    add_task_parser.add_argument(
        "--interval",
        type=int,
        default=90,
        help="Days between repeats, 0 for one-time (default: 90)",
    )
    add_task_parser.add_argument(
        "--priority",
        choices=[p.value for p in Priority],
        default=Priority.MEDIUM.value,
    )
    add_task_parser.add_argument(
        "--reminder-days",
        type=int,
        help="Days before due to remind (default: from settings)",
    )
    add_task_parser.add_argument("--due", type=str, help="First due date (YYYY-MM-DD)")
    add_task_parser.add_argument("--cost", type=float, help="Estimated cost")
    add_task_parser.add_argument("--description", type=str, help="Description")
    add_task_parser.add_argument("--dry-run", action="store_true")

    # Edit task subcommand
    edit_task_parser = subparsers.add_parser("edit-task", help="Change a task")
    edit_task_parser.add_argument("task", type=str, help="Task id, id prefix or name")
    edit_task_parser.add_argument("--name", type=str, help="New name")
    edit_task_parser.add_argument(
        "--interval", type=int, help="Days between repeats, 0 for one-time"
    )
    edit_task_parser.add_argument("--priority", choices=[p.value for p in Priority])
    edit_task_parser.add_argument(
        "--reminder-days", type=int, help="Days before due to remind"
    )
    edit_task_parser.add_argument(
        "--due", type=str, help="New due date (YYYY-MM-DD); otherwise unchanged"
    )
    edit_task_parser.add_argument("--cost", type=float, help="Estimated cost")
    edit_task_parser.add_argument("--description", type=str)
    edit_task_parser.add_argument("--notes", type=str)
    edit_task_parser.add_argument("--item", type=str, help="Move to another item")
    edit_task_parser.add_argument("--active", type=parse_switch, help="on/off")
    edit_task_parser.add_argument("--dry-run", action="store_true")

    # Complete subcommand
    complete_parser = subparsers.add_parser("complete", help="Mark a task done")
    complete_parser.add_argument("task", type=str, help="Task id, id prefix or name")
    complete_parser.add_argument(
        "--date", type=str, help="Completion date in YYYY-MM-DD format (default: now)"
    )
    complete_parser.add_argument("--cost", type=float, help="Cost of service")
    complete_parser.add_argument(
        "--by", type=str, help="Who performed the service (e.g., 'self', 'Dealer')"
    )
    complete_parser.add_argument("--notes", type=str, help="Notes about the service")
    complete_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be saved without saving",
    )

    # Defer subcommand
    defer_parser = subparsers.add_parser("defer", help="Push a task's due date back")
    defer_parser.add_argument("task", type=str, help="Task id, id prefix or name")
    defer_parser.add_argument("days", type=int, help="Days from now")
    defer_parser.add_argument("--dry-run", action="store_true")

    # Delete task subcommand
    delete_task_parser = subparsers.add_parser("delete-task", help="Delete a task")
    delete_task_parser.add_argument("task", type=str, help="Task id, id prefix or name")
    delete_task_parser.add_argument("--dry-run", action="store_true")

    # History subcommand
    history_parser = subparsers.add_parser("history", help="View completed maintenance")
    history_parser.add_argument(
        "--item", type=str, help="Only this item (also matches deleted items)"
    )
    history_parser.add_argument(
        "--since", type=str, help="Show only entries since date (YYYY-MM-DD)"
    )
    history_parser.add_argument(
        "--asc", action="store_true", help="Sort ascending instead of descending"
    )

    # Templates subcommand
    templates_parser = subparsers.add_parser("templates", help="List starter tasks")
    templates_parser.add_argument(
        "category", nargs="?", choices=[c.value for c in Category] + ["car"]
    )

    # Reminders subcommand
    reminders_parser = subparsers.add_parser("reminders", help="Scheduled reminders")
    reminders_parser.add_argument(
        "--reschedule",
        action="store_true",
        help="Recompute all reminders from the current tasks",
    )
    reminders_parser.add_argument(
        "--due", action="store_true", help="Only reminders whose time has come"
    )

    # Stats subcommand
    subparsers.add_parser("stats", help="Spending and completion statistics")

    # Settings subcommand
    settings_parser = subparsers.add_parser("settings", help="View or change preferences")
    settings_parser.add_argument("--notifications", type=parse_switch, help="on/off")
    settings_parser.add_argument("--reminder-days", type=int, help="Default lead time")
    settings_parser.add_argument("--dark-mode", type=parse_switch, help="on/off")

    # Export / import subcommands
    export_parser = subparsers.add_parser("export", help="Write all data as JSON")
    export_parser.add_argument("--output", type=Path, help="File to write (default: stdout)")
    import_parser = subparsers.add_parser("import", help="Replace all data from JSON")
    import_parser.add_argument("input", type=Path, help="JSON export file")

    # Snapshot subcommands
    backup_parser = subparsers.add_parser("backup", help="Save a local snapshot")
    backup_parser.add_argument("--name", type=str, help="Label for the snapshot")
    subparsers.add_parser("backups", help="List local snapshots")
    restore_parser = subparsers.add_parser("restore", help="Restore a local snapshot")
    restore_parser.add_argument("backup_id", type=str, help="Snapshot id")
    restore_parser.add_argument("--dry-run", action="store_true")
    delete_backup_parser = subparsers.add_parser(
        "delete-backup", help="Delete a local snapshot"
    )
    delete_backup_parser.add_argument("backup_id", type=str, help="Snapshot id")

    # Clear subcommand
    clear_parser = subparsers.add_parser("clear", help="Delete all data")
    clear_parser.add_argument(
        "--yes", action="store_true", help="Confirm deleting everything"
    )
    clear_parser.add_argument("--dry-run", action="store_true")

    return parser


COMMANDS = {
    "status": cmd_status,
    "items": cmd_items,
    "add-item": cmd_add_item,
    "edit-item": cmd_edit_item,
    "delete-item": cmd_delete_item,
    "tasks": cmd_tasks,
    "add-task": cmd_add_task,
    "edit-task": cmd_edit_task,
    "complete": cmd_complete,
    "defer": cmd_defer,
    "delete-task": cmd_delete_task,
    "history": cmd_history,
    "templates": cmd_templates,
    "reminders": cmd_reminders,
    "stats": cmd_stats,
    "settings": cmd_settings,
    "export": cmd_export,
    "import": cmd_import,
    "backup": cmd_backup,
    "backups": cmd_backups,
    "restore": cmd_restore,
    "delete-backup": cmd_delete_backup,
    "clear": cmd_clear,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.reminders_file is None:
        args.reminders_file = args.data_file.with_suffix(".reminders.yaml")
    if args.backups_dir is None:
        args.backups_dir = args.data_file.with_suffix(".backups")

    # Dispatch to command handler
    try:
        return COMMANDS[args.command](args)
    except MinderError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
