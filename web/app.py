"""Flask JSON API for maintenance tracking."""

import logging
import os
from pathlib import Path

from flask import Flask, jsonify, request

from minder import (
    Category,
    InvalidImportFormat,
    InvalidInterval,
    MinderError,
    NotFound,
    Priority,
    ReminderOutbox,
    Status,
    TaskLifecycle,
    YamlStore,
    export_data,
    get_templates,
    import_data,
    utc_now,
)
from minder.loader import (
    format_timestamp,
    item_to_dict,
    log_to_dict,
    parse_timestamp,
    settings_to_dict,
    task_to_dict,
)
from minder.stats import get_warranties, summarize

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod")
app.config["DATA_FILE"] = os.environ.get(
    "MINDER_DATA_FILE", str(Path(__file__).parent.parent / "data.yaml")
)
app.config["REMINDERS_FILE"] = os.environ.get("MINDER_REMINDERS_FILE")


def get_store() -> YamlStore:
    return YamlStore(app.config["DATA_FILE"])


def get_lifecycle() -> TaskLifecycle:
    """Controller over the configured data file and reminder outbox."""
    data_file = Path(app.config["DATA_FILE"])
    reminders_file = app.config.get("REMINDERS_FILE") or data_file.with_suffix(
        ".reminders.yaml"
    )
    return TaskLifecycle(YamlStore(data_file), ReminderOutbox(reminders_file))


def status_dict(svc) -> dict:
    """Serialize a TaskDue for the status endpoints."""
    return {
        "task": task_to_dict(svc.task),
        "itemName": svc.item.name if svc.item else None,
        "status": svc.status.name.lower(),
        "daysUntilDue": svc.days_until_due,
        "reminderDate": format_timestamp(svc.reminder_date),
    }


def body() -> dict:
    return request.get_json(silent=True) or {}


def int_or_none(value):
    """Whole-number request fields; a bad value becomes a 400."""
    return None if value is None else int(value)


TASK_FIELDS = {
    "itemId": ("item_id", str),
    "name": ("name", str),
    "description": ("description", str),
    "intervalDays": ("interval_days", int_or_none),
    "nextDue": ("next_due", parse_timestamp),
    "reminderDaysBefore": ("reminder_days_before", int_or_none),
    "priority": ("priority", Priority.parse),
    "estimatedCost": ("estimated_cost", float),
    "notes": ("notes", str),
    "isActive": ("is_active", bool),
}

ITEM_FIELDS = {
    "name": ("name", str),
    "category": ("category", Category.parse),
    "subtype": ("subtype", str),
    "brand": ("brand", str),
    "model": ("model", str),
    "location": ("location", str),
    "purchaseDate": ("purchase_date", parse_timestamp),
    "warrantyExpiry": ("warranty_expiry", parse_timestamp),
    "notes": ("notes", str),
}


def changes_from(data: dict, fields: dict) -> dict:
    """Map the camelCase keys present in a request to model field changes."""
    changes = {}
    for key, (attr, convert) in fields.items():
        if key in data:
            value = data[key]
            changes[attr] = convert(value) if value is not None else None
    return changes


# =============================================================================
# Error handlers
# =============================================================================


@app.errorhandler(NotFound)
def handle_not_found(error):
    return jsonify({"error": str(error)}), 404


@app.errorhandler(InvalidInterval)
@app.errorhandler(InvalidImportFormat)
def handle_bad_request(error):
    return jsonify({"error": str(error)}), 400


@app.errorhandler(MinderError)
def handle_minder_error(error):
    return jsonify({"error": str(error)}), 400


@app.errorhandler(ValueError)
def handle_value_error(error):
    return jsonify({"error": str(error)}), 400


# =============================================================================
# Dashboard
# =============================================================================


@app.route("/api/status")
def status():
    """Every task's status, most urgent first."""
    state = get_store().load_state()
    window = request.args.get("window", default=7, type=int)
    all_status = state.get_all_task_status(utc_now(), window_days=window)

    status_counts = {
        s.name.lower(): sum(1 for x in all_status if x.status == s) for s in Status
    }

    status_filter = request.args.get("status", "").lower() or None
    if status_filter:
        all_status = [s for s in all_status if s.status.name.lower() == status_filter]

    return jsonify(
        {
            "counts": status_counts,
            "tasks": [status_dict(s) for s in all_status],
        }
    )


@app.route("/api/stats")
def stats():
    state = get_store().load_state()
    now = utc_now()
    summary = summarize(state, now)
    return jsonify(
        {
            "totalItems": summary.total_items,
            "totalTasks": summary.total_tasks,
            "activeTasks": summary.active_tasks,
            "overdueTasks": summary.overdue_tasks,
            "completed": summary.completed,
            "completionRate": summary.completion_rate,
            "totalSpent": summary.total_spent,
            "averageCost": summary.average_cost,
            "spentByCategory": summary.spent_by_category,
            "itemsByCategory": summary.items_by_category,
            "completedThisMonth": summary.completed_this_month,
            "warranties": [
                {"itemId": w.item.id, "name": w.item.name, "daysRemaining": w.days_remaining}
                for w in get_warranties(state, now)
            ],
        }
    )


# =============================================================================
# Items
# =============================================================================


@app.route("/api/items")
def list_items():
    state = get_store().load_state()
    items = state.find_items(request.args["q"]) if request.args.get("q") else state.items
    return jsonify([item_to_dict(i) for i in items])


@app.route("/api/items", methods=["POST"])
def add_item():
    """Create an item; pass "templates": true to add its starter tasks."""
    data = body()
    name = data.get("name")
    if not name:
        return jsonify({"error": "name is required"}), 400

    now = utc_now()
    lifecycle = get_lifecycle()
    item = lifecycle.add_item(
        name,
        Category.parse(data.get("category", "other")),
        now,
        subtype=data.get("subtype"),
        brand=data.get("brand"),
        model=data.get("model"),
        location=data.get("location"),
        purchase_date=parse_timestamp(data.get("purchaseDate")),
        warranty_expiry=parse_timestamp(data.get("warrantyExpiry")),
        notes=data.get("notes"),
    )
    tasks = []
    if data.get("templates"):
        tasks = lifecycle.add_tasks_from_templates(item.id, now)

    return jsonify({"item": item_to_dict(item), "tasks": [task_to_dict(t) for t in tasks]}), 201


@app.route("/api/items/<item_id>", methods=["PUT"])
def edit_item(item_id: str):
    """Change the fields present in the body."""
    changes = changes_from(body(), ITEM_FIELDS)
    item = get_lifecycle().update_item(item_id, utc_now(), **changes)
    return jsonify(item_to_dict(item))


@app.route("/api/items/<item_id>", methods=["DELETE"])
def delete_item(item_id: str):
    removed = get_lifecycle().delete_item(item_id, utc_now())
    return jsonify({"deletedTasks": [t.id for t in removed]})


@app.route("/api/items/<item_id>/logs")
def item_logs(item_id: str):
    """History for an item, also after the item is deleted."""
    state = get_store().load_state()
    logs = sorted(
        state.get_logs_for_item(item_id), key=lambda log: log.completed_at, reverse=True
    )
    return jsonify([log_to_dict(log) for log in logs])


# =============================================================================
# Tasks
# =============================================================================


@app.route("/api/tasks")
def list_tasks():
    state = get_store().load_state()
    tasks = state.tasks
    item_id = request.args.get("item")
    if item_id:
        tasks = [t for t in tasks if t.item_id == item_id]
    return jsonify([task_to_dict(t) for t in tasks])


@app.route("/api/tasks", methods=["POST"])
def add_task():
    data = body()
    if not data.get("itemId") or not data.get("name"):
        return jsonify({"error": "itemId and name are required"}), 400

    task = get_lifecycle().create_task(
        data["itemId"],
        data["name"],
        int(data.get("intervalDays", 90)),
        utc_now(),
        next_due=parse_timestamp(data.get("nextDue")),
        reminder_days_before=int_or_none(data.get("reminderDaysBefore")),
        priority=Priority.parse(data.get("priority", "medium")),
        description=data.get("description"),
        estimated_cost=data.get("estimatedCost"),
    )
    return jsonify(task_to_dict(task)), 201


@app.route("/api/tasks/<task_id>", methods=["PUT"])
def edit_task(task_id: str):
    """Change the fields present in the body; nextDue only moves when given."""
    changes = changes_from(body(), TASK_FIELDS)
    task = get_lifecycle().edit_task(task_id, utc_now(), **changes)
    return jsonify(task_to_dict(task))


@app.route("/api/tasks/<task_id>/complete", methods=["POST"])
def complete_task(task_id: str):
    """Log a completion and reschedule the task."""
    data = body()
    now = utc_now()
    task, log = get_lifecycle().complete_task(
        task_id,
        parse_timestamp(data.get("completedAt")) or now,
        cost=data.get("cost"),
        provider=data.get("provider"),
        notes=data.get("notes"),
        now=now,
    )
    return jsonify({"task": task_to_dict(task), "log": log_to_dict(log)})


@app.route("/api/tasks/<task_id>/defer", methods=["POST"])
def defer_task(task_id: str):
    days = body().get("days")
    if days is None:
        return jsonify({"error": "days is required"}), 400
    task = get_lifecycle().defer_task(task_id, int(days), utc_now())
    return jsonify(task_to_dict(task))


@app.route("/api/tasks/<task_id>", methods=["DELETE"])
def delete_task(task_id: str):
    task = get_lifecycle().delete_task(task_id, utc_now())
    return jsonify(task_to_dict(task))


# =============================================================================
# Logs, templates, reminders, settings
# =============================================================================


@app.route("/api/logs")
def list_logs():
    state = get_store().load_state()
    return jsonify([log_to_dict(log) for log in state.get_logs_sorted()])


@app.route("/api/templates/<category>")
def list_templates(category: str):
    return jsonify(
        [
            {
                "name": t.name,
                "intervalDays": t.interval_days,
                "priority": t.priority.value,
                "description": t.description,
            }
            for t in get_templates(category)
        ]
    )


@app.route("/api/reminders/reschedule", methods=["POST"])
def reschedule_reminders():
    scheduled = get_lifecycle().reschedule_reminders(utc_now())
    return jsonify(
        [
            {
                "taskId": r.task_id,
                "itemId": r.item_id,
                "fireDate": format_timestamp(r.fire_date),
                "title": r.title,
                "body": r.body,
            }
            for r in scheduled
        ]
    )


@app.route("/api/settings")
def get_settings():
    return jsonify(settings_to_dict(get_store().load_settings()))


@app.route("/api/settings", methods=["PUT"])
def update_settings():
    data = body()
    keys = {
        "notificationsEnabled": "notifications_enabled",
        "defaultReminderDays": "default_reminder_days",
        "darkMode": "dark_mode",
    }
    changes = {keys[k]: v for k, v in data.items() if k in keys}
    settings = get_lifecycle().update_settings(utc_now(), **changes)
    return jsonify(settings_to_dict(settings))


# =============================================================================
# Export / import
# =============================================================================


@app.route("/api/export")
def export():
    return app.response_class(
        export_data(get_store(), utc_now()), mimetype="application/json"
    )


@app.route("/api/import", methods=["POST"])
def import_():
    lifecycle = get_lifecycle()
    counts = import_data(lifecycle.store, request.get_data(as_text=True))
    lifecycle.reschedule_reminders(utc_now())
    logger.info("Imported backup through the web API")
    return jsonify(counts)


if __name__ == "__main__":
    # Run with debug mode for development
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
