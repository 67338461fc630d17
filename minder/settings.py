"""Settings class for user preferences."""

from dataclasses import dataclass

DEFAULT_REMINDER_DAYS = 3


@dataclass
class Settings:
    """Process-wide preferences, persisted on every change."""

    notifications_enabled: bool = True
    default_reminder_days: int = DEFAULT_REMINDER_DAYS
    dark_mode: bool = True
