"""Status enum for task urgency levels."""

from enum import Enum


class Status(Enum):
    """Task status categories. Lower value = more urgent."""

    OVERDUE = 1
    DUE_SOON = 2
    UPCOMING = 3
    INACTIVE = 4  # Task is switched off and never reported as due
