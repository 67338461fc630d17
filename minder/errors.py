"""Exceptions raised by the scheduling engine and its collaborators."""


class MinderError(Exception):
    """Base class for recoverable maintenance-tracking errors."""


class InvalidInterval(MinderError, ValueError):
    """A negative or non-integer interval or deferral was supplied."""

    def __init__(self, days):
        super().__init__(f"Interval must be a whole number of days, zero or more, got {days!r}")
        self.days = days


class NotFound(MinderError, LookupError):
    """A mutation targeted an item or task that does not exist."""

    def __init__(self, kind: str, ident: str):
        super().__init__(f"{kind} '{ident}' not found")
        self.kind = kind
        self.ident = ident


class InvalidImportFormat(MinderError):
    """An import payload is missing its required collections."""
