"""Priority enum with a fixed total order."""

from enum import Enum


class Priority(Enum):
    """Task priority, ordered low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, value) -> "Priority":
        """Case-insensitive lookup by value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown priority '{value}'") from None

    @property
    def rank(self) -> int:
        return _ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank < other.rank


_ORDER = [Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL]
