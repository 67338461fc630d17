"""Category enum for tracked assets."""

from enum import Enum

# Older data files spell vehicles as "car"
_ALIASES = {"car": "vehicle"}


class Category(Enum):
    """The closed set of asset categories."""

    VEHICLE = "vehicle"
    HOME = "home"
    APPLIANCE = "appliance"
    OTHER = "other"

    @classmethod
    def parse(cls, value) -> "Category":
        """Case-insensitive lookup by value, accepting legacy spellings."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown category '{value}'") from None

    @property
    def label(self) -> str:
        return self.value.capitalize()
