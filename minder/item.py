"""Item class for tracked assets."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .category import Category


@dataclass
class Item:
    """A tracked physical object: a vehicle, home system or appliance."""

    id: str
    name: str
    category: Category
    created_at: datetime
    updated_at: datetime
    subtype: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    location: Optional[str] = None
    purchase_date: Optional[datetime] = None
    warranty_expiry: Optional[datetime] = None
    notes: Optional[str] = None

    def __post_init__(self):
        self.category = Category.parse(self.category)

    @property
    def display_name(self) -> str:
        """Name with brand and model when known."""
        details = " ".join(p for p in (self.brand, self.model) if p)
        return f"{self.name} ({details})" if details else self.name
