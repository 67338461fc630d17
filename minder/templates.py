"""Starter task templates for quick-adding maintenance to a new item."""

import uuid
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple, Optional, Union

from .calculations import add_days
from .category import Category
from .priority import Priority
from .task import MaintenanceTask


class TaskTemplate(NamedTuple):
    name: str
    interval_days: int
    priority: Priority
    description: Optional[str] = None


def new_id() -> str:
    return str(uuid.uuid4())


L, M, H, C = Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL

VEHICLE_TEMPLATES = [
    TaskTemplate("Oil Change", 90, H, "Change engine oil and filter"),
    TaskTemplate("Tire Rotation", 180, M, "Rotate tires for even wear"),
    TaskTemplate("Air Filter Replacement", 365, L, "Replace engine air filter"),
    TaskTemplate("Brake Inspection", 365, H, "Check brake pads and rotors"),
    TaskTemplate("Transmission Fluid", 730, M, "Check/replace transmission fluid"),
    TaskTemplate("Coolant Flush", 730, M, "Flush and replace coolant"),
    TaskTemplate("Battery Check", 365, M, "Test battery health"),
    TaskTemplate("Wiper Blade Replacement", 180, L, "Replace windshield wipers"),
    TaskTemplate("Spark Plugs", 730, M, "Replace spark plugs"),
    TaskTemplate("Cabin Air Filter", 365, L, "Replace cabin air filter"),
    TaskTemplate("Brake Fluid", 730, M, "Flush and replace brake fluid"),
    TaskTemplate("Power Steering Fluid", 730, L, "Check and replace power steering fluid"),
    TaskTemplate("Tire Pressure Check", 30, H, "Check tire pressure and inflate"),
    TaskTemplate("Car Wash", 14, L, "Wash and wax exterior"),
    TaskTemplate("Interior Detail", 90, L, "Deep clean interior"),
]

HOME_TEMPLATES = [
    TaskTemplate("HVAC Filter Change", 90, H, "Replace HVAC air filter"),
    TaskTemplate("Smoke Detector Batteries", 180, C, "Replace smoke detector batteries"),
    TaskTemplate("CO2 Detector Batteries", 180, C, "Replace carbon monoxide detector batteries"),
    TaskTemplate("Gutter Cleaning", 180, M, "Clean gutters and downspouts"),
    TaskTemplate("Water Heater Flush", 365, M, "Drain and flush water heater"),
    TaskTemplate("Dryer Vent Cleaning", 365, H, "Clean dryer vent to prevent fire"),
    TaskTemplate("Pest Control", 90, M, "Pest prevention treatment"),
    TaskTemplate("Roof Inspection", 365, M, "Inspect roof for damage"),
    TaskTemplate("Septic Pump", 1095, H, "Pump septic tank"),
    TaskTemplate("Furnace Inspection", 365, H, "Professional furnace inspection"),
    TaskTemplate("Chimney Sweep", 365, H, "Clean chimney and inspect"),
    TaskTemplate("Exterior Paint", 1825, M, "Repaint exterior walls"),
    TaskTemplate("Deck/Stain", 1095, M, "Reseal and stain deck"),
    TaskTemplate("Window Seals", 365, L, "Check and replace window seals"),
    TaskTemplate("Fire Extinguisher Check", 30, H, "Check fire extinguisher pressure"),
    TaskTemplate("Whole House Fan", 180, L, "Clean and lubricate whole house fan"),
]

APPLIANCE_TEMPLATES = [
    TaskTemplate("Refrigerator Coil Cleaning", 180, M, "Clean condenser coils"),
    TaskTemplate("Dishwasher Filter Clean", 30, L, "Clean dishwasher filter"),
    TaskTemplate("Washing Machine Clean", 30, L, "Run cleaning cycle"),
    TaskTemplate("Oven Deep Clean", 90, L, "Deep clean oven interior"),
    TaskTemplate("Range Hood Filter Clean", 90, L, "Clean or replace range hood filter"),
    TaskTemplate("Microwave Clean", 30, L, "Clean microwave interior"),
    TaskTemplate("Water Filter Replacement", 180, M, "Replace water filter"),
    TaskTemplate("AC Unit Filter", 30, H, "Replace AC unit filter"),
    TaskTemplate("Garage Door Service", 365, M, "Lubricate and test garage door"),
    TaskTemplate("Pool Pump Filter", 30, M, "Clean or replace pool filter"),
    TaskTemplate("Hot Tub/Spa Maintenance", 30, H, "Test water chemistry and clean"),
    TaskTemplate("Vacuum Refrigerator Coils", 180, L, "Vacuum behind refrigerator"),
    TaskTemplate("Dishwasher Deep Clean", 90, L, "Run dishwasher cleaner"),
    TaskTemplate("Washing Machine Drain Filter", 90, M, "Clean washing machine drain filter"),
    TaskTemplate("Coffee Maker Descale", 90, L, "Descale coffee maker"),
]

TEMPLATES: Dict[Category, List[TaskTemplate]] = {
    Category.VEHICLE: VEHICLE_TEMPLATES,
    Category.HOME: HOME_TEMPLATES,
    Category.APPLIANCE: APPLIANCE_TEMPLATES,
}


def get_templates(
    category, table: Optional[Dict[Category, List[TaskTemplate]]] = None
) -> List[TaskTemplate]:
    """Templates for a category; unknown categories have none."""
    if table is None:
        table = TEMPLATES
    try:
        category = Category.parse(category)
    except ValueError:
        return []
    return list(table.get(category, []))


def expand_templates(
    category,
    templates: Union[None, List[TaskTemplate], Dict[Category, List[TaskTemplate]]],
    reminder_days_before: int,
    now: datetime,
    item_id: Optional[str] = None,
    make_id: Callable[[], str] = new_id,
) -> List[MaintenanceTask]:
    """
    Create one new task per template, in template order.

    Each task is due interval_days from now and uses the caller's
    reminder lead time. templates may be a plain list or a category-keyed
    table; None uses the built-in table.
    """
    if templates is None or isinstance(templates, dict):
        templates = get_templates(category, templates)
    return [
        MaintenanceTask(
            id=make_id(),
            item_id=item_id,
            name=template.name,
            description=template.description,
            interval_days=template.interval_days,
            next_due=add_days(now, template.interval_days),
            reminder_days_before=reminder_days_before,
            priority=template.priority,
            last_completed=None,
            is_active=True,
        )
        for template in templates
    ]
