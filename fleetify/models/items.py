"""Table model for items."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, List, Optional

from fleetify.migration.registry import SeedRegistry
from fleetify.models.base import TableModel, db_field


class Items(TableModel):
    """Row of the items table (stock-keeping units used in purchasing)."""

    table_name: ClassVar[str] = "items"

    items_id: Optional[str] = db_field("items_id", default=None)
    name: str = db_field("name,notnull,unique")
    stock: int = db_field("stock", default=0)
    price: float = db_field("price,notnull")
    category: Optional[str] = db_field("category", default=None)
    unit: Optional[str] = db_field("unit", default=None)
    min_stock: int = db_field("min_stock", default=0)

    # Timestamps
    created_timestamp: Optional[datetime] = db_field("created_timestamp", default=None)
    updated_timestamp: Optional[datetime] = db_field("updated_timestamp", default=None)


_ITEMS = [
    # name, stock, price, category, unit, min_stock
    ("Engine Oil 5W-30", 50, 150000, "oil", "liter", 10),
    ("Engine Oil 10W-40", 45, 140000, "oil", "liter", 10),
    ("Brake Pad Front", 30, 250000, "parts", "set", 5),
    ("Brake Pad Rear", 25, 200000, "parts", "set", 5),
    ("Air Filter", 40, 75000, "parts", "pcs", 10),
    ("Fuel Filter", 35, 85000, "parts", "pcs", 10),
    ("Tire 205/55R16", 20, 800000, "tire", "pcs", 4),
    ("Tire 215/60R16", 18, 850000, "tire", "pcs", 4),
    ("Battery 12V 60Ah", 15, 1200000, "battery", "pcs", 3),
    ("Battery 12V 70Ah", 12, 1400000, "battery", "pcs", 3),
    ("Spark Plug", 60, 45000, "parts", "pcs", 20),
    ("Radiator Coolant", 30, 95000, "oil", "liter", 10),
    ("Windshield Wiper", 25, 55000, "parts", "set", 5),
    ("Headlight Bulb H4", 20, 125000, "parts", "pcs", 5),
    ("Brake Fluid", 35, 65000, "oil", "liter", 10),
]


def seed_items() -> List[Items]:
    return [
        Items(name=name, stock=stock, price=price, category=category, unit=unit, min_stock=min_stock)
        for name, stock, price, category, unit, min_stock in _ITEMS
    ]


def register(registry: SeedRegistry) -> None:
    registry.register("Items", seed_items)
