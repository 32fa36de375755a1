"""
order_tracker.domain.models

Order data model as returned by the commerce API.

Responsibilities:
- Parse raw order rows leniently: only `id` is required, everything else may be absent.
- Preserve unknown source fields opaquely (extra="allow").
- Expose the metadata lookups the dashboard cards need (coordinates, distance, ETA).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NOT_AVAILABLE = "N/A"

COORDINATES_KEY = "map_coordinates"
DISTANCE_KEY = "customer_store_distance"
ETA_KEY = "expected_time"


class _SourceModel(BaseModel):
    # Orders are immutable once fetched; a refetch replaces them wholesale.
    model_config = ConfigDict(frozen=True, extra="allow", coerce_numbers_to_str=True)


class MetaItem(_SourceModel):
    key: str
    value: Any = None


class LineItem(_SourceModel):
    id: int | str | None = None
    name: str = ""
    quantity: int = 0
    total: Decimal | None = None


class Billing(_SourceModel):
    first_name: str | None = None


class Shipping(_SourceModel):
    address_1: str | None = None


class Order(_SourceModel):
    id: int | str
    number: str | None = None
    status: str | None = None
    date_created: datetime | None = None
    total: Decimal | None = None
    currency: str | None = None
    payment_method_title: str | None = None
    billing: Billing = Field(default_factory=Billing)
    shipping: Shipping = Field(default_factory=Shipping)
    line_items: list[LineItem] = Field(default_factory=list)
    meta_data: list[MetaItem] = Field(default_factory=list)
    rider_name: str | None = None
    customer_id: int | str | None = None

    @property
    def key(self) -> str:
        # Cache and lookup key; source ids arrive as ints but are compared as strings.
        return str(self.id)

    def metadata_value(self, key: str, default: Any = NOT_AVAILABLE) -> Any:
        for item in self.meta_data:
            if item.key == key:
                return item.value
        return default

    @property
    def coordinates(self) -> str | None:
        value = self.metadata_value(COORDINATES_KEY, default=None)
        if value is None:
            return None
        return str(value)

    @property
    def destination(self) -> str | None:
        # Usable map destination: the coordinates, unless blank or the "N/A" marker.
        coords = self.coordinates
        if coords is None or coords.strip() in ("", NOT_AVAILABLE):
            return None
        return coords.strip()

    @property
    def distance_km(self) -> Any:
        return self.metadata_value(DISTANCE_KEY)

    @property
    def eta_minutes(self) -> Any:
        return self.metadata_value(ETA_KEY)

    @property
    def rider_display(self) -> str:
        return self.rider_name or "Not Assigned"

    @property
    def item_count(self) -> int:
        return len(self.line_items)


# --- Module Notes -----------------------------------------------------------
# Field names mirror the WooCommerce-style REST payload so rows validate without mapping.
