"""
tests.fakes

Test doubles and payload builders shared across the test-suite.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

from order_tracker.domain.models import Order
from order_tracker.errors import EnrichmentError

NOW = datetime(2026, 10, 18, 15, 30, 45)


def order_row(
    order_id: int,
    *,
    status: str = "pending",
    coords: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    meta: list[dict[str, Any]] = [
        {"key": "customer_store_distance", "value": "4.2"},
        {"key": "expected_time", "value": "25"},
    ]
    if coords is not None:
        meta.append({"key": "map_coordinates", "value": coords})
    row: dict[str, Any] = {
        "id": order_id,
        "number": str(1000 + order_id),
        "status": status,
        "date_created": "2026-10-18T10:15:00",
        "total": "1250.00",
        "currency": "PKR",
        "payment_method_title": "Cash on delivery",
        "billing": {"first_name": "Ayesha"},
        "shipping": {"address_1": "Block 5, Clifton"},
        "line_items": [{"id": 1, "name": "Biryani", "quantity": 2, "total": "1250.00"}],
        "meta_data": meta,
        "customer_id": 77,
    }
    row.update(extra)
    return row


def make_order(order_id: int, **kwargs: Any) -> Order:
    return Order.model_validate(order_row(order_id, **kwargs))


class FakeGeocoder:
    def __init__(
        self,
        address: dict[str, Any] | None = None,
        *,
        error: EnrichmentError | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.address = address if address is not None else {"suburb": "Clifton"}
        self.error = error
        self.gate = gate
        self.calls: list[tuple[float, float]] = []
        self.in_flight = 0
        self.peak = 0

    async def reverse(self, *, lat: float, lon: float) -> dict[str, Any]:
        self.calls.append((lat, lon))
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.error is not None:
                raise self.error
            return dict(self.address)
        finally:
            self.in_flight -= 1


class FakeSource:
    """
    Order source keyed by fetch boundary. A result may be an exception to raise, and a
    boundary may be gated so tests control when its response "arrives".
    """

    def __init__(self, responses: dict[datetime, Any]) -> None:
        self.responses = responses
        self.gates: dict[datetime, asyncio.Event] = {}
        self.calls: list[datetime] = []

    async def fetch_orders(self, after: datetime) -> list[Order]:
        self.calls.append(after)
        gate = self.gates.get(after)
        if gate is not None:
            await gate.wait()
        result = self.responses[after]
        if isinstance(result, Exception):
            raise result
        return list(result)


async def no_sleep(_: float) -> None:
    await asyncio.sleep(0)


# --- Module Notes -----------------------------------------------------------
# Geocoder fakes report the peak number of concurrent reverse() calls.
