"""
order_tracker.api.routers.dashboard

Read model and commands for the dashboard UI.

Responsibilities:
- Serve the current dashboard snapshot (load state, visible orders, counts, areas).
- Accept window/bucket selection and retry commands.
- List the window and bucket options the UI renders as filters and tabs.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from order_tracker.api.deps import controller_dep
from order_tracker.domain.buckets import BUCKETS, count_by_bucket
from order_tracker.domain.models import Order
from order_tracker.domain.windows import WINDOWS
from order_tracker.services.dashboard import DashboardController, DashboardView

router = APIRouter(prefix="/v1", tags=["dashboard"])


class WindowSelection(BaseModel):
    window: str


class BucketSelection(BaseModel):
    bucket: str


class WindowOption(BaseModel):
    id: str
    label: str
    lookback_days: int
    description: str


class BucketOption(BaseModel):
    id: str
    label: str
    statuses: list[str]
    count: int


class OrderCard(BaseModel):
    id: str
    number: str | None
    status: str | None
    date_created: datetime | None
    customer: str | None
    rider: str
    distance_km: Any
    eta_minutes: Any
    address: str | None
    area: str | None
    item_count: int
    payment_method: str | None
    total: Decimal | None
    currency: str | None
    has_directions: bool


class DashboardResponse(BaseModel):
    load_state: str
    error_message: str | None
    window: str
    window_label: str
    window_description: str
    bucket: str
    generation: int
    visible_count: int
    visible_orders: list[OrderCard]
    bucket_counts: dict[str, int]
    area_by_order_id: dict[str, str]


def _card(order: Order, areas: dict[str, str]) -> OrderCard:
    return OrderCard(
        id=order.key,
        number=order.number,
        status=order.status,
        date_created=order.date_created,
        customer=order.billing.first_name,
        rider=order.rider_display,
        distance_km=order.distance_km,
        eta_minutes=order.eta_minutes,
        address=order.shipping.address_1,
        area=areas.get(order.key),
        item_count=order.item_count,
        payment_method=order.payment_method_title,
        total=order.total,
        currency=order.currency,
        has_directions=order.destination is not None,
    )


def render_view(view: DashboardView) -> DashboardResponse:
    window = WINDOWS[view.window]
    return DashboardResponse(
        load_state=view.load_state.value,
        error_message=view.error_message,
        window=window.window.value,
        window_label=window.label,
        window_description=window.description,
        bucket=view.bucket.value,
        generation=view.generation,
        visible_count=len(view.visible_orders),
        visible_orders=[_card(o, view.area_by_order_id) for o in view.visible_orders],
        bucket_counts={b.value: n for b, n in view.bucket_counts.items()},
        area_by_order_id=dict(view.area_by_order_id),
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    controller: DashboardController = Depends(controller_dep),
) -> DashboardResponse:
    return render_view(controller.snapshot())


@router.post("/dashboard/window", response_model=DashboardResponse, status_code=202)
async def select_window(
    body: WindowSelection,
    controller: DashboardController = Depends(controller_dep),
) -> DashboardResponse:
    # Returns immediately in the loading state; poll GET /v1/dashboard for the result.
    controller.select_window(body.window)
    return render_view(controller.snapshot())


@router.post("/dashboard/bucket", response_model=DashboardResponse)
async def select_bucket(
    body: BucketSelection,
    controller: DashboardController = Depends(controller_dep),
) -> DashboardResponse:
    controller.select_bucket(body.bucket)
    return render_view(controller.snapshot())


@router.post("/dashboard/retry", response_model=DashboardResponse, status_code=202)
async def retry(
    controller: DashboardController = Depends(controller_dep),
) -> DashboardResponse:
    controller.retry()
    return render_view(controller.snapshot())


@router.get("/windows", response_model=list[WindowOption])
async def list_windows() -> list[WindowOption]:
    return [
        WindowOption(
            id=spec.window.value,
            label=spec.label,
            lookback_days=spec.lookback_days,
            description=spec.description,
        )
        for spec in WINDOWS.values()
    ]


@router.get("/buckets", response_model=list[BucketOption])
async def list_buckets(
    controller: DashboardController = Depends(controller_dep),
) -> list[BucketOption]:
    counts = count_by_bucket(controller.orders)
    return [
        BucketOption(
            id=spec.bucket.value,
            label=spec.label,
            statuses=sorted(spec.statuses),
            count=counts[spec.bucket],
        )
        for spec in BUCKETS.values()
    ]


# --- Module Notes -----------------------------------------------------------
# Selection commands are fire-and-forget on the server side: the fetch runs as a
# background task owned by the controller, not by the request.
