"""
order_tracker.api.routers.orders

Per-order endpoints over the currently loaded collection.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from starlette.status import HTTP_404_NOT_FOUND

from order_tracker.api.deps import controller_dep
from order_tracker.domain.buckets import bucket_for
from order_tracker.services.dashboard import DashboardController

router = APIRouter(prefix="/v1/orders", tags=["orders"])


class LineItemResponse(BaseModel):
    name: str
    quantity: int
    total: Decimal | None


class OrderDetailResponse(BaseModel):
    id: str
    number: str | None
    status: str | None
    bucket: str | None
    date_created: datetime | None
    customer: str | None
    customer_id: str | None
    rider: str
    address: str | None
    area: str | None
    payment_method: str | None
    currency: str | None
    total: Decimal | None
    line_items: list[LineItemResponse]


class DirectionsResponse(BaseModel):
    order_id: str
    destination: str


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    controller: DashboardController = Depends(controller_dep),
) -> OrderDetailResponse:
    order = controller.find_order(order_id)
    if order is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Order not found")
    bucket = bucket_for(order.status)
    return OrderDetailResponse(
        id=order.key,
        number=order.number,
        status=order.status,
        bucket=bucket.value if bucket is not None else None,
        date_created=order.date_created,
        customer=order.billing.first_name,
        customer_id=str(order.customer_id) if order.customer_id is not None else None,
        rider=order.rider_display,
        address=order.shipping.address_1,
        area=controller.area_for(order.key),
        payment_method=order.payment_method_title,
        currency=order.currency,
        total=order.total,
        line_items=[
            LineItemResponse(name=i.name, quantity=i.quantity, total=i.total)
            for i in order.line_items
        ],
    )


@router.get("/{order_id}/directions", response_model=DirectionsResponse)
async def get_directions(
    order_id: str,
    controller: DashboardController = Depends(controller_dep),
) -> DirectionsResponse:
    # The UI turns the destination into a map link; link building is not done here.
    destination = controller.directions_target(order_id)
    if destination is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="No coordinates for order")
    return DirectionsResponse(order_id=order_id, destination=destination)
