"""
order_tracker.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) reporting the dashboard load state.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from order_tracker.api.deps import controller_dep
from order_tracker.services.dashboard import DashboardController

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(controller: DashboardController = Depends(controller_dep)) -> dict[str, str]:
    # A failed order fetch is a user-visible state, not an unready service.
    return {"status": "ready", "load_state": controller.load_state.value}
