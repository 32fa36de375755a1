"""
order_tracker.api.deps

FastAPI dependency wiring for the API layer.
"""

from __future__ import annotations

from fastapi import Request

from order_tracker.services.dashboard import DashboardController


def controller_dep(request: Request) -> DashboardController:
    # The controller is created in the app lifespan (see `order_tracker.api.app`).
    return request.app.state.controller  # type: ignore[attr-defined]
