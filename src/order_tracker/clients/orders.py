"""
order_tracker.clients.orders

Order source client.

Responsibilities:
- Perform one authenticated, bounded GET against the commerce order API.
- Map transport errors and non-success responses to `FetchError`.
- Parse rows into `Order` models, dropping only rows that cannot be validated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from order_tracker.domain.models import Order
from order_tracker.domain.windows import format_boundary
from order_tracker.errors import ConfigError, FetchError
from order_tracker.observability.logging import get_logger
from order_tracker.settings import Settings

log = get_logger(__name__)

FETCH_FAILED = "Failed to fetch orders"


@dataclass(frozen=True, slots=True)
class OrderSourceConfig:
    """
    Explicit order source configuration.

    Required: `base_url` (full orders endpoint) and `token` (bearer credential).
    """

    base_url: str
    token: str
    per_page: int = 100
    timeout_seconds: float = 15.0

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigError("order source base_url is required")
        if not self.token:
            raise ConfigError("order source token is required")

    @classmethod
    def from_settings(cls, settings: Settings) -> OrderSourceConfig:
        return cls(
            base_url=settings.orders_api_url,
            token=settings.orders_api_token,
            per_page=settings.orders_per_page,
            timeout_seconds=settings.http_timeout_seconds,
        )

    def __repr__(self) -> str:
        return f"OrderSourceConfig(base_url={self.base_url!r}, per_page={self.per_page})"


class OrderSource:
    """
    No automatic retries: every call is exactly one request. Retrying is a user decision.
    """

    def __init__(self, *, config: OrderSourceConfig, http: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http

    def _authz(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.token}"}

    async def fetch_orders(self, after: datetime) -> list[Order]:
        params = {"after": format_boundary(after), "per_page": self._config.per_page}
        try:
            r = await self._http.get(
                self._config.base_url,
                params=params,
                headers=self._authz(),
                timeout=self._config.timeout_seconds,
            )
        except httpx.HTTPError as e:
            log.warning("orders_fetch_transport_error", after=params["after"], error=str(e))
            raise FetchError(FETCH_FAILED) from e

        if not r.is_success:
            log.warning("orders_fetch_rejected", after=params["after"], status_code=r.status_code)
            raise FetchError(FETCH_FAILED, status_code=r.status_code)

        try:
            payload = r.json()
        except ValueError as e:
            raise FetchError(f"{FETCH_FAILED}: response is not JSON") from e
        if not isinstance(payload, list):
            raise FetchError(f"{FETCH_FAILED}: expected a JSON array of orders")

        return parse_orders(payload)


def parse_orders(rows: list[Any]) -> list[Order]:
    orders: list[Order] = []
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            log.warning("order_row_dropped", index=idx, reason="not an object")
            continue
        try:
            orders.append(Order.model_validate(row))
        except ValidationError as e:
            log.warning(
                "order_row_dropped",
                index=idx,
                order_id=row.get("id"),
                reason=f"{e.error_count()} validation error(s)",
            )
    return orders


# --- Module Notes -----------------------------------------------------------
# Pagination beyond the first page is out of scope: `per_page` caps what the dashboard sees.
