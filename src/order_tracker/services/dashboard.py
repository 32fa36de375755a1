"""
order_tracker.services.dashboard

Dashboard controller: the single owner of loaded orders and selection state.

Responsibilities:
- Track the active time window, active bucket and load state.
- Re-fetch on window change / retry / refresh, tagging each fetch with a generation.
- Apply only the newest generation's result (last-window-wins).
- Kick off area enrichment for freshly loaded orders without gating the load.
- Expose an immutable read model for the presentation layer.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from order_tracker.domain.buckets import (
    DEFAULT_BUCKET,
    Bucket,
    classify,
    count_by_bucket,
    parse_bucket,
)
from order_tracker.domain.models import Order
from order_tracker.domain.windows import DEFAULT_WINDOW, TimeWindow, parse_window, resolve_boundary
from order_tracker.errors import FetchError
from order_tracker.observability.logging import get_logger
from order_tracker.services.area_resolver import AreaResolver

log = get_logger(__name__)


class OrderFetcher(Protocol):
    async def fetch_orders(self, after: datetime) -> list[Order]: ...


class LoadState(enum.StrEnum):
    idle = "idle"
    loading = "loading"
    loaded = "loaded"
    failed = "failed"


@dataclass(frozen=True, slots=True)
class DashboardView:
    load_state: LoadState
    error_message: str | None
    window: TimeWindow
    bucket: Bucket
    generation: int
    visible_orders: tuple[Order, ...]
    bucket_counts: dict[Bucket, int] = field(default_factory=dict)
    area_by_order_id: dict[str, str] = field(default_factory=dict)


class DashboardController:
    def __init__(
        self,
        *,
        source: OrderFetcher,
        resolver: AreaResolver,
        window: str | TimeWindow = DEFAULT_WINDOW,
        bucket: str | Bucket = DEFAULT_BUCKET,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._source = source
        self._resolver = resolver
        self._clock = clock

        self._window = parse_window(window)
        self._bucket = parse_bucket(bucket)
        self._load_state = LoadState.idle
        self._error: str | None = None
        self._orders: tuple[Order, ...] = ()

        self._generation = 0
        self._fetches: set[asyncio.Task[None]] = set()

    @property
    def window(self) -> TimeWindow:
        return self._window

    @property
    def bucket(self) -> Bucket:
        return self._bucket

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def orders(self) -> tuple[Order, ...]:
        return self._orders

    # -- commands -------------------------------------------------------------

    def start(self) -> asyncio.Task[None]:
        return self._reload(reason="start")

    def select_window(self, name: str | TimeWindow) -> asyncio.Task[None] | None:
        window = parse_window(name)
        if window is self._window and self._load_state is not LoadState.idle:
            return None
        log.info("window_selected", window=window.value, previous=self._window.value)
        self._window = window
        return self._reload(reason="window")

    def select_bucket(self, bucket_id: str | Bucket) -> None:
        # Read-side filter only; never triggers a fetch.
        self._bucket = parse_bucket(bucket_id)
        log.debug("bucket_selected", bucket=self._bucket.value)

    def retry(self) -> asyncio.Task[None]:
        return self._reload(reason="retry")

    def refresh(self) -> asyncio.Task[None]:
        # Same window: areas already resolved for returning orders are reused.
        return self._reload(reason="refresh", keep_areas=True)

    def find_order(self, order_id: int | str) -> Order | None:
        key = str(order_id)
        for order in self._orders:
            if order.key == key:
                return order
        return None

    def area_for(self, order_id: int | str) -> str | None:
        return self._resolver.areas().get(str(order_id))

    def directions_target(self, order_id: int | str) -> str | None:
        """
        Destination for an external map link, or None when the order has no coordinates.

        Building and opening the link belongs to the presentation layer.
        """

        order = self.find_order(order_id)
        if order is None:
            return None
        return order.destination

    # -- read model -----------------------------------------------------------

    def snapshot(self) -> DashboardView:
        return DashboardView(
            load_state=self._load_state,
            error_message=self._error,
            window=self._window,
            bucket=self._bucket,
            generation=self._generation,
            visible_orders=tuple(classify(self._orders, self._bucket)),
            bucket_counts=count_by_bucket(self._orders),
            area_by_order_id=self._resolver.areas(),
        )

    # -- internals ------------------------------------------------------------

    def _reload(self, *, reason: str, keep_areas: bool = False) -> asyncio.Task[None]:
        self._generation += 1
        generation = self._generation
        window = self._window

        self._load_state = LoadState.loading
        self._error = None
        self._orders = ()
        self._resolver.begin_generation(generation, keep_resolved=keep_areas or None)

        log.info("orders_fetch_started", generation=generation, window=window.value, reason=reason)
        task = asyncio.get_running_loop().create_task(
            self._load(generation, window), name=f"fetch:{generation}"
        )
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)
        return task

    async def _load(self, generation: int, window: TimeWindow) -> None:
        load_log = log.bind(generation=generation, window=window.value)
        boundary = resolve_boundary(window, self._clock())
        try:
            orders = await self._source.fetch_orders(boundary)
        except FetchError as e:
            if generation != self._generation:
                load_log.info("orders_fetch_failure_ignored_stale")
                return
            self._load_state = LoadState.failed
            self._error = e.message
            self._orders = ()
            load_log.warning("orders_fetch_failed", status_code=e.status_code, error=e.message)
            return

        if generation != self._generation:
            load_log.info("orders_result_discarded_stale", current_generation=self._generation)
            return

        self._orders = tuple(orders)
        self._load_state = LoadState.loaded
        self._resolver.retain_only([o.key for o in self._orders])
        load_log.info("orders_loaded", count=len(orders))

        for order in self._orders:
            self._resolver.resolve_area(order.id, order.coordinates)

    async def poll(
        self,
        interval_seconds: float,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Re-fetch the active window every `interval_seconds` until cancelled.
        """

        while True:
            await sleep(interval_seconds)
            self.refresh()

    async def wait_idle(self) -> None:
        # Settles every fetch issued so far, then every enrichment they scheduled.
        while self._fetches:
            await asyncio.gather(*list(self._fetches), return_exceptions=True)
        await self._resolver.drain()

    async def aclose(self) -> None:
        for task in list(self._fetches):
            task.cancel()
        await asyncio.gather(*list(self._fetches), return_exceptions=True)
        self._fetches.clear()
        await self._resolver.aclose()


# --- Module Notes -----------------------------------------------------------
# Stale fetches are not cancelled; their results are dropped by the generation check.
# Enrichment tasks carry the same generation; AreaResolver cancels superseded ones.
