"""
order_tracker.services.area_resolver

Memoizing, staggered enrichment of orders with a human-readable delivery area.

Responsibilities:
- Parse raw "lat,lon" coordinate strings.
- Keep at most one entry (and one in-flight lookup) per order id.
- Delay each lookup so a page of orders does not hit the geocoder all at once.
- Pick the area label with a fixed field precedence and a fallback label.
- Discard results that belong to a superseded fetch generation.
"""

from __future__ import annotations

import asyncio
import enum
import math
from collections.abc import Awaitable, Callable, Collection, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from order_tracker.domain.models import NOT_AVAILABLE
from order_tracker.errors import EnrichmentError
from order_tracker.observability.logging import get_logger

log = get_logger(__name__)

# Most specific first; the first non-empty field wins.
AREA_FIELDS: tuple[str, ...] = ("suburb", "neighbourhood", "city_district", "city")


class ReverseGeocoder(Protocol):
    async def reverse(self, *, lat: float, lon: float) -> dict[str, Any]: ...


class AreaStatus(enum.StrEnum):
    pending = "pending"
    resolved = "resolved"


@dataclass(slots=True)
class AreaCacheEntry:
    status: AreaStatus
    generation: int
    area: str | None = None


def parse_coordinates(raw: str) -> tuple[float, float]:
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 2:
        raise EnrichmentError(f"expected 'lat,lon', got {raw!r}")
    try:
        lat, lon = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise EnrichmentError(f"non-numeric coordinates: {raw!r}") from e
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise EnrichmentError(f"non-finite coordinates: {raw!r}")
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise EnrichmentError(f"coordinates out of range: {raw!r}")
    return lat, lon


def pick_area(address: Mapping[str, Any], *, fallback: str) -> str:
    for field in AREA_FIELDS:
        value = address.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return fallback


class AreaResolver:
    """
    Area cache keyed by order id.

    Entries move pending -> resolved at most once. A failed lookup leaves the entry
    pending for the rest of the generation, which also blocks re-scheduling it.
    """

    def __init__(
        self,
        *,
        geocoder: ReverseGeocoder,
        delay_seconds: float = 1.0,
        fallback_label: str = "Location Linked",
        retain_resolved: bool = False,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._geocoder = geocoder
        self._delay = delay_seconds
        self._fallback = fallback_label
        self._retain_resolved = retain_resolved
        self._sleep = sleep

        self._entries: dict[str, AreaCacheEntry] = {}
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._in_flight: dict[str, asyncio.Task[None]] = {}

    @property
    def generation(self) -> int:
        return self._generation

    def entry(self, order_id: int | str) -> AreaCacheEntry | None:
        return self._entries.get(str(order_id))

    def areas(self) -> dict[str, str]:
        return {
            key: entry.area
            for key, entry in self._entries.items()
            if entry.status is AreaStatus.resolved and entry.area is not None
        }

    def begin_generation(self, generation: int, *, keep_resolved: bool | None = None) -> None:
        """
        Called when the order collection is about to be replaced.

        Lookups still in flight are cancelled and pending entries go with them.
        Resolved entries survive when `keep_resolved` (defaulting to the
        `retain_resolved` setting) is true.
        """

        self._generation = generation
        for task in list(self._tasks):
            task.cancel()
        if self._retain_resolved if keep_resolved is None else keep_resolved:
            self._entries = {
                k: e for k, e in self._entries.items() if e.status is AreaStatus.resolved
            }
        else:
            self._entries = {}

    def retain_only(self, order_ids: Collection[str]) -> None:
        # Drop carried-over entries for orders that did not come back in the new collection.
        keep = set(order_ids)
        self._entries = {k: e for k, e in self._entries.items() if k in keep}

    def resolve_area(
        self, order_id: int | str, raw_coordinates: str | None
    ) -> asyncio.Task[None] | None:
        """
        Schedule a background lookup for `order_id`, or do nothing.

        Returns the scheduled task (for callers that want to await it) or None when the
        call was skipped: no coordinates, already known, or malformed input.
        """

        if raw_coordinates is None:
            return None
        raw = str(raw_coordinates).strip()
        if not raw or raw == NOT_AVAILABLE:
            return None

        key = str(order_id)
        if key in self._entries:
            return None

        try:
            lat, lon = parse_coordinates(raw)
        except EnrichmentError as e:
            log.warning("area_coordinates_malformed", order_id=key, error=str(e))
            return None

        generation = self._generation
        self._entries[key] = AreaCacheEntry(status=AreaStatus.pending, generation=generation)
        previous = self._in_flight.get(key)
        task = asyncio.get_running_loop().create_task(
            self._lookup(key, lat, lon, generation, previous), name=f"area:{key}:{generation}"
        )
        self._tasks.add(task)
        self._in_flight[key] = task
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(lambda t: self._forget(key, t))
        log.debug("area_lookup_scheduled", order_id=key, generation=generation)
        return task

    def _forget(self, key: str, task: asyncio.Task[None]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _lookup(
        self,
        key: str,
        lat: float,
        lon: float,
        generation: int,
        previous: asyncio.Task[None] | None,
    ) -> None:
        lookup_log = log.bind(order_id=key, generation=generation)
        # A superseded lookup for the same order may still be unwinding its request.
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        await self._sleep(self._delay)
        if generation != self._generation:
            lookup_log.debug("area_lookup_skipped_stale")
            return

        try:
            address = await self._geocoder.reverse(lat=lat, lon=lon)
        except EnrichmentError as e:
            lookup_log.warning("area_lookup_failed", error=str(e))
            return

        entry = self._entries.get(key)
        if generation != self._generation or entry is None or entry.generation != generation:
            lookup_log.info("area_result_discarded_stale")
            return
        if entry.status is AreaStatus.resolved:
            return

        entry.area = pick_area(address, fallback=self._fallback)
        entry.status = AreaStatus.resolved
        lookup_log.info("area_resolved", area=entry.area)

    async def drain(self) -> None:
        # Wait for every lookup scheduled so far (tests and graceful shutdown).
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
        self._in_flight.clear()


# --- Module Notes -----------------------------------------------------------
# Backpressure is a fixed per-lookup delay, not a shared limiter: N visible orders still
# produce up to N concurrent lookups, each merely shifted by `delay_seconds`.
