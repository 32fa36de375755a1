"""
tests.test_area_resolver

Area enrichment: pending/resolved lifecycle, generation filtering and the geocoding client.

Responsibilities:
- At most one lookup per order id, staggered by the configured delay.
- Results from superseded generations never reach the cache.
- Lookups for the same order never overlap.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from order_tracker.clients.geocoding import GeocodingClient
from order_tracker.errors import EnrichmentError
from order_tracker.services.area_resolver import (
    AreaResolver,
    AreaStatus,
    parse_coordinates,
    pick_area,
)

from .fakes import FakeGeocoder, no_sleep

COORDS = "24.8607,67.0011"


def _resolver(geocoder: FakeGeocoder, **kwargs) -> AreaResolver:
    return AreaResolver(geocoder=geocoder, delay_seconds=1.0, sleep=no_sleep, **kwargs)


@pytest.mark.asyncio
async def test_suburb_becomes_area(geocoder: FakeGeocoder) -> None:
    resolver = _resolver(geocoder)
    task = resolver.resolve_area(1, COORDS)
    assert task is not None
    await task

    assert geocoder.calls == [(24.8607, 67.0011)]
    assert resolver.areas() == {"1": "Clifton"}


@pytest.mark.asyncio
async def test_same_order_resolves_once(geocoder: FakeGeocoder) -> None:
    resolver = _resolver(geocoder)
    resolver.resolve_area(1, COORDS)
    assert resolver.resolve_area(1, COORDS) is None
    await resolver.drain()
    assert resolver.resolve_area("1", COORDS) is None
    await resolver.drain()

    assert len(geocoder.calls) == 1


@pytest.mark.asyncio
async def test_empty_address_uses_fallback_label() -> None:
    resolver = _resolver(FakeGeocoder({}), fallback_label="Location Linked")
    await resolver.resolve_area(1, COORDS)

    entry = resolver.entry(1)
    assert entry is not None
    assert entry.status is AreaStatus.resolved
    assert entry.area == "Location Linked"


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["not-a-coord", "24.86", "1,2,3", "abc,def", "95.0,10.0", "nan,1"])
async def test_malformed_coordinates_make_no_call(raw: str, geocoder: FakeGeocoder) -> None:
    resolver = _resolver(geocoder)
    assert resolver.resolve_area(1, raw) is None
    await resolver.drain()

    assert geocoder.calls == []
    assert resolver.entry(1) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [None, "", "N/A", "  "])
async def test_absent_coordinates_are_skipped(raw, geocoder: FakeGeocoder) -> None:
    resolver = _resolver(geocoder)
    assert resolver.resolve_area(1, raw) is None
    assert resolver.entry(1) is None
    assert geocoder.calls == []


@pytest.mark.asyncio
async def test_geocoding_failure_stays_pending_without_retry() -> None:
    geocoder = FakeGeocoder(error=EnrichmentError("HTTP 429"))
    resolver = _resolver(geocoder)
    await resolver.resolve_area(1, COORDS)

    entry = resolver.entry(1)
    assert entry is not None
    assert entry.status is AreaStatus.pending
    assert resolver.areas() == {}

    assert resolver.resolve_area(1, COORDS) is None
    await resolver.drain()
    assert len(geocoder.calls) == 1


@pytest.mark.asyncio
async def test_each_lookup_is_delayed_before_calling_out(geocoder: FakeGeocoder) -> None:
    delays: list[float] = []

    async def record_sleep(seconds: float) -> None:
        delays.append(seconds)
        assert geocoder.calls == []

    resolver = AreaResolver(geocoder=geocoder, delay_seconds=1.0, sleep=record_sleep)
    resolver.resolve_area(1, COORDS)
    resolver.resolve_area(2, "24.80,67.03")
    await resolver.drain()

    assert delays == [1.0, 1.0]
    assert len(geocoder.calls) == 2


@pytest.mark.asyncio
async def test_stale_generation_result_is_discarded() -> None:
    gate = asyncio.Event()
    geocoder = FakeGeocoder(gate=gate)
    resolver = _resolver(geocoder)
    resolver.begin_generation(1)
    task = resolver.resolve_area(1, COORDS)
    await asyncio.sleep(0.01)
    assert geocoder.calls

    resolver.begin_generation(2)
    gate.set()
    await resolver.drain()

    assert task.cancelled()
    assert resolver.entry(1) is None
    assert resolver.areas() == {}


@pytest.mark.asyncio
async def test_same_order_is_never_looked_up_twice_at_once() -> None:
    gate = asyncio.Event()
    geocoder = FakeGeocoder(gate=gate)
    resolver = _resolver(geocoder)
    first = resolver.resolve_area(1, COORDS)
    await asyncio.sleep(0.01)
    assert geocoder.in_flight == 1

    resolver.begin_generation(1)
    second = resolver.resolve_area(1, COORDS)
    assert second is not None
    await asyncio.sleep(0.01)
    gate.set()
    await resolver.drain()

    assert first is not None and first.cancelled()
    assert geocoder.peak == 1
    assert len(geocoder.calls) == 2
    assert resolver.areas() == {"1": "Clifton"}


@pytest.mark.asyncio
async def test_keep_resolved_overrides_setting_for_one_generation(geocoder: FakeGeocoder) -> None:
    resolver = _resolver(geocoder)
    await resolver.resolve_area(1, COORDS)

    resolver.begin_generation(1, keep_resolved=True)
    assert resolver.areas() == {"1": "Clifton"}
    resolver.begin_generation(2)
    assert resolver.areas() == {}


@pytest.mark.asyncio
async def test_new_generation_clears_resolved_entries(geocoder: FakeGeocoder) -> None:
    resolver = _resolver(geocoder)
    await resolver.resolve_area(1, COORDS)
    resolver.begin_generation(1)

    assert resolver.areas() == {}
    await resolver.resolve_area(1, COORDS)
    assert len(geocoder.calls) == 2


@pytest.mark.asyncio
async def test_retained_entries_survive_only_for_returning_orders(geocoder: FakeGeocoder) -> None:
    resolver = _resolver(geocoder, retain_resolved=True)
    await resolver.resolve_area(1, COORDS)
    await resolver.resolve_area(2, COORDS)

    resolver.begin_generation(1)
    resolver.retain_only(["1", "3"])

    assert resolver.areas() == {"1": "Clifton"}
    assert resolver.resolve_area(1, COORDS) is None
    assert len(geocoder.calls) == 2


def test_area_field_precedence() -> None:
    address = {"city": "Karachi", "city_district": "Saddar", "neighbourhood": "Bath Island"}
    assert pick_area(address, fallback="x") == "Bath Island"
    assert pick_area({"city": "Karachi", "city_district": "Saddar"}, fallback="x") == "Saddar"
    assert pick_area({"city": "Karachi", "suburb": ""}, fallback="x") == "Karachi"
    assert pick_area({"road": "Sea View"}, fallback="x") == "x"


def test_parse_coordinates_trims_whitespace() -> None:
    assert parse_coordinates(" 24.8607 , 67.0011 ") == (24.8607, 67.0011)


@pytest.mark.asyncio
async def test_geocoding_client_request_and_errors() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.params["lat"] == "0.0":
            return httpx.Response(200, json={"error": "Unable to geocode"})
        if request.url.params["lat"] == "1.0":
            return httpx.Response(429)
        return httpx.Response(200, json={"address": {"suburb": "Clifton", "city": "Karachi"}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = GeocodingClient(http=http, url="https://geo.test/reverse", user_agent="ot-tests")
        address = await client.reverse(lat=24.8607, lon=67.0011)
        with pytest.raises(EnrichmentError):
            await client.reverse(lat=0.0, lon=0.0)
        with pytest.raises(EnrichmentError):
            await client.reverse(lat=1.0, lon=1.0)

    assert address["suburb"] == "Clifton"
    assert seen[0].url.params["format"] == "json"
    assert seen[0].url.params["lon"] == "67.0011"
    assert seen[0].headers["User-Agent"] == "ot-tests"


# --- Module Notes -----------------------------------------------------------
# FakeGeocoder gates let a test hold a lookup in flight across a generation change.
