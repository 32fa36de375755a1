"""
order_tracker.clients.geocoding

Reverse-geocoding client (Nominatim-compatible).

Responsibilities:
- Look up a latitude/longitude pair and return the `address` breakdown.
- Normalize every failure mode into `EnrichmentError`.
"""

from __future__ import annotations

from typing import Any

import httpx

from order_tracker.errors import EnrichmentError


class GeocodingClient:
    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        url: str,
        user_agent: str,
    ) -> None:
        self._http = http
        self._url = url
        # Nominatim's usage policy rejects requests without an identifying User-Agent.
        self._headers = {"User-Agent": user_agent}

    async def reverse(self, *, lat: float, lon: float) -> dict[str, Any]:
        try:
            r = await self._http.get(
                self._url,
                params={"lat": lat, "lon": lon, "format": "json"},
                headers=self._headers,
            )
            r.raise_for_status()
            payload = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise EnrichmentError(f"reverse geocoding failed: {e}") from e

        if not isinstance(payload, dict):
            raise EnrichmentError("reverse geocoding returned a non-object payload")
        address = payload.get("address")
        if address is None:
            raise EnrichmentError("reverse geocoding response has no address")
        if not isinstance(address, dict):
            raise EnrichmentError("reverse geocoding address is not an object")
        return address
