"""
order_tracker.clients

HTTP client package for the two external systems the dashboard consumes.

Responsibilities:
- Order source: authenticated, bounded fetch of recent orders.
- Geocoder: reverse lookup of coordinates into an address breakdown.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services depend on this boundary (not on httpx directly), so tests can swap transports.
