"""
order_tracker.services

Service-layer package.

Responsibilities:
- Own the mutable state of the dashboard (loaded orders, area cache).
- Schedule background work on the event loop and discard stale results.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable with fake clients.
