"""
order_tracker.domain

Domain package: order data model, time windows and workflow buckets.

Responsibilities:
- Pure, synchronous building blocks with no I/O.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Everything here is deterministic given its inputs, which keeps it trivially testable.
