"""
order_tracker.errors

Domain exceptions shared by the pipeline.

Responsibilities:
- `ConfigError`: programmer/configuration mistakes, fail fast.
- `FetchError`: order source failures, surfaced to the user with a retry affordance.
- `EnrichmentError`: coordinate/geocoding failures, logged and swallowed per order.
"""

from __future__ import annotations


class OrderTrackerError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(OrderTrackerError):
    pass


class FetchError(OrderTrackerError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class EnrichmentError(OrderTrackerError):
    pass


# --- Module Notes -----------------------------------------------------------
# Only FetchError reaches the read model; the other two never cross the service layer.
