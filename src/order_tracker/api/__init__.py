"""
order_tracker.api

API package for the Order Tracker service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: request validation + delegation to the controller.
