"""
order_tracker.domain.windows

Named lookback windows and their resolution to an absolute fetch boundary.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta

from order_tracker.errors import ConfigError

BOUNDARY_FORMAT = "%Y-%m-%dT%H:%M:%S"


class TimeWindow(enum.StrEnum):
    daily = "daily"
    three_days = "3day"
    weekly = "weekly"
    monthly = "monthly"


@dataclass(frozen=True, slots=True)
class WindowSpec:
    window: TimeWindow
    label: str
    lookback_days: int
    # Used in "Scanning orders for ..." style loading messages.
    description: str


WINDOWS: dict[TimeWindow, WindowSpec] = {
    TimeWindow.daily: WindowSpec(TimeWindow.daily, "Daily", 0, "today"),
    TimeWindow.three_days: WindowSpec(TimeWindow.three_days, "3 Days", 3, "last 3 days"),
    TimeWindow.weekly: WindowSpec(TimeWindow.weekly, "Weekly", 7, "last week"),
    TimeWindow.monthly: WindowSpec(TimeWindow.monthly, "Monthly", 30, "last month"),
}

DEFAULT_WINDOW = TimeWindow.daily


def parse_window(name: str | TimeWindow) -> TimeWindow:
    """
    Accept a window id ("3day") or its label ("3 Days"), case-insensitively.
    """

    if isinstance(name, TimeWindow):
        return name
    wanted = str(name).strip().lower()
    for spec in WINDOWS.values():
        if wanted in (spec.window.value, spec.label.lower()):
            return spec.window
    raise ConfigError(f"unknown time window: {name!r}")


def resolve_boundary(window: str | TimeWindow, now: datetime) -> datetime:
    """
    Start of the day `lookback_days` before `now` (0 means start of today).

    Pure: the same `now` always yields the same boundary.
    """

    spec = WINDOWS[parse_window(window)]
    day = now - timedelta(days=spec.lookback_days)
    return day.replace(hour=0, minute=0, second=0, microsecond=0)


def format_boundary(boundary: datetime) -> str:
    # The order API expects a local timestamp with no zone suffix.
    return boundary.strftime(BOUNDARY_FORMAT)
