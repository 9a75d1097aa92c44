from __future__ import annotations

from dataclasses import replace

from .models import Settings

MIN_FLOOR = 1
MIN_CEILING = 98
MAX_CEILING = 99

MIN_INPUT_FALLBACK = 1
MAX_INPUT_FALLBACK = 2


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def with_min(settings: Settings, value: int) -> Settings:
    value = clamp(int(value), MIN_FLOOR, MIN_CEILING)
    return replace(settings, min_notifications=min(value, settings.max_notifications))


def with_max(settings: Settings, value: int) -> Settings:
    value = clamp(int(value), MIN_FLOOR, MAX_CEILING)
    return replace(settings, max_notifications=max(value, settings.min_notifications))


def with_range(settings: Settings, low: int, high: int) -> Settings:
    """Apply a min and max edited together, checking them against each other rather than the old values."""
    high = clamp(int(high), MIN_FLOOR, MAX_CEILING)
    low = min(clamp(int(low), MIN_FLOOR, MIN_CEILING), high)
    return replace(settings, min_notifications=low, max_notifications=high)


def normalize(settings: Settings) -> Settings:
    """Repair a loaded record so that ``1 <= min <= max`` and the quota is non-negative."""
    low = max(MIN_FLOOR, settings.min_notifications)
    high = max(low, settings.max_notifications)
    return replace(
        settings,
        min_notifications=low,
        max_notifications=high,
        notifications_today=max(0, settings.notifications_today),
    )


def parse_count(raw: str, fallback: int) -> int:
    try:
        return int(str(raw).strip())
    except ValueError:
        return fallback
