from __future__ import annotations

from datetime import datetime
from typing import Callable


def local_now() -> datetime:
    return datetime.now().astimezone()


def day_key(timestamp: datetime) -> str:
    """Local calendar day of ``timestamp`` as ``YYYY-MM-DD``."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone()
    return timestamp.date().isoformat()


class Clock:
    def __init__(self, now: Callable[[], datetime] | None = None):
        self._now = now or local_now

    def now(self) -> datetime:
        return self._now()

    def today(self) -> str:
        return day_key(self.now())
