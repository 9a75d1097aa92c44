from __future__ import annotations

import random
from dataclasses import dataclass, replace

from .models import Settings
from .quota import next_quota


@dataclass(frozen=True)
class RolloverResult:
    settings: Settings
    did_roll: bool


def check_rollover(settings: Settings, today: str, rng: random.Random) -> RolloverResult:
    """Regenerate the daily quota when ``today`` differs from the stored day key.

    Idempotent for a given stored day key and current day. Callers must drop any
    live prompt or pending summary when ``did_roll`` is true.
    """
    if settings.last_generated_date == today:
        return RolloverResult(settings=settings, did_roll=False)

    quota = next_quota(settings.min_notifications, settings.max_notifications, rng)
    rolled = replace(settings, notifications_today=quota, last_generated_date=today)
    return RolloverResult(settings=rolled, did_roll=True)
