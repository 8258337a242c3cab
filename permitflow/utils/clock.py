from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from ..constants import SECONDS_PER_HOUR

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours from ``start`` to ``end``."""
    return (end - start).total_seconds() / SECONDS_PER_HOUR
