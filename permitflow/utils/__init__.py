from .clock import Clock, hours_between, utc_now
from .locks import KeyedLock
from .numbers import round_half_up
from .retry import compute_backoff, schedule_retry

__all__ = [
    "Clock",
    "KeyedLock",
    "compute_backoff",
    "hours_between",
    "round_half_up",
    "schedule_retry",
    "utc_now",
]
