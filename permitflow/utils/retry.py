from __future__ import annotations

import asyncio
import random


def compute_backoff(attempt: int, base: float = 0.05, jitter: float = 0.05) -> float:
    """Compute exponential backoff with jitter for a save retry."""
    delay = base * (2 ** attempt)
    return delay + random.uniform(0, jitter)


async def schedule_retry(attempt: int) -> None:
    """Sleep for computed backoff delay before retrying a conflicted save."""
    delay = compute_backoff(attempt)
    await asyncio.sleep(delay)
