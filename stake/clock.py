"""stake/clock.py

Suspension primitives used by the activation waiter.

Two kinds of waiting are kept apart:
- slot-aligned sleeps, converted to wall-clock time from the epoch schedule
- fixed wall-clock backoff for retrying missing data
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from .models import EpochSchedule

logger = logging.getLogger(__name__)


def slots_to_seconds(n_slots: int, schedule: EpochSchedule) -> float:
    """Convert a slot count to seconds using the schedule's tick timing."""
    if n_slots < 0:
        raise ValueError(f"n_slots must be non-negative, got {n_slots}")
    return n_slots * schedule.slot_duration_s


def sleep_n_slots(
    n_slots: int,
    schedule: EpochSchedule,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Block for roughly `n_slots` slots."""
    seconds = slots_to_seconds(n_slots, schedule)
    logger.info(f"[clock] Sleeping {n_slots} slots ({seconds:.1f}s)")
    sleep(seconds)


def sleep_seconds(seconds: float, sleep: Callable[[float], None] = time.sleep) -> None:
    logger.debug(f"[clock] Backing off {seconds:.1f}s")
    sleep(seconds)
