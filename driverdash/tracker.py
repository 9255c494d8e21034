# driverdash/tracker.py
"""
Austria time accumulator.

One row per (user, date) is either Idle (not active, no start timestamp) or
Running (active, start timestamp in epoch milliseconds). Elapsed time is
always derived from two timestamps; nothing in storage ticks.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple


@dataclass(frozen=True)
class TimerState:
    total_seconds: int = 0
    is_active: bool = False
    last_start_timestamp: Optional[int] = None

    def __post_init__(self):
        if self.is_active != (self.last_start_timestamp is not None):
            raise ValueError("An active timer needs a start timestamp, an idle one must not have it")


@dataclass(frozen=True)
class ClosedInterval:
    start_time: int
    end_time: int
    duration: int


def now_ms() -> int:
    return int(time.time() * 1000)


def date_of(epoch_ms: int) -> str:
    """Calendar date (UTC) for an epoch-ms timestamp."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).date().isoformat()


def elapsed_seconds(start_ms: int, end_ms: int) -> int:
    return max(0, (end_ms - start_ms) // 1000)


def displayed_seconds(state: TimerState, at_ms: int) -> int:
    if state.is_active:
        return state.total_seconds + elapsed_seconds(state.last_start_timestamp, at_ms)
    return state.total_seconds


def toggle(state: TimerState, at_ms: int) -> Tuple[TimerState, Optional[ClosedInterval]]:
    """
    Idle -> Running records `at_ms` as the start.
    Running -> Idle adds the whole seconds elapsed and closes one interval.
    """
    if not state.is_active:
        return TimerState(state.total_seconds, True, at_ms), None

    added = elapsed_seconds(state.last_start_timestamp, at_ms)
    interval = ClosedInterval(start_time=state.last_start_timestamp, end_time=at_ms, duration=added)
    return TimerState(state.total_seconds + added, False, None), interval
