# driverdash/earnings.py
from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable, Optional, Tuple

PERIODS = ("today", "month", "custom")


def distance_km(start_km: Optional[float], end_km: Optional[float]) -> float:
    """Driven distance; a lower end reading counts as zero, never negative."""
    return max(0.0, (end_km or 0.0) - (start_km or 0.0))


def calculate_total(
    start_km: Optional[float], end_km: Optional[float], wage: Optional[float], rate: float
) -> float:
    """
    Daily earnings = distance * rate + flat wage.
    No rounding here; currency formatting happens at display time.
    """
    return distance_km(start_km, end_km) * rate + (wage or 0.0)


def summarize(logs: Iterable) -> dict:
    days = 0
    total_km = 0.0
    total_wage = 0.0
    total_earnings = 0.0
    for log in logs:
        days += 1
        total_km += distance_km(log.start_km, log.end_km)
        total_wage += log.wage or 0.0
        total_earnings += log.total_earnings or 0.0
    return {
        "days": days,
        "total_km": total_km,
        "total_wage": total_wage,
        "total_earnings": total_earnings,
    }


def period_bounds(
    period: str, today: date, start: Optional[str] = None, end: Optional[str] = None
) -> Tuple[str, str]:
    """
    Inclusive (start, end) date strings for a summary period.
    'custom' needs both bounds; they are swapped if given in reverse.
    """
    if period == "today":
        return today.isoformat(), today.isoformat()
    if period == "month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return date(today.year, today.month, 1).isoformat(), date(today.year, today.month, last_day).isoformat()
    if period == "custom":
        if not start or not end:
            raise ValueError("Custom period needs both start and end")
        start_d = date.fromisoformat(start)
        end_d = date.fromisoformat(end)
        if end_d < start_d:
            start_d, end_d = end_d, start_d
        return start_d.isoformat(), end_d.isoformat()
    raise ValueError(f"Unknown period {period!r}, expected one of {', '.join(PERIODS)}")
