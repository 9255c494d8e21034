# driverdash/roles.py
from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional, Tuple

# (max membership days, label); anything older is Expert
ROLE_TIERS: List[Tuple[int, str]] = [
    (30, "Beginner"),
    (90, "Senior"),
    (300, "Pro"),
]


def membership_days(created_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    if created_at is None:
        return 0
    now = now or datetime.utcnow()
    return math.ceil(abs((now - created_at).total_seconds()) / 86400)


def get_role(created_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    days = membership_days(created_at, now)
    for limit, label in ROLE_TIERS:
        if days <= limit:
            return label
    return "Expert"
