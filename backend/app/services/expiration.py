"""
Expiration status classification for pantry items.

Two windows exist for "soon":
- settings.expiring_soon_days (3) drives item status, the expiration_status
  query filter and the inventory stats.
- settings.filter_soon_days (7) drives the in-memory list filter used by the
  client-facing filter pipeline.
"""

import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from app.core.config import settings
from app.core.utils import to_naive_utc


class ExpirationStatus(str, Enum):
    UNKNOWN = "unknown"
    EXPIRED = "expired"
    SOON = "soon"
    OK = "ok"


def utcnow() -> datetime:
    return datetime.utcnow()


def days_until_expiration(expiration_date: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """
    Whole days left until expiration, rounded up.

    Within the first day after expiring this is still 0 while
    classify_expiration already says EXPIRED; it goes negative after that.
    """
    if expiration_date is None:
        return None
    now = to_naive_utc(now) or utcnow()
    diff = to_naive_utc(expiration_date) - now
    return math.ceil(diff.total_seconds() / 86400)


def classify_expiration(
    expiration_date: Optional[datetime],
    now: Optional[datetime] = None,
    soon_days: Optional[int] = None,
) -> ExpirationStatus:
    if expiration_date is None:
        return ExpirationStatus.UNKNOWN

    now = to_naive_utc(now) or utcnow()
    if soon_days is None:
        soon_days = settings.expiring_soon_days
    expiration_date = to_naive_utc(expiration_date)

    if expiration_date < now:
        return ExpirationStatus.EXPIRED
    if expiration_date <= now + timedelta(days=soon_days):
        return ExpirationStatus.SOON
    return ExpirationStatus.OK
