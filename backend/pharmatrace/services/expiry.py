"""
Expiry classification for stock views.

Tiers, by whole calendar days between today and the expiry date:
- expired:  expiry date already passed            (urgent)
- critical: 0..30 days left, "Expires in N days"  (urgent)
- warning:  31..90 days left, "N days left"
- normal:   more than 90 days, absolute date label

Both inputs are plain dates, so there is no time-of-day component to flip
a boundary. Callers pass `today` explicitly when they need determinism.
"""
import enum
from dataclasses import dataclass
from datetime import date
from typing import Optional

from pharmatrace.core.config import settings


class ExpiryTier(str, enum.Enum):
    EXPIRED = "expired"
    CRITICAL = "critical"
    WARNING = "warning"
    NORMAL = "normal"


URGENT_TIERS = frozenset({ExpiryTier.EXPIRED, ExpiryTier.CRITICAL})


@dataclass(frozen=True)
class ExpiryStatus:
    label: str
    tier: ExpiryTier
    urgent: bool
    days_until_expiry: int


def days_until(expiry_date: date, today: date) -> int:
    return (expiry_date - today).days


def format_expiry_date(value: date) -> str:
    """Absolute label, e.g. "Mar 05, 2027"."""
    return value.strftime("%b %d, %Y")


def classify(
    expiry_date: date,
    today: Optional[date] = None,
    critical_days: Optional[int] = None,
    warning_days: Optional[int] = None,
) -> ExpiryStatus:
    today = today or date.today()
    critical_days = settings.EXPIRY_CRITICAL_DAYS if critical_days is None else critical_days
    warning_days = settings.EXPIRY_WARNING_DAYS if warning_days is None else warning_days

    days = days_until(expiry_date, today)

    if expiry_date < today:
        tier, label = ExpiryTier.EXPIRED, "Expired"
    elif days <= critical_days:
        tier, label = ExpiryTier.CRITICAL, f"Expires in {days} days"
    elif days <= warning_days:
        tier, label = ExpiryTier.WARNING, f"{days} days left"
    else:
        tier, label = ExpiryTier.NORMAL, format_expiry_date(expiry_date)

    return ExpiryStatus(label=label, tier=tier, urgent=tier in URGENT_TIERS, days_until_expiry=days)
