"""Expiry and stock classification for grocery items.

Pure functions shared by the API endpoints, the summary aggregation and the
background tasks. Nothing in this module touches the database. The only
function that reads the clock is ``local_today``; everything else takes
``today`` as an argument so results are reproducible.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, Protocol
from zoneinfo import ZoneInfo

from freshtrack.models.enums import ExpiryStatus, ItemStatus, Urgency

if TYPE_CHECKING:
    from freshtrack.config import Settings

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class ExpiryPolicy:
    """Thresholds used by the classifiers.

    Defaults match the documented behaviour; deployments override them through
    settings and tests construct their own instances.
    """

    critical_days: int = 2
    warning_days: int = 5
    attention_days: int = 10
    alert_window_days: int = 3
    expiring_soon_days: int = 7
    default_low_stock_threshold: float = 5
    notification_retention_days: int = 30

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ExpiryPolicy":
        """Build a policy from application settings."""
        return cls(
            critical_days=settings.expiry_critical_days,
            warning_days=settings.expiry_warning_days,
            attention_days=settings.expiry_attention_days,
            alert_window_days=settings.expiry_alert_window_days,
            expiring_soon_days=settings.expiring_soon_days,
            default_low_stock_threshold=settings.default_low_stock_threshold,
            notification_retention_days=settings.notification_retention_days,
        )


DEFAULT_POLICY = ExpiryPolicy()


class TrackedItem(Protocol):
    """What the classifiers need to know about an item.

    ``GroceryItem`` rows satisfy this, as does any object with these attributes.
    """

    id: int
    user_id: int
    name: str
    quantity: float
    expiry_date: date | None
    low_stock_threshold: float | None


@dataclass(frozen=True)
class ExpiryClassification:
    """Result of classifying one item."""

    status: ExpiryStatus
    days_remaining: int | None
    urgency: Urgency


# --- Date math ---


def start_of_day(value: date | datetime) -> date:
    """Drop the time-of-day component of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Signed number of calendar days from ``start`` to ``end``.

    Both ends are normalized to the start of their day first, then the
    absolute difference is rounded up, so anything due tomorrow counts as one
    day away even if it is less than 24 hours off.
    """
    delta = datetime.combine(start_of_day(end), time.min) - datetime.combine(
        start_of_day(start), time.min
    )
    days = math.ceil(abs(delta) / ONE_DAY)
    return days if delta >= timedelta(0) else -days


def local_today(tz_name: str = "UTC") -> date:
    """Today's date in the given IANA time zone."""
    return datetime.now(ZoneInfo(tz_name)).date()


# --- Classifiers ---


def status_for_days(days_remaining: int, policy: ExpiryPolicy = DEFAULT_POLICY) -> ExpiryStatus:
    """Map a day count to its expiry bucket."""
    if days_remaining < 0:
        return ExpiryStatus.EXPIRED
    if days_remaining == 0:
        return ExpiryStatus.EXPIRES_TODAY
    if days_remaining <= policy.critical_days:
        return ExpiryStatus.CRITICAL
    if days_remaining <= policy.warning_days:
        return ExpiryStatus.WARNING
    if days_remaining <= policy.attention_days:
        return ExpiryStatus.ATTENTION
    return ExpiryStatus.FRESH


URGENCY_BY_STATUS: dict[ExpiryStatus, Urgency] = {
    ExpiryStatus.EXPIRED: Urgency.CRITICAL,
    ExpiryStatus.EXPIRES_TODAY: Urgency.CRITICAL,
    ExpiryStatus.CRITICAL: Urgency.CRITICAL,
    ExpiryStatus.WARNING: Urgency.WARNING,
    ExpiryStatus.ATTENTION: Urgency.NORMAL,
    ExpiryStatus.FRESH: Urgency.NONE,
    ExpiryStatus.NO_EXPIRY: Urgency.NONE,
    ExpiryStatus.CONSUMED: Urgency.NONE,
}


def classify_expiry(
    quantity: float,
    expiry_date: date | datetime | None,
    today: date | datetime,
    policy: ExpiryPolicy = DEFAULT_POLICY,
) -> ExpiryClassification:
    """Classify an item by quantity and expiry date.

    An empty item is ``consumed`` whatever its date; an item without an
    expiry date is ``no_expiry``. Otherwise the day count picks the bucket.
    """
    if quantity == 0:
        return ExpiryClassification(ExpiryStatus.CONSUMED, None, Urgency.NONE)
    if expiry_date is None:
        return ExpiryClassification(ExpiryStatus.NO_EXPIRY, None, Urgency.NONE)

    days_remaining = days_between(today, expiry_date)
    status = status_for_days(days_remaining, policy)
    return ExpiryClassification(status, days_remaining, URGENCY_BY_STATUS[status])


def classify_item(
    item: TrackedItem,
    today: date | datetime,
    policy: ExpiryPolicy = DEFAULT_POLICY,
) -> ExpiryClassification:
    """Classify a tracked item."""
    return classify_expiry(item.quantity, item.expiry_date, today, policy)


def is_low_stock(
    quantity: float,
    threshold: float | None = None,
    policy: ExpiryPolicy = DEFAULT_POLICY,
) -> bool:
    """Quantity at or below the threshold counts as low stock."""
    if threshold is None:
        threshold = policy.default_low_stock_threshold
    return quantity <= threshold


# --- Lifecycle ---


def derive_status(
    status: ItemStatus | str,
    quantity: float,
    expiry_date: date | datetime | None,
    today: date | datetime,
) -> ItemStatus:
    """Recompute an item's lifecycle status after a mutation.

    Only ``active`` items move: to ``consumed`` when empty, to ``expired``
    when still stocked past the expiry date. Other statuses are terminal here.
    """
    current = ItemStatus(status)
    if current.is_terminal():
        return current
    if quantity <= 0:
        return ItemStatus.CONSUMED
    if expiry_date is not None and days_between(today, expiry_date) < 0:
        return ItemStatus.EXPIRED
    return ItemStatus.ACTIVE
